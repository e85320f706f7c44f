"""Shared helpers for ledger tests."""

from runledger.core.transaction import MonotonicClock


T0 = "2024-05-01T10:00:00+00:00"
T1 = "2024-05-01T11:00:00+00:00"
T2 = "2024-05-01T12:00:00+00:00"


class ManualClock(MonotonicClock):
    """Clock returning whatever timestamp the test sets."""

    def __init__(self, current: str = T0):
        super().__init__()
        self.current = current

    def now_iso(self) -> str:
        return self.current


async def fetch(engine, table: str, key: str):
    """Read one committed row through a fresh transaction."""
    async with engine.transaction() as ctx:
        return await getattr(ctx, table).find(key)


async def dump(engine):
    """All committed rows of every table, keyed by table name."""
    async with engine.transaction() as ctx:
        return {
            "templates": sorted(await ctx.templates.scan(), key=lambda r: r.id),
            "runs": sorted(await ctx.runs.scan(), key=lambda r: r.id),
            "run_payloads": sorted(await ctx.run_payloads.scan(), key=lambda r: r.run_id),
        }
