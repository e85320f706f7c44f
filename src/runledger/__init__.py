"""runledger - transactional ledger for document-extraction runs."""

__version__ = "1.0.0"
