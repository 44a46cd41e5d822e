"""
Ledger error types.
"""


class LedgerError(Exception):
    """Base class for errors raised by the ledger services."""


class ValidationError(LedgerError, ValueError):
    """Request rejected before any write took place."""


class NotFoundError(LedgerError):
    """An addressed trip, expense or split does not exist."""

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found")
        self.resource = resource
