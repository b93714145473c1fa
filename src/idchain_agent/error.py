"""Ledger related errors."""


class LedgerError(Exception):
    """Raised on general ledger errors."""


class LedgerConfigError(LedgerError):
    """Raised on error configuring or opening the pool ledger."""


class ClosedPoolError(LedgerError):
    """Raised when a ledger operation is attempted on a pool that is not open."""


class BadLedgerRequestError(LedgerError):
    """Raised when a ledger request cannot be built from the given arguments."""


class LedgerObjectNotFoundError(LedgerError):
    """Raised when a queried ledger object is not present on the ledger."""


class LedgerRequestError(LedgerError):
    """Raised when the ledger rejects a request.

    Carries an HTTP equivalent status and the reason supplied by the ledger.
    """

    def __init__(self, message: str, status: int = 400):
        """Init exception."""
        super().__init__(message)
        self.message = message
        self.status = status
