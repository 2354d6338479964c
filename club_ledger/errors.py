"""
Ledger error taxonomy.

Every error carries a stable code, a human message and the
HTTP status the API layer should answer with. Services raise
these; routers translate them into HTTP responses.

Code ranges:
  1xxx: Validation
  2xxx: Lookup
  9xxx: Storage
"""


class LedgerError(Exception):
    """Base class for all errors raised by the ledger engine."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


class ValidationError(LedgerError):
    """Bad input. Always raised before anything is written."""

    def __init__(self, message: str) -> None:
        super().__init__(1001, message, 400)


class NotFoundError(LedgerError):
    def __init__(self, message: str) -> None:
        super().__init__(2001, message, 404)


class StorageError(LedgerError):
    """The persistence layer rejected a read or write. Not retried here."""

    def __init__(self, message: str) -> None:
        super().__init__(9001, f"Storage failure: {message}", 503)
