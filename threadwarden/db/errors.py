"""Store error hierarchy for thread store backends.

Store implementations wrap backend-specific errors in one of these so the
gate and sweeper never depend on driver exception types.
"""


class StoreError(Exception):
    """Base exception for all store errors."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConnectionError(StoreError):
    """Raised when the store cannot be reached or a query fails.

    Examples:
        - Database connection timeout
        - Pool exhausted or closed
        - Driver-level query errors
    """

    pass


class SchemaError(StoreError):
    """Raised when the schema cannot be ensured at startup.

    Always fatal: the service must not run against a missing table.
    """

    pass
