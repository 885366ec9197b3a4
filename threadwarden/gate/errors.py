"""Gate errors."""


class ThreadOpenError(Exception):
    """A thread was opened but could not be recorded.

    Raised after the opened thread has been deleted again (or the deletion
    attempt failed and was logged). The store failure is kept as cause.
    """

    def __init__(
        self,
        message: str,
        user_id: str,
        thread_id: str,
        cause: Exception | None = None,
        compensated: bool = True,
    ) -> None:
        super().__init__(message)
        self.user_id = user_id
        self.thread_id = thread_id
        self.cause = cause
        self.compensated = compensated
