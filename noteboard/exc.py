"""Exceptions raised by Note Board."""


class SyncError(Exception):
    """Exception raised when a call to the backend of record fails."""

    def __init__(
        self,
        operation: str,
        detail: str,
        status_code: int | None = None,
    ):
        self.operation = operation
        self.detail = detail
        self.status_code = status_code
        status = f" (HTTP {status_code})" if status_code is not None else ""
        super().__init__(f"{operation} failed{status}: {detail}")


class MergeAborted(Exception):  # noqa: N818
    """Exception raised when a merge of two notes cannot go ahead."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Merge aborted: {reason}")
