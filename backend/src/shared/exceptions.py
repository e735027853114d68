class AppError(Exception):
    """Base exception for application errors."""

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(AppError):
    """Raised when a requested resource does not exist."""

    def __init__(self, resource: str = "Resource", id: str = ""):
        super().__init__(f"{resource} not found: {id}" if id else f"{resource} not found")


class ConflictError(AppError):
    """Raised when a write was based on a stale version of the document."""

    def __init__(self, message: str = "Resource was modified by another user"):
        super().__init__(message)


class LockConflictError(ConflictError):
    """Raised when an edit is attempted while another user holds the lock."""

    def __init__(self, document_id: str, locked_by: str):
        self.document_id = document_id
        self.locked_by = locked_by
        super().__init__(f"Document {document_id} is locked by {locked_by}")


class MalformedChangeError(AppError):
    """Raised when a change op falls outside the bounds of the text it applies to."""

    def __init__(self, message: str, op_index: int | None = None):
        self.op_index = op_index
        if op_index is not None:
            message = f"op {op_index}: {message}"
        super().__init__(message)


class VersionNotFoundError(AppError):
    """Raised when a requested version is negative or beyond the change log."""

    def __init__(self, version: int, current_version: int):
        self.version = version
        self.current_version = current_version
        super().__init__(
            f"Version {version} not found (current version is {current_version})"
        )


class AuthenticationError(AppError):
    """Raised when credentials are invalid."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message)

