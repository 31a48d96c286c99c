"""Domain exceptions shared by the services and translated to HTTP by controllers."""


class UploadValidationError(ValueError):
    """Raised when an uploaded file fails the type or size gate."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidTransitionError(RuntimeError):
    """Raised when an operation is not allowed in the current state."""


class AnalysisFailedError(RuntimeError):
    """Raised when the remote classifier cannot produce a valid result."""


class ChatFailedError(RuntimeError):
    """Raised when the remote chat service cannot produce a reply."""


class RecordNotFoundError(KeyError):
    """Raised when a history record id is unknown."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Record not found"
