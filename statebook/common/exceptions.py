from fastapi import HTTPException, status


class StatebookException(HTTPException):
    def __init__(self, detail, status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR):
        super().__init__(status_code=status_code, detail=detail)


class NotFoundError(StatebookException):
    def __init__(self, resource: str, resource_id: str | None = None):
        detail = f"{resource} not found"
        if resource_id:
            detail = f"{resource} '{resource_id}' not found"
        super().__init__(detail=detail, status_code=status.HTTP_404_NOT_FOUND)


class ValidationError(StatebookException):
    """Malformed or missing input, reported with per-field messages."""

    def __init__(self, message: str, fields: dict[str, list[str]] | None = None):
        self.message = message
        self.fields = fields or {}
        super().__init__(
            detail={"message": message, "fields": self.fields},
            status_code=status.HTTP_400_BAD_REQUEST,
        )

    @classmethod
    def for_field(cls, field: str, message: str) -> "ValidationError":
        return cls(message, {field: [message]})


class UploadError(StatebookException):
    def __init__(self, detail: str, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(detail=detail, status_code=status_code)


class PersistenceError(StatebookException):
    def __init__(self, detail: str = "Failed to save changes"):
        super().__init__(detail=detail, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)
