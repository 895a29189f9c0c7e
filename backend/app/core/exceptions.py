class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        self.code = code
        super().__init__(self.message)

    def to_content(self) -> dict:
        return {"message": self.message, "code": self.code, "details": self.details}


class ResourceNotFoundError(AppError):
    """Raised when a requested or referenced resource does not exist."""
    def __init__(self, resource_type: str, resource_id: str):
        code = f"{resource_type.upper().replace(' ', '_')}_NOT_FOUND"
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
            code=code,
        )


class ScheduleConflictError(AppError):
    """Raised when a schedule write would double-book a teacher or classroom.

    ``conflicts`` holds the serialized conflict groups so the client can show
    which existing entries collided and why.
    """
    def __init__(self, conflicts: list[dict]):
        self.conflicts = conflicts
        super().__init__("Scheduling conflicts detected", status_code=409, code="SCHEDULE_CONFLICT")

    def to_content(self) -> dict:
        content = super().to_content()
        content["conflicts"] = self.conflicts
        return content
