class AppError(Exception):
    """Base class for all application exceptions."""

    code = "app_error"

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class ScheduleValidationError(AppError):
    """Raised when a day, slot or room reference is malformed or inconsistent."""

    code = "validation_error"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""

    code = "not_found"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id {resource_id} not found",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class AuthenticationError(AppError):
    """Raised when the bearer token is missing, invalid or names an unknown user."""

    code = "unauthorized"

    def __init__(self, message: str = "Could not validate credentials"):
        super().__init__(message, status_code=401)


class ForbiddenError(AppError):
    """Raised when the acting user may not perform the operation."""

    code = "forbidden"

    def __init__(self, message: str = "Insufficient permissions"):
        super().__init__(message, status_code=403)


class DuplicateRequestError(AppError):
    """Raised when a pending change request already exists for the entry."""

    code = "duplicate_request"

    def __init__(self, entry_id: str, existing_request_id: str | None = None):
        super().__init__(
            "A pending change request already exists for this schedule entry",
            status_code=409,
            details={"schedule_entry_id": entry_id, "existing_request_id": existing_request_id},
        )


class InvalidStateError(AppError):
    """Raised when a change request is not in a state that allows the transition."""

    code = "invalid_state"

    def __init__(self, request_id: str, current_status: str, action: str):
        super().__init__(
            f"Cannot {action} a change request that is {current_status}",
            status_code=409,
            details={"request_id": request_id, "status": current_status, "action": action},
        )


class PlacementConflictError(AppError):
    """Raised when an authoritative conflict check finds collisions."""

    code = "conflict"

    def __init__(self, conflicts: list[dict]):
        super().__init__(
            "The requested placement conflicts with existing schedule entries",
            status_code=409,
            details={"conflicts": conflicts},
        )
        self.conflicts = conflicts


class LockedScheduleError(AppError):
    """Raised when the schedule no longer accepts edits."""

    code = "locked_schedule"

    def __init__(self, schedule_id: str):
        super().__init__(
            "Schedule is locked and no longer accepts edits",
            status_code=423,
            details={"schedule_id": schedule_id},
        )


class InvariantViolationError(AppError):
    """Raised when stored data breaks an internal invariant. Detail stays server-side."""

    code = "internal_error"

    def __init__(self, message: str, context: dict = None):
        super().__init__("The request could not be completed", status_code=500)
        self.internal_message = message
        self.context = context or {}
