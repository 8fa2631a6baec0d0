from typing import Any, Dict, List, Optional


class ApiError(Exception):
    """Base class for errors that map onto an error_response"""

    status_code = 500
    default_message = "Something went wrong"

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details or {}
        super().__init__(self.message)

    @property
    def reason(self) -> str:
        return type(self).__name__


class ValidationError(ApiError):
    status_code = 400
    default_message = "Bad Request"


class InvalidDirection(ValidationError):
    default_message = "Invalid swipe direction"


class InvalidTarget(ValidationError):
    default_message = "Invalid user ID"


class SelfSwipeRejected(ValidationError):
    default_message = "Cannot swipe on yourself"


class NotFoundError(ApiError):
    status_code = 404
    default_message = "Not Found"


class DuplicateSwipe(ApiError):
    status_code = 409
    default_message = "Already swiped on this user"


class BatchFailed(ApiError):
    """Every item of a swipe batch was rejected"""

    status_code = 400
    default_message = "Failed to create any swipes"

    def __init__(self, errors: List[Dict[str, Any]], message: Optional[str] = None):
        super().__init__(message, {'errors': errors})
        self.errors = errors
