"""Domain error taxonomy.

Services raise these; ``src.api.errors`` turns them into JSON responses.
Nothing here knows about HTTP frameworks beyond the status code each
error maps to.
"""
from typing import Dict, List, Optional


class KanbanError(Exception):
    """Base class for every error the API reports to clients"""

    status_code: int = 400
    code: Optional[str] = None
    message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.message
        super().__init__(self.message)

    def to_dict(self) -> dict:
        body = {"message": self.message}
        if self.code:
            body["error"] = {"code": self.code}
        return body


class ValidationFailed(KanbanError):
    """Malformed or missing input, reported per field"""

    status_code = 422
    code = "VALIDATION_FAILED"
    message = "The given data was invalid"

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None):
        super().__init__(message)
        self.errors = errors

    @classmethod
    def for_field(cls, field: str, error: str) -> "ValidationFailed":
        return cls({field: [error]})

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["errors"] = self.errors
        return body


class Unauthenticated(KanbanError):
    status_code = 401
    message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    message = "Invalid credentials"


class InvalidToken(Unauthenticated):
    # Same wording for unknown, expired and revoked tokens
    message = "Invalid or expired token"


class InvalidOrExpiredRefreshToken(InvalidToken):
    pass


class Forbidden(KanbanError):
    status_code = 403
    message = "Only the board owner can perform this action"


class NotFound(KanbanError):
    status_code = 404
    message = "Resource not found"


class WipLimitReached(KanbanError):
    status_code = 422
    code = "WIP_LIMIT_REACHED"
    message = "Column WIP limit reached"

    def __init__(self, column_id: int, wip_limit: int):
        super().__init__(f"Column {column_id} already holds its WIP limit of {wip_limit} cards")
        self.column_id = column_id
        self.wip_limit = wip_limit


class SameColumnMove(KanbanError):
    status_code = 400
    code = "SAME_COLUMN"
    message = "Card is already in the target column"
