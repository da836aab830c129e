# healthconnect/errors.py
from fastapi import status


class HealthConnectError(Exception):
    """Base for domain errors; ``main`` renders them as ``{"detail": ...}``."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Internal server error"

    def __init__(self, detail=None):
        self.detail = detail if detail is not None else self.default_detail
        super().__init__(self.detail)


class ValidationError(HealthConnectError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Invalid request"


class DuplicateEmail(HealthConnectError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "User already exists"


class InvalidCredentials(HealthConnectError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid credentials or user not found"


class WrongPortal(HealthConnectError):
    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, role: str):
        super().__init__(f"Access denied. Please log in through the {role} portal.")


class Forbidden(HealthConnectError):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = "Forbidden"


class RoleMismatch(Forbidden):
    default_detail = "Role mismatch for this profile"


class NotFound(HealthConnectError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Not found"


class StoreFault(HealthConnectError):
    default_detail = "Database error"
