# backend/utils/errors.py
from fastapi import status


class ApiError(Exception):
    """Business error carrying the HTTP status and the message shown to the client."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    message = "Internal Server Error"
    code = None

    def __init__(self, message: str = None, detail=None):
        self.message = message or self.message
        self.detail = detail
        if self.code is None:
            self.code = type(self).__name__
        super().__init__(self.message)


# --- 400 ---
class ValidationError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Invalid request data"


class MissingRequiredField(ValidationError):
    message = "A required field is missing"


class InvalidRequest(ValidationError):
    message = "Invalid request"


class DuplicateEmail(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Email already in use"


class DuplicateLicense(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "License number already in use"


class AlreadyAssigned(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    message = "Doctor is already assigned to this patient"


# --- 401 ---
class InvalidCredentials(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid credentials"


class AuthenticationRequired(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "No token provided, authorization denied"


class InvalidToken(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Invalid token"


class ExpiredToken(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    message = "Token has expired"


# --- 403 / 404 / 500 ---
class Forbidden(ApiError):
    status_code = status.HTTP_403_FORBIDDEN
    message = "Not authorized to access this resource"


class NotFound(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    message = "Resource not found"


class InternalError(ApiError):
    code = "Internal"
