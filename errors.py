"""
Error taxonomy for the movie proxy API
Every failure a route can report is an ApiError subclass; the HTTP status
comes from STATUS_CODES only.
"""


class ApiError(Exception):
    """Base class for errors that map to a JSON error response"""
    message = 'Internal server error'

    def __init__(self, message=None):
        super().__init__(message or self.message)
        if message:
            self.message = message


class ValidationError(ApiError):
    message = 'Invalid request'


class UpstreamError(ApiError):
    """TMDB unreachable or answered with a non-2xx status"""
    message = 'Error fetching data from the movie catalog'

    def __init__(self, message=None, status=None):
        super().__init__(message)
        self.status = status


class NotFoundError(ApiError):
    message = 'Not found'


class UserNotFoundError(NotFoundError):
    message = 'User not found'


class AuthError(ApiError):
    message = 'Authentication required'


class MissingTokenError(AuthError):
    message = 'Missing authorization token'


class InvalidTokenError(AuthError):
    message = 'Invalid or expired token'


class InvalidCredentialError(ApiError):
    message = 'Invalid credentials'


class DuplicateEmailError(ApiError):
    message = 'Email already registered'


# Lookup walks the MRO of the raised error; subclasses inherit their parent's status.
STATUS_CODES = {
    ValidationError: 400,
    MissingTokenError: 401,
    InvalidCredentialError: 401,
    InvalidTokenError: 403,
    AuthError: 401,
    NotFoundError: 404,
    DuplicateEmailError: 500,
    UpstreamError: 500,
    ApiError: 500,
}


def status_for(error: ApiError) -> int:
    for cls in type(error).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_response(error: ApiError):
    """Body and status for an ApiError, ready to hand to jsonify"""
    return {'error': error.message}, status_for(error)
