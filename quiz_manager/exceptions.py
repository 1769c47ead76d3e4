"""
Domain errors raised by the service layer

Every error is recoverable at the API boundary: the exception handler in
main translates it to a JSON body using `code` and `status_code`.
"""


class QuizAppError(Exception):
    """Base class for expected, user-facing failures"""

    status_code = 400
    code = "quiz_app_error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DuplicateIdentity(QuizAppError):
    """Username already taken by a teacher or a student"""
    status_code = 409
    code = "duplicate_identity"


class AuthenticationFailure(QuizAppError):
    status_code = 401
    code = "authentication_failed"


class PermissionDenied(QuizAppError):
    status_code = 403
    code = "permission_denied"


class NotFound(QuizAppError):
    status_code = 404
    code = "not_found"


class AlreadyAssigned(QuizAppError):
    """Conflict on a (student, quiz) or (class, student) pair"""
    status_code = 409
    code = "already_assigned"


class AlreadyCompleted(QuizAppError):
    """A result already exists for this (student, quiz) pair"""
    status_code = 409
    code = "already_completed"


class InvalidArgument(QuizAppError):
    status_code = 400
    code = "invalid_argument"
