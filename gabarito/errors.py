"""
Error taxonomy for Gabarito.

Every failure a handler can report is an AppError subclass carrying its HTTP
status and a stable machine-readable code. The app factory turns them into
JSON responses; the public form routes turn them into short HTML pages.
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(self, message=None, code=None, details=None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        if code:
            self.code = code
        self.details = details

    def to_dict(self):
        body = {"error": self.message, "code": self.code}
        if self.details is not None:
            body["details"] = self.details
        return body


class InvalidInput(AppError):
    status_code = 400
    code = "INVALID_INPUT"
    default_message = "Invalid input"


class InvalidRole(InvalidInput):
    code = "INVALID_ROLE"
    default_message = "Role must be 'student' or 'teacher'"


class IncompleteSubmission(InvalidInput):
    code = "INCOMPLETE_SUBMISSION"
    default_message = "Every question must be answered"


class Unauthenticated(AppError):
    status_code = 401
    code = "UNAUTHENTICATED"
    default_message = "Authentication required"


class InvalidCredentials(Unauthenticated):
    code = "INVALID_CREDENTIALS"
    default_message = "Invalid email or password"


class Forbidden(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "You do not have permission to perform this action"


class RoleNotSet(Forbidden):
    code = "ROLE_NOT_SET"
    default_message = "Choose a role before continuing"


class NotFound(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Not found"


class AssessmentNotFound(NotFound):
    code = "ASSESSMENT_NOT_FOUND"
    default_message = "Assessment not found"


class LinkNotFound(NotFound):
    code = "LINK_NOT_FOUND"
    default_message = "Form not found"


class QuestionsNotFound(NotFound):
    code = "QUESTIONS_NOT_FOUND"
    default_message = "Some questions were not found in the bank"


class Conflict(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Conflict"


class DuplicateEmail(Conflict):
    code = "DUPLICATE_EMAIL"
    default_message = "Email already registered"


class NoAnswerKey(Conflict):
    code = "NO_ANSWER_KEY"
    default_message = "This assessment has no answer key yet"


class AssessmentIncomplete(Conflict):
    code = "ASSESSMENT_INCOMPLETE"
    default_message = "This assessment is not ready to be answered yet"


class RateLimited(AppError):
    status_code = 429
    code = "RATE_LIMITED"
    default_message = "Too many attempts, try again later"


class StorageError(AppError):
    status_code = 500
    code = "STORAGE_FAILURE"
    default_message = "Internal server error"
