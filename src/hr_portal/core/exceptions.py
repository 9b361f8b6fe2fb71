class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class StateConflictError(DomainError):
    """Raised when a record is not in the state an operation requires.

    Callers should re-fetch the current state before retrying.
    """


class DuplicateRecordError(Exception):
    """Raised by repositories when the store rejects a duplicate key."""


# Identity
class InvalidCredentials(AuthenticationError):
    def __init__(self, message: str = "Invalid employee ID or password"):
        super().__init__(message)


class AccountInactive(AuthenticationError):
    def __init__(self, message: str = "Your account is not active. Please contact HR."):
        super().__init__(message)


class EmployeeNotFound(NotFoundError):
    def __init__(self, message: str = "Employee not found"):
        super().__init__(message)


# Attendance
class AlreadyCheckedIn(StateConflictError):
    def __init__(self, message: str = "You have already checked in today"):
        super().__init__(message)


class NoOpenSession(StateConflictError):
    def __init__(self, message: str = "You have not checked in today"):
        super().__init__(message)


class AlreadyCheckedOut(StateConflictError):
    def __init__(self, message: str = "You have already checked out today"):
        super().__init__(message)


# Leave
class InvalidDateRange(ValidationError):
    def __init__(self, message: str = "Invalid date range"):
        super().__init__(message)


class RejectionReasonRequired(ValidationError):
    def __init__(self, message: str = "A rejection reason is required"):
        super().__init__(message)


class NotPending(StateConflictError):
    def __init__(self, message: str = "This leave request has already been decided"):
        super().__init__(message)


class LeaveNotFound(NotFoundError):
    def __init__(self, message: str = "Leave request not found"):
        super().__init__(message)


# Tasks
class IllegalTransition(StateConflictError):
    def __init__(self, message: str = "This task status change is not allowed"):
        super().__init__(message)


class EmptyComment(ValidationError):
    def __init__(self, message: str = "Comment cannot be empty"):
        super().__init__(message)


class TaskNotFound(NotFoundError):
    def __init__(self, message: str = "Task not found"):
        super().__init__(message)
