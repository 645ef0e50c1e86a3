class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is malformed, missing or out of range."""


class NotFoundError(DomainError):
    """Raised when a referenced employee, settings row, leave type or request does not exist."""


class AuthorizationError(DomainError):
    """Raised when the acting user lacks permission for an action."""


class StateConflict(DomainError):
    """The action conflicts with the current state of a record. Not retried."""


class DuplicateCheckIn(StateConflict):
    pass


class DuplicateCheckOut(StateConflict):
    pass


class NoCheckInFound(StateConflict):
    pass


class OverlappingLeave(StateConflict):
    pass


class RequestAlreadyDecided(StateConflict):
    pass


class ConcurrentUpdate(StateConflict):
    """A guarded write lost against a concurrent writer."""


class PolicyRejection(DomainError):
    """The action is refused by policy; no data was changed."""


class FaceVerificationFailed(PolicyRejection):
    pass


class FaceDetectionFailed(PolicyRejection):
    """The face service could not use the photo (no face, several faces, low quality)."""


class FaceNotEnrolled(PolicyRejection):
    pass


class EmployeeInactive(PolicyRejection):
    pass


class InsufficientBalance(PolicyRejection):
    def __init__(self, remaining: int, needed: int):
        super().__init__(f"Insufficient leave balance: remaining={remaining}, needed={needed}")
        self.remaining = remaining
        self.needed = needed


class DependencyFailure(DomainError):
    """A collaborator (store, face service, photo storage) is unavailable or erroring."""
