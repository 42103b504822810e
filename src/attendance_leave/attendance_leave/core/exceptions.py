class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "BUSINESS_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "INVALID_INPUT"


class NotFoundError(DomainError):
    """Raised when a referenced user, record or request does not exist."""

    code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when an entity already exists or collides with another one."""

    code = "CONFLICT"


class AlreadyLoggedInError(ConflictError):
    code = "ALREADY_LOGGED_IN"


class AlreadyCompletedError(ConflictError):
    code = "ALREADY_COMPLETED"


class OverlappingRequestError(ConflictError):
    code = "OVERLAPPING_REQUEST"


class InsufficientBalanceError(DomainError):
    """Raised when requested leave days exceed the available balance."""

    code = "INSUFFICIENT_BALANCE"


class NoEntitlementError(InsufficientBalanceError):
    code = "NO_ENTITLEMENT"


class InvalidTransitionError(DomainError):
    """Raised when an entity is not in the state the operation requires."""

    code = "INVALID_TRANSITION"


class AlreadyDecidedError(InvalidTransitionError):
    code = "ALREADY_DECIDED"


class NoActiveLoginError(InvalidTransitionError):
    code = "NO_ACTIVE_LOGIN"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "UNAUTHENTICATED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "NOT_AUTHORIZED"


class NotOwnerError(AuthorizationError):
    code = "NOT_OWNER"
