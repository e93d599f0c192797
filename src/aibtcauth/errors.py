from abc import ABC


class UserError(ABC, Exception):
    """Base class for user-related errors.

    All errors that inherit from UserError will have their messages
    displayed to the user. These errors should not contain any
    sensitive information (signatures, shared secrets, session tokens).
    """


class AuthenticationError(UserError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication failed") -> None:
        super().__init__(message)


class SignatureInvalidError(AuthenticationError):
    """Raised when a signature does not verify against the expected challenge."""

    def __init__(self, message: str = "Signature verification failed") -> None:
        super().__init__(message)


class AddressDerivationError(AuthenticationError):
    """Raised when a recovered public key does not yield a well-formed address."""


class AccessDeniedError(UserError):
    """Raised when an authenticated caller is not allowed to perform an operation."""


class ValidationError(UserError):
    """Raised when user input fails validation."""


class MalformedInputError(ValidationError):
    """Raised when required request fields are missing or unparseable."""


class ConfigurationError(Exception):
    """Raised when the service cannot reach its own configuration.

    This is an operational fault, not a caller fault: the message is not
    shown to the caller, and requests fail closed.
    """


class StoreUnavailableError(ConfigurationError):
    """Raised when the key-value store does not answer within the retry budget."""
