"""Exception hierarchy shared across the validator."""


class ValidatorError(Exception):
    """Base class for every error raised by openapi-auto-validator."""


class SpecLoadError(ValidatorError):
    """The contract file could not be read or parsed."""


class SpecReferenceError(ValidatorError):
    """A `$ref` pointer could not be resolved."""


class TransportError(ValidatorError):
    """The HTTP exchange failed before a response was received."""

    def __init__(self, message: str, refused: bool = False, timed_out: bool = False):
        super().__init__(message)
        self.message = message
        self.refused = refused
        self.timed_out = timed_out


class SpecNotFoundError(SpecLoadError):
    """The contract file does not exist."""
