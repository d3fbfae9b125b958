"""Exceptions raised by the ownership certificate core."""


class OwnerCertError(Exception):
    """Base class for ownercert errors."""


class IssuanceError(OwnerCertError, ValueError):
    """
    A certificate cannot be issued from the supplied inputs.

    This is a caller programming error (missing subject email, artifact id
    or artifact bytes). It is never raised for attacker-controlled input
    at verification time.
    """

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class ConfigurationError(OwnerCertError):
    """The certificate secret or settings are unusable."""
