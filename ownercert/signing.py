"""
Ownership Certificate Signing

Holds the process-wide Secret value and the Signature Function.

The signature is a longer digest over (subject email, issue date,
identifier, secret): the digest of the forward input concatenated with
the digest of the UTF-16 reversed input, upper-cased. It is only
re-derivable when the verifier is told the full subject email, since the
identifier embeds just the email's local-part prefix.
"""

import secrets
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigurationError, IssuanceError
from .hashing import DEFAULT_DIGEST, Digest, reverse_utf16

SIGNATURE_SEPARATOR = ":"


@dataclass(frozen=True)
class Secret:
    """
    Server-side certificate secret.

    Immutable; rotating it means constructing a new issuer/verifier with a
    new Secret, which invalidates every identifier issued under the old one.
    """
    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value:
            raise ConfigurationError("certificate secret must be a non-empty string")

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return "Secret('***')"

    @classmethod
    def generate(cls, nbytes: int = 32) -> "Secret":
        """Generate a random URL-safe secret."""
        return cls(secrets.token_urlsafe(nbytes))


def signature_input(subject_email: str, issue_date: str, identifier: str, secret: Secret) -> str:
    """Build the string the signature is computed over."""
    return SIGNATURE_SEPARATOR.join([subject_email, issue_date, identifier, secret.value])


def compute_signature(
    subject_email: str,
    issue_date: str,
    identifier: str,
    secret: Secret,
    digest: Digest = DEFAULT_DIGEST,
) -> str:
    """
    Compute the certificate signature.

    Args:
        subject_email: Full subject email, exactly as issued
        issue_date: Human-readable issue date (e.g. "October 18, 2026")
        identifier: Upper-case certificate identifier
        secret: Certificate secret
        digest: Digest implementation (default: rolling checksum)

    Raises:
        IssuanceError: if any required input is missing
    """
    for field, value in (
        ("subject_email", subject_email),
        ("issue_date", issue_date),
        ("identifier", identifier),
    ):
        if not value:
            raise IssuanceError(field, "required for signature generation")

    data = signature_input(subject_email, issue_date, identifier, secret)
    return (digest.digest(data) + digest.digest(reverse_utf16(data))).upper()


def signatures_match(expected: str, asserted: Optional[str]) -> bool:
    """Compare signatures case-insensitively; a missing assertion never matches."""
    if not isinstance(asserted, str) or not asserted:
        return False
    return expected.upper() == asserted.strip().upper()
