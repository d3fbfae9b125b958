"""
Ownership Certificate Issuer

Produces certificate identifiers (and, for account certificates, a
signature) without recording anything. Every fact a verifier needs is
embedded in the identifier itself.

The embedded timestamp and the signed issue-date string are derived from
one captured instant so they can never disagree.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Union

from .canonicalization import mask_email, subject_prefix
from .codec import IdentifierCodec
from .errors import IssuanceError
from .hashing import DEFAULT_DIGEST, Digest, content_hash
from .signing import Secret, compute_signature

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_timestamp_ms(moment: datetime) -> int:
    """Milliseconds since the Unix epoch for an aware datetime."""
    delta = moment.astimezone(timezone.utc) - EPOCH
    return (delta.days * 86400 + delta.seconds) * 1000 + delta.microseconds // 1000


def from_timestamp_ms(timestamp: int) -> datetime:
    """
    Aware UTC datetime for a millisecond timestamp.

    Raises:
        OverflowError: if the timestamp is outside the datetime range
    """
    return EPOCH + timedelta(milliseconds=timestamp)


def format_issue_date(timestamp: int) -> str:
    """Render the en-US long date of a timestamp, e.g. 'October 18, 2026'."""
    moment = from_timestamp_ms(timestamp)
    return f"{MONTH_NAMES[moment.month - 1]} {moment.day}, {moment.year}"


@dataclass(frozen=True)
class AccountCertificate:
    """An issued account-ownership certificate."""
    identifier: str
    signature: str
    subject_email: str
    subject_prefix: str
    timestamp: int
    issue_date: str

    @property
    def issued_at(self) -> datetime:
        return from_timestamp_ms(self.timestamp)


@dataclass(frozen=True)
class ArtifactCertificate:
    """An issued artifact-ownership certificate (no signature)."""
    identifier: str
    subject_email: str
    subject_prefix: str
    artifact_id: str
    content_hash: str
    timestamp: int
    issue_date: str

    @property
    def issued_at(self) -> datetime:
        return from_timestamp_ms(self.timestamp)


def _require_email(subject_email: str) -> str:
    if not isinstance(subject_email, str) or not subject_email.strip():
        raise IssuanceError("subject_email", "required")
    return subject_email


def _require_artifact_id(artifact_id: str) -> str:
    if not isinstance(artifact_id, str) or not artifact_id:
        raise IssuanceError("artifact_id", "required")
    if not (artifact_id.isascii() and artifact_id.isprintable()):
        raise IssuanceError("artifact_id", "must be printable ASCII")
    return artifact_id


def _require_bytes(artifact_bytes: Union[bytes, bytearray, memoryview]) -> bytes:
    if not isinstance(artifact_bytes, (bytes, bytearray, memoryview)):
        raise IssuanceError("artifact_bytes", "must be bytes")
    data = bytes(artifact_bytes)
    if not data:
        raise IssuanceError("artifact_bytes", "required")
    return data


class CertificateIssuer:
    """
    Issues account and artifact certificates.

    Usage:
        issuer = CertificateIssuer(Secret("..."))
        cert = issuer.issue_account_certificate("alice@example.com")
        cert.identifier   # CERT-<T36>-ALICE-<CHK>
        cert.signature
    """

    def __init__(
        self,
        secret: Secret,
        digest: Digest = DEFAULT_DIGEST,
        clock: Optional[Clock] = None,
    ):
        self._secret = secret
        self._digest = digest
        self._codec = IdentifierCodec(secret, digest)
        self._clock = clock or utc_now

    @property
    def codec(self) -> IdentifierCodec:
        return self._codec

    def _capture_timestamp(self) -> int:
        return to_timestamp_ms(self._clock())

    def issue_account_certificate(self, subject_email: str) -> AccountCertificate:
        """
        Issue an account certificate for subject_email.

        Raises:
            IssuanceError: if subject_email is missing
        """
        email = _require_email(subject_email)
        timestamp = self._capture_timestamp()
        prefix = subject_prefix(email)

        identifier = self._codec.encode_account(timestamp, prefix)
        issue_date = format_issue_date(timestamp)
        signature = compute_signature(email, issue_date, identifier, self._secret, self._digest)

        logger.debug("Issued account certificate %s for %s", identifier, mask_email(email))
        return AccountCertificate(
            identifier=identifier,
            signature=signature,
            subject_email=email,
            subject_prefix=prefix,
            timestamp=timestamp,
            issue_date=issue_date,
        )

    def issue_artifact_certificate(
        self,
        subject_email: str,
        artifact_id: str,
        artifact_bytes: bytes,
    ) -> ArtifactCertificate:
        """
        Issue an artifact certificate binding subject_email to artifact_bytes.

        The artifact id may contain the delimiter. It is embedded in
        canonical (lower) case.

        Raises:
            IssuanceError: if the email, artifact id or artifact bytes are
                missing or unusable
        """
        email = _require_email(subject_email)
        artifact_id = _require_artifact_id(artifact_id)
        data = _require_bytes(artifact_bytes)

        timestamp = self._capture_timestamp()
        prefix = subject_prefix(email)
        digest_of_bytes = content_hash(data, self._digest)

        identifier = self._codec.encode_artifact(artifact_id, timestamp, prefix, digest_of_bytes)

        logger.debug(
            "Issued artifact certificate %s for %s (%d bytes)",
            identifier, mask_email(email), len(data),
        )
        return ArtifactCertificate(
            identifier=identifier,
            subject_email=email,
            subject_prefix=prefix,
            artifact_id=artifact_id.lower(),
            content_hash=digest_of_bytes,
            timestamp=timestamp,
            issue_date=format_issue_date(timestamp),
        )
