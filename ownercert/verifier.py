"""
Ownership Certificate Verification

Verifies a certificate purely as a function of its identifier (and,
optionally, an asserted subject email + signature or the artifact's
bytes). No lookup of any kind is performed.

Verification steps:
1. Decode the identifier (kind tag, field count, timestamp)
2. Recompute and compare the embedded checksum
3. Optionally enforce the validity window (max age / clock skew)
4. Full path only: recompute the signature from the asserted email
5. Artifact path only: re-confirm the content hash if bytes are supplied

Outcomes are tagged results; attacker-controlled input never raises.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from enum import Enum
from typing import Optional, Union

from .codec import ArtifactFields, DecodeResult, FailureReason, IdentifierCodec
from .hashing import DEFAULT_DIGEST, Digest, verify_content_hash
from .issuer import Clock, format_issue_date, from_timestamp_ms, utc_now
from .signing import Secret, compute_signature, signatures_match

BytesLike = Union[bytes, bytearray, memoryview]


class VerificationOutcome(str, Enum):
    VALID = "VALID"
    INVALID = "INVALID"


@dataclass(frozen=True)
class VerificationResult:
    """
    Result of verifying a certificate identifier.

    On success the recoverable fields are populated. artifact_bytes_verified
    is None unless artifact bytes were supplied to the artifact path.
    """
    outcome: VerificationOutcome
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None
    certificate_id: Optional[str] = None
    timestamp: Optional[int] = None
    subject_prefix: Optional[str] = None
    issue_date: Optional[str] = None
    artifact_id: Optional[str] = None
    content_hash: Optional[str] = None
    artifact_bytes_verified: Optional[bool] = None

    def is_valid(self) -> bool:
        return self.outcome == VerificationOutcome.VALID

    @property
    def issued_at(self) -> Optional[datetime]:
        if self.timestamp is None:
            return None
        return from_timestamp_ms(self.timestamp)

    @property
    def estimated_email(self) -> Optional[str]:
        """Only the prefix is recoverable; the domain never is."""
        if self.subject_prefix is None:
            return None
        return f"{self.subject_prefix}@[domain]"

    @property
    def client_handle(self) -> Optional[str]:
        return self.subject_prefix

    @classmethod
    def invalid(cls, reason: FailureReason, detail: str, certificate_id: Optional[str] = None) -> "VerificationResult":
        return cls(
            outcome=VerificationOutcome.INVALID,
            reason=reason,
            detail=detail,
            certificate_id=certificate_id if isinstance(certificate_id, str) else None,
        )

    def to_dict(self) -> dict:
        data = {
            "outcome": self.outcome.value,
            "valid": self.is_valid(),
            "certificate_id": self.certificate_id,
        }
        if not self.is_valid():
            data["reason"] = self.reason.value if self.reason else None
            data["detail"] = self.detail
            return data
        data.update({
            "subject_prefix": self.subject_prefix,
            "estimated_email": self.estimated_email,
            "issue_date": self.issue_date,
            "issued_at": self.issued_at.isoformat().replace("+00:00", "Z"),
        })
        if self.artifact_id is not None:
            data["artifact_id"] = self.artifact_id
            data["content_hash"] = self.content_hash
            data["artifact_bytes_verified"] = self.artifact_bytes_verified
        return data


class CertificateVerifier:
    """
    Stateless certificate verifier.

    Args:
        secret: Certificate secret (must match the issuer's)
        digest: Digest implementation (must match the issuer's)
        max_age: Reject identifiers issued longer ago than this (None: no limit)
        clock_skew: Reject identifiers issued further in the future than
            this (None: no limit)
        clock: Source of "now" for the validity window
    """

    def __init__(
        self,
        secret: Secret,
        digest: Digest = DEFAULT_DIGEST,
        max_age: Optional[timedelta] = None,
        clock_skew: Optional[timedelta] = None,
        clock: Optional[Clock] = None,
    ):
        self._secret = secret
        self._digest = digest
        self._codec = IdentifierCodec(secret, digest)
        self._max_age = max_age
        self._clock_skew = clock_skew
        self._clock = clock or utc_now

    @property
    def codec(self) -> IdentifierCodec:
        return self._codec

    def verify_account_certificate(self, identifier: str) -> VerificationResult:
        """Decode and checksum-verify an account certificate identifier."""
        decoded = self._codec.decode_account(identifier)
        return self._from_decoded(decoded, identifier)

    def verify_account_certificate_full(
        self,
        identifier: str,
        asserted_subject_email: str,
        asserted_signature: str,
    ) -> VerificationResult:
        """
        Verify an account certificate and its signature.

        The basic verification must pass first; then the signature is
        recomputed from the asserted email and the recovered issue date and
        compared with the asserted signature.
        """
        basic = self.verify_account_certificate(identifier)
        if not basic.is_valid():
            return basic

        if not isinstance(asserted_subject_email, str) or not asserted_subject_email:
            return VerificationResult.invalid(FailureReason.SIGNATURE, "subject email required", identifier)

        expected = compute_signature(
            asserted_subject_email,
            basic.issue_date,
            identifier.upper(),
            self._secret,
            self._digest,
        )
        if not signatures_match(expected, asserted_signature):
            return VerificationResult.invalid(FailureReason.SIGNATURE, "signature mismatch", identifier)
        return basic

    def verify_artifact_certificate(
        self,
        identifier: str,
        artifact_bytes: Optional[BytesLike] = None,
    ) -> VerificationResult:
        """
        Decode and checksum-verify an artifact certificate identifier.

        If artifact_bytes is supplied, its content hash is recomputed and
        the comparison is reported as artifact_bytes_verified. A mismatch
        does not invalidate the identifier itself.
        """
        decoded = self._codec.decode_artifact(identifier)
        result = self._from_decoded(decoded, identifier)
        if not result.is_valid() or artifact_bytes is None:
            return result

        if isinstance(artifact_bytes, (bytes, bytearray, memoryview)):
            matched = verify_content_hash(result.content_hash, bytes(artifact_bytes), self._digest)
        else:
            matched = False
        return replace(result, artifact_bytes_verified=matched)

    def verify(self, identifier: str) -> VerificationResult:
        """Verify an identifier of either kind without optional inputs."""
        decoded = self._codec.decode(identifier)
        return self._from_decoded(decoded, identifier)

    def _from_decoded(self, decoded: DecodeResult, identifier: str) -> VerificationResult:
        if not decoded.ok():
            return VerificationResult.invalid(decoded.reason, decoded.detail, identifier)

        fields = decoded.fields
        try:
            issued_at = from_timestamp_ms(fields.timestamp)
        except OverflowError:
            return VerificationResult.invalid(FailureReason.FORMAT, "timestamp out of range", identifier)

        window_failure = self._check_window(issued_at)
        if window_failure:
            return VerificationResult.invalid(FailureReason.EXPIRED, window_failure, identifier)

        common = dict(
            outcome=VerificationOutcome.VALID,
            certificate_id=identifier.upper(),
            timestamp=fields.timestamp,
            subject_prefix=fields.subject_prefix,
            issue_date=format_issue_date(fields.timestamp),
        )
        if isinstance(fields, ArtifactFields):
            return VerificationResult(
                artifact_id=fields.artifact_id,
                content_hash=fields.content_hash,
                **common,
            )
        return VerificationResult(**common)

    def _check_window(self, issued_at: datetime) -> Optional[str]:
        if self._max_age is None and self._clock_skew is None:
            return None
        now = self._clock()
        if self._max_age is not None and issued_at < now - self._max_age:
            return "certificate too old"
        if self._clock_skew is not None and issued_at > now + self._clock_skew:
            return "timestamp in the future"
        return None


def verify_certificate(identifier: str, secret: Secret, digest: Digest = DEFAULT_DIGEST) -> VerificationResult:
    """Convenience function: verify an identifier of either kind."""
    return CertificateVerifier(secret, digest).verify(identifier)
