"""
Ownership Certificate Identifier Codec

Composes and decomposes the self-verifying identifier string.

Account certificate:
    CERT-<timestamp36>-<subject prefix>-<checksum>

Artifact certificate:
    LOGO-<artifact id>-<timestamp36>-<subject prefix>-<content hash>-<checksum>

The artifact id is variable width and may itself contain the delimiter.
The four trailing fields are delimiter-free, so decoding anchors from the
END of the token list: the last token is the checksum, then the content
hash, the subject prefix and the timestamp; everything before that
(after the kind tag), rejoined with the delimiter, is the artifact id.

The checksum is computed over the lower-case fields joined by the
delimiter followed by the secret. The whole identifier is rendered
upper-case; decoding lower-cases it first.

Decoding never raises for malformed input. It returns a DecodeResult
carrying either the recovered fields or a FailureReason with a
human-readable detail.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Sequence, Tuple, Union

from .canonicalization import DELIMITER, canonicalize
from .errors import IssuanceError
from .hashing import DEFAULT_DIGEST, Digest, from_base36, to_base36
from .signing import Secret

logger = logging.getLogger(__name__)

ACCOUNT_TAG = "cert"
ARTIFACT_TAG = "logo"

# kind tag, timestamp, subject prefix, checksum
ACCOUNT_FIELD_COUNT = 4


class CertificateKind(str, Enum):
    """The two certificate variants and their kind tags."""
    ACCOUNT = "account"
    ARTIFACT = "artifact"

    @property
    def tag(self) -> str:
        return ACCOUNT_TAG if self is CertificateKind.ACCOUNT else ARTIFACT_TAG


class FailureReason(str, Enum):
    """
    Why an identifier (or a full verification) was rejected.

    FORMAT: malformed identifier (kind tag, field count, timestamp)
    CHECKSUM: embedded checksum does not match the recovered fields
    SIGNATURE: asserted signature does not match the asserted subject
    EXPIRED: embedded timestamp outside the accepted validity window
    """
    FORMAT = "format"
    CHECKSUM = "checksum"
    SIGNATURE = "signature"
    EXPIRED = "expired"

    @property
    def is_integrity_failure(self) -> bool:
        # corruption and tampering are indistinguishable
        return self in (FailureReason.CHECKSUM, FailureReason.SIGNATURE)


@dataclass(frozen=True)
class AccountFields:
    """Fields recovered from an account certificate identifier."""
    timestamp: int
    subject_prefix: str
    checksum: str


@dataclass(frozen=True)
class ArtifactFields:
    """Fields recovered from an artifact certificate identifier."""
    artifact_id: str
    timestamp: int
    subject_prefix: str
    content_hash: str
    checksum: str


@dataclass(frozen=True)
class DecodeResult:
    """Tagged outcome of decoding an identifier."""
    fields: Optional[Union[AccountFields, ArtifactFields]] = None
    reason: Optional[FailureReason] = None
    detail: Optional[str] = None

    def ok(self) -> bool:
        return self.fields is not None

    @classmethod
    def success(cls, fields: Union[AccountFields, ArtifactFields]) -> "DecodeResult":
        return cls(fields=fields)

    @classmethod
    def failure(cls, reason: FailureReason, detail: str) -> "DecodeResult":
        return cls(reason=reason, detail=detail)


def tokenize(identifier: str) -> List[str]:
    """Split an identifier into delimiter-separated tokens."""
    return identifier.split(DELIMITER)


def anchor_from_end(
    tokens: Sequence[str],
    head: int,
    tail: int,
) -> Optional[Tuple[List[str], str, List[str]]]:
    """
    Slice tokens into fixed head fields, one variable field, and fixed tail fields.

    The tail is taken from the end of the list; whatever sits between head
    and tail is rejoined with the delimiter and becomes the variable field,
    so that field may contain the delimiter itself.

    Returns:
        (head_tokens, variable_field, tail_tokens), or None when there are
        too few tokens for the layout
    """
    if len(tokens) < head + tail + 1:
        return None
    split = len(tokens) - tail
    return list(tokens[:head]), DELIMITER.join(tokens[head:split]), list(tokens[split:])


def _require_fixed_field(name: str, value: str) -> str:
    if DELIMITER in value:
        raise IssuanceError(name, f"must not contain the delimiter {DELIMITER!r}")
    return value


class IdentifierCodec:
    """
    Encodes and decodes certificate identifiers.

    Pure: a function of its arguments, the Secret and the Digest only.
    """

    def __init__(self, secret: Secret, digest: Digest = DEFAULT_DIGEST):
        self._secret = secret
        self._digest = digest

    @property
    def digest(self) -> Digest:
        return self._digest

    def checksum(self, fields: Sequence[str]) -> str:
        """Compute the checksum over canonical fields plus the secret."""
        return self._digest.digest(DELIMITER.join(fields) + self._secret.value)

    def _seal(self, fields: Sequence[str]) -> str:
        canonical = [canonicalize(f) for f in fields]
        return DELIMITER.join(canonical + [self.checksum(canonical)]).upper()

    # ------------------------------------------------------------
    # Encode
    # ------------------------------------------------------------

    def encode_account(self, timestamp: int, subject_prefix: str) -> str:
        """
        Build an account certificate identifier.

        Deterministic: identical timestamp, prefix and secret always yield
        the identical identifier.
        """
        if timestamp < 0:
            raise IssuanceError("timestamp", "must be non-negative")
        return self._seal([
            ACCOUNT_TAG,
            to_base36(timestamp),
            _require_fixed_field("subject_prefix", subject_prefix),
        ])

    def encode_artifact(
        self,
        artifact_id: str,
        timestamp: int,
        subject_prefix: str,
        content_hash: str,
    ) -> str:
        """Build an artifact certificate identifier."""
        if not artifact_id:
            raise IssuanceError("artifact_id", "required")
        if timestamp < 0:
            raise IssuanceError("timestamp", "must be non-negative")
        return self._seal([
            ARTIFACT_TAG,
            artifact_id,
            to_base36(timestamp),
            _require_fixed_field("subject_prefix", subject_prefix),
            _require_fixed_field("content_hash", content_hash),
        ])

    # ------------------------------------------------------------
    # Decode
    # ------------------------------------------------------------

    def decode(self, identifier: str) -> DecodeResult:
        """Decode an identifier of either kind, dispatching on its kind tag."""
        if isinstance(identifier, str):
            lowered = identifier.lower()
            if lowered.startswith(ARTIFACT_TAG + DELIMITER):
                return self.decode_artifact(identifier)
        return self.decode_account(identifier)

    def decode_account(self, identifier: str) -> DecodeResult:
        """Decode and checksum-verify an account certificate identifier."""
        tokens = self._tokens_for(identifier, ACCOUNT_TAG)
        if isinstance(tokens, DecodeResult):
            return tokens

        parts = anchor_from_end(tokens, head=2, tail=1)
        if parts is None:
            return self._fail(FailureReason.FORMAT, "too few fields", identifier)
        if len(tokens) > ACCOUNT_FIELD_COUNT:
            return self._fail(FailureReason.FORMAT, "too many fields", identifier)
        (_, timestamp_token), subject_prefix, (embedded,) = parts

        timestamp = self._parse_timestamp(timestamp_token)
        if timestamp is None:
            return self._fail(FailureReason.FORMAT, "invalid timestamp", identifier)

        expected = self.checksum([ACCOUNT_TAG, timestamp_token, subject_prefix])
        if expected != embedded:
            return self._fail(FailureReason.CHECKSUM, "checksum mismatch", identifier)

        return DecodeResult.success(AccountFields(
            timestamp=timestamp,
            subject_prefix=subject_prefix,
            checksum=embedded,
        ))

    def decode_artifact(self, identifier: str) -> DecodeResult:
        """Decode and checksum-verify an artifact certificate identifier."""
        tokens = self._tokens_for(identifier, ARTIFACT_TAG)
        if isinstance(tokens, DecodeResult):
            return tokens

        parts = anchor_from_end(tokens, head=1, tail=4)
        if parts is None:
            return self._fail(FailureReason.FORMAT, "too few fields", identifier)
        _, artifact_id, (timestamp_token, subject_prefix, content_hash, embedded) = parts

        if not artifact_id:
            return self._fail(FailureReason.FORMAT, "missing artifact id", identifier)

        timestamp = self._parse_timestamp(timestamp_token)
        if timestamp is None:
            return self._fail(FailureReason.FORMAT, "invalid timestamp", identifier)

        expected = self.checksum([ARTIFACT_TAG, artifact_id, timestamp_token, subject_prefix, content_hash])
        if expected != embedded:
            return self._fail(FailureReason.CHECKSUM, "checksum mismatch", identifier)

        return DecodeResult.success(ArtifactFields(
            artifact_id=artifact_id,
            timestamp=timestamp,
            subject_prefix=subject_prefix,
            content_hash=content_hash,
            checksum=embedded,
        ))

    def _tokens_for(self, identifier: str, tag: str) -> Union[List[str], DecodeResult]:
        if not isinstance(identifier, str):
            return self._fail(FailureReason.FORMAT, "identifier must be a string", identifier)
        if not identifier:
            return self._fail(FailureReason.FORMAT, "empty identifier", identifier)

        lowered = identifier.lower()
        if not lowered.startswith(tag + DELIMITER):
            return self._fail(FailureReason.FORMAT, "unknown kind-tag", identifier)
        return tokenize(lowered)

    @staticmethod
    def _parse_timestamp(token: str) -> Optional[int]:
        try:
            return from_base36(token)
        except ValueError:
            return None

    @staticmethod
    def _fail(reason: FailureReason, detail: str, identifier) -> DecodeResult:
        logger.debug("Identifier rejected (%s: %s): %r", reason.value, detail, identifier)
        return DecodeResult.failure(reason, detail)
