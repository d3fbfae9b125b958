"""
Stateless Ownership Certificates

Version: 1.0.0

Issues and verifies ownership certificates for accounts and generated
artifacts without persisting any certificate record. Every fact needed to
verify a certificate is encoded in the certificate identifier itself,
protected by an embedded checksum and, for account certificates, a
separate signature that requires the full subject email.

The checksum is NOT a cryptographic MAC. It detects accidental corruption
and casual tampering; it does not resist a motivated attacker.

Usage:
    from ownercert import CertificateIssuer, CertificateVerifier, Secret

    secret = Secret("load-me-from-configuration")
    issuer = CertificateIssuer(secret)
    verifier = CertificateVerifier(secret)

    cert = issuer.issue_account_certificate("alice@example.com")
    result = verifier.verify_account_certificate(cert.identifier)
    result.is_valid()        # True
    result.subject_prefix    # "alice"

    full = verifier.verify_account_certificate_full(
        cert.identifier, "alice@example.com", cert.signature
    )

    logo = issuer.issue_artifact_certificate("alice@example.com", "logo-42", image_bytes)
    result = verifier.verify_artifact_certificate(logo.identifier, image_bytes)
    result.artifact_bytes_verified   # True
"""

__version__ = "1.0.0"

# Canonicalization
from .canonicalization import (
    DELIMITER,
    SUBJECT_PREFIX_LENGTH,
    canonicalize,
    email_local_part,
    subject_prefix,
    mask_email,
)

# Checksum and digests
from .hashing import (
    checksum,
    content_hash,
    verify_content_hash,
    Digest,
    RollingChecksum,
    KeyedBlake2bDigest,
    DEFAULT_DIGEST,
)

# Errors
from .errors import (
    OwnerCertError,
    IssuanceError,
    ConfigurationError,
)

# Secret and signature
from .signing import (
    Secret,
    compute_signature,
)

# Identifier codec
from .codec import (
    IdentifierCodec,
    CertificateKind,
    FailureReason,
    DecodeResult,
    AccountFields,
    ArtifactFields,
    anchor_from_end,
)

# Issuer
from .issuer import (
    CertificateIssuer,
    AccountCertificate,
    ArtifactCertificate,
    format_issue_date,
)

# Verifier
from .verifier import (
    CertificateVerifier,
    VerificationResult,
    VerificationOutcome,
    verify_certificate,
)

# Documents
from .documents import (
    CertificateDocument,
    DocumentRenderer,
    QrRenderer,
    DocumentRenderingError,
    account_document,
    artifact_document,
    render_document,
    verification_url,
)


__all__ = [
    "__version__",

    # Canonicalization
    "DELIMITER",
    "SUBJECT_PREFIX_LENGTH",
    "canonicalize",
    "email_local_part",
    "subject_prefix",
    "mask_email",

    # Hashing
    "checksum",
    "content_hash",
    "verify_content_hash",
    "Digest",
    "RollingChecksum",
    "KeyedBlake2bDigest",
    "DEFAULT_DIGEST",

    # Errors
    "OwnerCertError",
    "IssuanceError",
    "ConfigurationError",

    # Signing
    "Secret",
    "compute_signature",

    # Codec
    "IdentifierCodec",
    "CertificateKind",
    "FailureReason",
    "DecodeResult",
    "AccountFields",
    "ArtifactFields",
    "anchor_from_end",

    # Issuer
    "CertificateIssuer",
    "AccountCertificate",
    "ArtifactCertificate",
    "format_issue_date",

    # Verifier
    "CertificateVerifier",
    "VerificationResult",
    "VerificationOutcome",
    "verify_certificate",

    # Documents
    "CertificateDocument",
    "DocumentRenderer",
    "QrRenderer",
    "DocumentRenderingError",
    "account_document",
    "artifact_document",
    "render_document",
    "verification_url",
]
