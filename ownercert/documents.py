"""
Ownership Certificate Documents

Renderer contracts for the printable certificate. The core prepares a
CertificateDocument (subject, issue date, identifier, verification URL,
optional signature and artifact image) and hands it to a DocumentRenderer;
it never opens, parses or validates the bytes that come back beyond
checking that there are some.
"""

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

from .codec import CertificateKind
from .errors import OwnerCertError
from .issuer import AccountCertificate, ArtifactCertificate

ACCOUNT_VERIFY_PATH = "/verify/"
ARTIFACT_VERIFY_PATH = "/verify/logo/"

QR_PIXEL_SIZE = 80

_FILENAME_UNSAFE = re.compile(r"[^A-Za-z0-9._-]")


class DocumentRenderingError(OwnerCertError):
    """The document renderer produced no output."""


def verification_url(base_url: str, identifier: str, kind: CertificateKind) -> str:
    """Build the public verification URL for an identifier."""
    path = ARTIFACT_VERIFY_PATH if kind is CertificateKind.ARTIFACT else ACCOUNT_VERIFY_PATH
    return base_url.rstrip("/") + path + quote(identifier, safe="")


@dataclass(frozen=True)
class CertificateDocument:
    """Everything a renderer needs to lay out one certificate."""
    kind: CertificateKind
    subject_email: str
    issue_date: str
    identifier: str
    verification_url: str
    platform_name: str
    filename: str
    signature: Optional[str] = None
    artifact_id: Optional[str] = None
    artifact_image: Optional[bytes] = None


class QrRenderer(ABC):
    """Turns a URL into an image the document renderer can embed."""

    @abstractmethod
    def render(self, url: str, size: int = QR_PIXEL_SIZE) -> Any:
        pass


class DocumentRenderer(ABC):
    """Turns a CertificateDocument into printable document bytes (PDF)."""

    @abstractmethod
    def render(self, document: CertificateDocument) -> bytes:
        pass


def account_document(cert: AccountCertificate, base_url: str, platform_name: str) -> CertificateDocument:
    """Prepare the document for an issued account certificate."""
    local_part = _FILENAME_UNSAFE.sub("", cert.subject_email.split("@")[0])
    return CertificateDocument(
        kind=CertificateKind.ACCOUNT,
        subject_email=cert.subject_email,
        issue_date=cert.issue_date,
        identifier=cert.identifier,
        verification_url=verification_url(base_url, cert.identifier, CertificateKind.ACCOUNT),
        platform_name=platform_name,
        filename=f"ownership-certificate-{local_part}-{cert.issued_at.year}.pdf",
        signature=cert.signature,
    )


def artifact_document(
    cert: ArtifactCertificate,
    artifact_bytes: Optional[bytes],
    base_url: str,
    platform_name: str,
) -> CertificateDocument:
    """Prepare the document for an issued artifact certificate."""
    safe_id = _FILENAME_UNSAFE.sub("_", cert.artifact_id)
    return CertificateDocument(
        kind=CertificateKind.ARTIFACT,
        subject_email=cert.subject_email,
        issue_date=cert.issue_date,
        identifier=cert.identifier,
        verification_url=verification_url(base_url, cert.identifier, CertificateKind.ARTIFACT),
        platform_name=platform_name,
        filename=f"logo-certificate-{safe_id}-{cert.timestamp}.pdf",
        artifact_id=cert.artifact_id,
        artifact_image=artifact_bytes,
    )


def render_document(document: CertificateDocument, renderer: DocumentRenderer) -> bytes:
    """
    Render a document through the supplied collaborator.

    Raises:
        DocumentRenderingError: if the renderer returns no bytes
    """
    output = renderer.render(document)
    if not output:
        raise DocumentRenderingError(f"renderer returned an empty document for {document.identifier}")
    return bytes(output)
