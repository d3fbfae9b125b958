"""
ReportLab document and QR renderers.

Implements the ownercert renderer contracts: an A4 certificate PDF with a
scannable QR code of the verification URL. Layout coordinates are given
in millimetres from the top of the page.
"""

import logging
from io import BytesIO

from reportlab.graphics import renderPDF
from reportlab.graphics.barcode.qr import QrCodeWidget
from reportlab.graphics.shapes import Drawing
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from ownercert import (
    CertificateDocument,
    CertificateKind,
    DocumentRenderer,
    DocumentRenderingError,
    QrRenderer,
)
from ownercert.documents import QR_PIXEL_SIZE

logger = logging.getLogger(__name__)

PRIMARY = (79, 70, 229)
SECONDARY = (99, 102, 241)
ACCENT = (245, 158, 11)
TEXT_DARK = (31, 41, 55)
TEXT_GRAY = (107, 114, 128)
PANEL = (249, 250, 251)

PAGE_WIDTH, PAGE_HEIGHT = A4

SIGNATURE_DISPLAY_LENGTH = 40
QR_SIZE_MM = 18

RIGHTS = [
    "• CREATE, modify, and derive new works from all generated logos",
    "• STORE, archive, and maintain copies in any format or medium",
    "• EDIT, enhance, resize, recolor, and make any modifications",
    "• SELL, license, and monetize the logos for commercial purposes",
    "• TRANSFER ownership rights to third parties through sale or gift",
    "• PROMOTE and market using the logos across all media channels",
    "• PRINT and reproduce the logos in physical and digital formats",
    "• DISPLAY the logos publicly in any context or application",
    "• DISTRIBUTE the logos through any means or channels",
    "• SUBLICENSE the logos to employees, contractors, or partners",
    "• USE the logos as trademarks or service marks (subject to trademark law)",
    "• INCORPORATE the logos into larger works or derivative products",
]


def _rgb(c: canvas.Canvas, color, stroke: bool = False):
    r, g, b = (v / 255.0 for v in color)
    if stroke:
        c.setStrokeColorRGB(r, g, b)
    else:
        c.setFillColorRGB(r, g, b)


def shorten_signature(signature: str) -> str:
    if len(signature) > SIGNATURE_DISPLAY_LENGTH:
        return signature[:SIGNATURE_DISPLAY_LENGTH] + "..."
    return signature


class ReportLabQrRenderer(QrRenderer):
    """Renders a URL as a reportlab QR drawing of size x size points."""

    def __init__(self, error_correction: str = "M"):
        self._level = error_correction

    def render(self, url: str, size: int = QR_PIXEL_SIZE) -> Drawing:
        widget = QrCodeWidget(url, barLevel=self._level)
        x0, y0, x1, y1 = widget.getBounds()
        width, height = x1 - x0, y1 - y0
        drawing = Drawing(size, size, transform=[size / width, 0, 0, size / height, 0, 0])
        drawing.add(widget)
        return drawing


class ReportLabCertificateRenderer(DocumentRenderer):
    """Renders ownership certificates as A4 PDFs."""

    def __init__(self, qr_renderer: QrRenderer = None):
        self._qr = qr_renderer or ReportLabQrRenderer()

    def render(self, document: CertificateDocument) -> bytes:
        buf = BytesIO()
        c = canvas.Canvas(buf, pagesize=A4)
        width, height = PAGE_WIDTH, PAGE_HEIGHT
        c.setTitle(f"Certificate of Ownership {document.identifier}")
        c.setAuthor(document.platform_name)

        self._draw_frame(c, width, height)
        y = self._draw_body(c, document, width)
        if document.kind is CertificateKind.ARTIFACT and document.artifact_image:
            self._draw_artifact_image(c, document.artifact_image, width, y)
        self._draw_details(c, document, width, height)
        self._draw_footer(c, document, width)

        c.showPage()
        c.save()
        pdf = buf.getvalue()
        logger.debug("Rendered %s certificate %s (%d bytes)", document.kind.value, document.identifier, len(pdf))
        return pdf

    def _top(self, y_mm: float) -> float:
        return PAGE_HEIGHT - y_mm * mm

    def _centered(self, c: canvas.Canvas, text: str, width: float, y_mm: float):
        c.drawCentredString(width / 2, self._top(y_mm), text)

    def _draw_frame(self, c: canvas.Canvas, width: float, height: float):
        _rgb(c, PRIMARY, stroke=True)
        c.setLineWidth(2)
        c.rect(15 * mm, 25 * mm, width - 30 * mm, height - 40 * mm)

        _rgb(c, SECONDARY, stroke=True)
        c.setLineWidth(0.5)
        c.rect(18 * mm, 28 * mm, width - 36 * mm, height - 46 * mm)

    def _draw_body(self, c: canvas.Canvas, document: CertificateDocument, width: float) -> float:
        _rgb(c, TEXT_DARK)
        c.setFont("Helvetica-Bold", 20)
        self._centered(c, "CERTIFICATE OF OWNERSHIP", width, 35)

        _rgb(c, ACCENT, stroke=True)
        c.setLineWidth(1)
        c.line(width / 2 - 40 * mm, self._top(40), width / 2 + 40 * mm, self._top(40))

        y = 50
        _rgb(c, TEXT_DARK)
        c.setFont("Helvetica", 12)
        if document.kind is CertificateKind.ARTIFACT:
            self._centered(c, "This certificate hereby declares that the owner of this email:", width, y)
        else:
            self._centered(c, "This certificate hereby declares and establishes that the owner of this email:", width, y)
        y += 10

        _rgb(c, PRIMARY)
        c.setFont("Helvetica-Bold", 16)
        self._centered(c, document.subject_email, width, y)
        y += 10

        _rgb(c, TEXT_DARK)
        c.setFont("Helvetica", 11)
        if document.kind is CertificateKind.ARTIFACT:
            lines = [
                f"is the sole and exclusive owner of the logo {document.artifact_id}",
                f"created through the {document.platform_name}.",
            ]
        else:
            lines = [
                "is the sole and exclusive owner of all logos, designs, graphics, and intellectual",
                f"property created through the {document.platform_name}",
                "associated with this account.",
            ]
        for line in lines:
            self._centered(c, line, width, y)
            y += 6
        y += 3

        block_height = len(RIGHTS) * 5 + 10
        _rgb(c, PANEL)
        c.setStrokeColorRGB(200 / 255.0, 200 / 255.0, 200 / 255.0)
        c.rect(25 * mm, self._top(y - 3 + block_height), width - 50 * mm, block_height * mm, fill=1, stroke=1)
        y += 5

        _rgb(c, TEXT_DARK)
        c.setFont("Helvetica", 10)
        for right in RIGHTS:
            self._centered(c, right, width, y)
            y += 5
        return y + 8

    def _draw_artifact_image(self, c: canvas.Canvas, image: bytes, width: float, y_mm: float):
        box = 40 * mm
        try:
            c.drawImage(
                ImageReader(BytesIO(image)),
                (width - box) / 2,
                self._top(y_mm) - box,
                width=box,
                height=box,
                preserveAspectRatio=True,
                anchor="c",
                mask="auto",
            )
        except (OSError, ValueError, RuntimeError) as e:
            raise DocumentRenderingError(f"artifact image could not be read: {e}") from e

    def _draw_details(self, c: canvas.Canvas, document: CertificateDocument, width: float, height: float):
        details_y = height / mm - 55 - 10

        _rgb(c, PANEL)
        c.rect(20 * mm, self._top(details_y + 25), width - 40 * mm, 30 * mm, fill=1, stroke=0)

        rows = [
            ("Certificate ID:", document.identifier),
            ("Issue Date:", document.issue_date),
            ("Account Email:", document.subject_email),
        ]
        if document.artifact_id is not None:
            rows.append(("Logo ID:", document.artifact_id))
        if document.signature:
            rows.append(("Digital Signature:", shorten_signature(document.signature)))

        _rgb(c, TEXT_GRAY)
        for i, (label, value) in enumerate(rows):
            row_y = self._top(details_y + i * 5)
            c.setFont("Helvetica", 9)
            c.drawString(25 * mm, row_y, label)
            c.setFont("Helvetica-Bold", 8 if label == "Digital Signature:" else 9)
            c.drawString(55 * mm, row_y, value)

        qr = self._qr.render(document.verification_url, QR_PIXEL_SIZE)
        qr_x = width - 45 * mm
        qr_y = self._top(details_y + 2 + QR_SIZE_MM)
        scale = QR_SIZE_MM * mm / QR_PIXEL_SIZE
        c.saveState()
        c.translate(qr_x, qr_y)
        c.scale(scale, scale)
        renderPDF.draw(qr, c, 0, 0)
        c.restoreState()

        c.setFont("Helvetica", 6)
        c.drawCentredString(qr_x + QR_SIZE_MM * mm / 2, qr_y - 3 * mm, "Scan to verify")

    def _draw_footer(self, c: canvas.Canvas, document: CertificateDocument, width: float):
        _rgb(c, TEXT_GRAY)
        c.setFont("Helvetica", 8)
        c.drawCentredString(width / 2, 10 * mm, f"Generated by {document.platform_name}")

        text = f"Verify at: {document.verification_url}"
        c.drawCentredString(width / 2, 6 * mm, text)
        text_width = c.stringWidth(text, "Helvetica", 8)
        x = (width - text_width) / 2
        c.linkURL(document.verification_url, (x, 5 * mm, x + text_width, 9 * mm), relative=0)
