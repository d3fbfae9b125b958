import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
from reportlab.graphics.shapes import Drawing

from ownercert import CertificateIssuer, ConfigurationError, Secret, account_document, artifact_document
from ownercert_service import config
from ownercert_service.logging_config import StructuredFormatter, audit_log, get_request_id, set_request_id
from ownercert_service.rendering import ReportLabCertificateRenderer, ReportLabQrRenderer, shorten_signature
from ownercert_service.util import decode_image_base64, iso_ms

ISSUED_AT = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


# Config
def test_load_secret_from_environment():
    assert config.load_secret().value == "service-test-secret"


def test_load_secret_dev_fallback(monkeypatch):
    monkeypatch.setattr(config, "CERTIFICATE_SECRET", "")
    monkeypatch.setattr(config, "ENV", "dev")
    assert config.load_secret().value == config.DEV_SECRET


def test_load_secret_required_outside_dev(monkeypatch):
    monkeypatch.setattr(config, "CERTIFICATE_SECRET", "")
    monkeypatch.setattr(config, "ENV", "prod")
    with pytest.raises(ConfigurationError):
        config.load_secret()
    assert config.is_production()


def test_validity_window_settings(monkeypatch):
    assert config.max_age() == timedelta(days=365)
    assert config.clock_skew() == timedelta(hours=1)
    monkeypatch.setattr(config, "CERTIFICATE_MAX_AGE_DAYS", 0)
    monkeypatch.setattr(config, "CERTIFICATE_CLOCK_SKEW_SECONDS", 0)
    assert config.max_age() is None
    assert config.clock_skew() is None


def test_validate_config():
    assert all(config.validate_config().values())


# Util
def test_decode_image_base64():
    assert decode_image_base64("aGVsbG8=") == b"hello"
    assert decode_image_base64("data:image/png;base64,aGVsbG8=") == b"hello"


@pytest.mark.parametrize("bad", ["", "!!!", "aGVsbG8"])
def test_decode_image_base64_rejects(bad):
    with pytest.raises(ValueError):
        decode_image_base64(bad)


def test_iso_ms():
    assert iso_ms(datetime(2026, 10, 18, 9, 30, 0, 123456, tzinfo=timezone.utc)) == "2026-10-18T09:30:00.123Z"


# Logging
def test_audit_log_masks_email(caplog):
    with caplog.at_level(logging.INFO, logger="ownercert.audit"):
        audit_log.certificate_issued("account", "CERT-1-ALICE-2", "alice@example.com")
    record = caplog.records[-1]
    assert record.extra_fields["event_type"] == "CERTIFICATE_ISSUED"
    assert record.extra_fields["subject"] == "ali..."
    assert "alice@example.com" not in StructuredFormatter().format(record)


def test_structured_formatter_includes_request_id(caplog):
    set_request_id("req-abc")
    assert get_request_id() == "req-abc"
    with caplog.at_level(logging.WARNING, logger="ownercert.audit"):
        audit_log.verification_failed("account", "CERT-X", "checksum", "checksum mismatch")
    data = json.loads(StructuredFormatter().format(caplog.records[-1]))
    assert data["event_type"] == "VERIFICATION_FAILED"
    assert data["request_id"] == "req-abc"
    assert data["reason"] == "checksum"


# Rendering
def test_qr_renderer_size():
    drawing = ReportLabQrRenderer().render("https://certs.example.com/verify/CERT-1", 80)
    assert isinstance(drawing, Drawing)
    assert drawing.width == 80
    assert drawing.height == 80


def test_shorten_signature():
    assert shorten_signature("A" * 10) == "A" * 10
    assert shorten_signature("A" * 50) == "A" * 40 + "..."


def test_render_account_pdf():
    cert = CertificateIssuer(Secret("render"), clock=lambda: ISSUED_AT).issue_account_certificate("alice@example.com")
    pdf = ReportLabCertificateRenderer().render(account_document(cert, "https://certs.example.com", "Test Platform"))
    assert pdf.startswith(b"%PDF")


def test_render_artifact_pdf(png_bytes):
    issuer = CertificateIssuer(Secret("render"), clock=lambda: ISSUED_AT)
    cert = issuer.issue_artifact_certificate("alice@example.com", "logo-42", png_bytes)
    doc = artifact_document(cert, png_bytes, "https://certs.example.com", "Test Platform")
    pdf = ReportLabCertificateRenderer().render(doc)
    assert pdf.startswith(b"%PDF")
