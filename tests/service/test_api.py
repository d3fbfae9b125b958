import base64
import logging
from urllib.parse import urlparse

from fastapi.testclient import TestClient
from ownercert import DocumentRenderer, account_document, artifact_document
from ownercert_service import config
from ownercert_service import main as service
from ownercert_service.main import app

client = TestClient(app)


def b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def issue_account(email="alice@example.com"):
    r = client.post("/api/certificate/generate", json={"userEmail": email})
    assert r.status_code == 200
    return r.headers["X-Certificate-Id"], r.headers["X-Certificate-Signature"]


def issue_logo(png, logo_id="logo-42", email="alice@example.com"):
    r = client.post("/api/certificate/logo/generate", json={
        "clientEmail": email, "logoId": logo_id, "logoImageBase64": b64(png),
    })
    assert r.status_code == 200
    return r.headers["X-Certificate-Id"]


# Account issuance returns a PDF plus the identifier and signature
def test_generate_account_certificate():
    r = client.post("/api/certificate/generate", json={"userEmail": "alice@example.com"})
    assert r.status_code == 200
    assert r.headers["content-type"] == "application/pdf"
    assert r.content.startswith(b"%PDF")
    assert r.headers["X-Certificate-Id"].startswith("CERT-")
    assert "-ALICE-" in r.headers["X-Certificate-Id"]
    assert r.headers["X-Certificate-Signature"]
    assert "ownership-certificate-alice-" in r.headers["content-disposition"]
    assert "no-store" in r.headers["cache-control"]
    assert r.headers["X-Request-ID"]


def test_generate_account_certificate_requires_email():
    r = client.post("/api/certificate/generate", json={})
    assert r.status_code == 400
    assert r.json()["detail"] == "User email is required"


def test_request_id_echoed():
    r = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert r.headers["X-Request-ID"] == "req-123"


# Stateless GET verification recovers only the prefix
def test_verify_account_get():
    cert_id, _ = issue_account()
    r = client.get("/api/certificate/verify", params={"id": cert_id})
    assert r.status_code == 200
    body = r.json()
    assert body["certificateId"] == cert_id
    assert body["userEmail"] == "alice@[domain]"
    assert body["subjectPrefix"] == "alice"
    assert body["verified"] is True
    assert body["verificationMethod"] == "stateless"
    assert body["status"] == "active"
    assert body["createdAt"].endswith("Z")


def test_verify_account_get_lower_case_id():
    cert_id, _ = issue_account()
    r = client.get("/api/certificate/verify", params={"id": cert_id.lower()})
    assert r.status_code == 200
    assert r.json()["certificateId"] == cert_id


def test_verify_account_get_tampered():
    cert_id, _ = issue_account()
    r = client.get("/api/certificate/verify", params={"id": cert_id.replace("-ALICE-", "-BOB-")})
    assert r.status_code == 404
    assert r.json()["detail"] == "Certificate not found"


def test_verify_account_get_requires_id():
    r = client.get("/api/certificate/verify")
    assert r.status_code == 400


# Full verification needs the complete email and the signature
def test_verify_account_post_full():
    cert_id, signature = issue_account()
    r = client.post("/api/certificate/verify", json={
        "certificateId": cert_id, "userEmail": "alice@example.com", "digitalSignature": signature,
    })
    body = r.json()
    assert r.status_code == 200
    assert body["success"] is True
    assert body["certificate"]["verificationMethod"] == "full_cryptographic"
    assert body["certificate"]["userEmail"] == "alice@example.com"


def test_verify_account_post_other_domain():
    cert_id, signature = issue_account()
    r = client.post("/api/certificate/verify", json={
        "certificateId": cert_id, "userEmail": "alice@other.org", "digitalSignature": signature,
    })
    body = r.json()
    assert r.status_code == 200
    assert body["success"] is False
    assert body["reason"] == "signature"


def test_verify_account_post_basic():
    cert_id, _ = issue_account()
    r = client.post("/api/certificate/verify", json={"certificateId": cert_id})
    body = r.json()
    assert body["success"] is True
    assert body["certificate"]["verificationMethod"] == "id_structure"
    assert body["certificate"]["userEmail"] == "alice@[domain]"


def test_verify_account_post_malformed():
    r = client.post("/api/certificate/verify", json={"certificateId": "not-a-certificate"})
    body = r.json()
    assert body["success"] is False
    assert body["reason"] == "format"
    assert body["message"] == "Invalid certificate ID format"


# Logo certificates
def test_generate_logo_certificate(png_bytes):
    r = client.post("/api/certificate/logo/generate", json={
        "clientEmail": "alice@example.com", "logoId": "logo-42", "logoImageBase64": b64(png_bytes),
    })
    assert r.status_code == 200
    assert r.content.startswith(b"%PDF")
    assert r.headers["X-Certificate-Id"].startswith("LOGO-LOGO-42-")
    assert "logo-certificate-logo-42-" in r.headers["content-disposition"]


def test_generate_logo_certificate_accepts_data_url(png_bytes):
    r = client.post("/api/certificate/logo/generate", json={
        "clientEmail": "alice@example.com",
        "logoId": "logo-7",
        "logoImageBase64": "data:image/png;base64," + b64(png_bytes),
    })
    assert r.status_code == 200


def test_generate_logo_certificate_missing_fields():
    r = client.post("/api/certificate/logo/generate", json={"clientEmail": "alice@example.com"})
    assert r.status_code == 400
    assert "Missing required fields" in r.json()["detail"]


def test_generate_logo_certificate_bad_base64():
    r = client.post("/api/certificate/logo/generate", json={
        "clientEmail": "alice@example.com", "logoId": "logo-42", "logoImageBase64": "not base64!!",
    })
    assert r.status_code == 400


def test_generate_logo_certificate_non_ascii_id(png_bytes):
    r = client.post("/api/certificate/logo/generate", json={
        "clientEmail": "alice@example.com", "logoId": "lögo", "logoImageBase64": b64(png_bytes),
    })
    assert r.status_code == 400
    assert "artifact_id" in r.json()["detail"]


def test_verify_logo_get(png_bytes):
    cert_id = issue_logo(png_bytes, logo_id="brand-logo-v2")
    r = client.get("/api/certificate/logo/verify", params={"id": cert_id})
    assert r.status_code == 200
    body = r.json()
    assert body["logoId"] == "brand-logo-v2"
    assert body["clientEmail"] == "alice@[domain]"
    assert body["clientHandle"] == "alice"
    assert body["verified"] is True
    assert body["logoImageVerified"] is None


def test_verify_logo_post_with_image(png_bytes, other_png_bytes):
    cert_id = issue_logo(png_bytes)
    r = client.post("/api/certificate/logo/verify", json={
        "certificateId": cert_id, "logoImageBase64": b64(png_bytes),
    })
    assert r.status_code == 200
    assert r.json()["logoImageVerified"] is True

    r = client.post("/api/certificate/logo/verify", json={
        "certificateId": cert_id, "logoImageBase64": b64(other_png_bytes),
    })
    assert r.status_code == 200
    assert r.json()["logoImageVerified"] is False


def test_verify_logo_tampered(png_bytes):
    cert_id = issue_logo(png_bytes)
    r = client.get("/api/certificate/logo/verify", params={"id": cert_id.replace("LOGO-42", "LOGO-43")})
    assert r.status_code == 404
    assert r.json()["detail"].startswith("Certificate verification failed")


def test_account_id_is_not_a_logo_certificate():
    cert_id, _ = issue_account()
    r = client.get("/api/certificate/logo/verify", params={"id": cert_id})
    assert r.status_code == 404


def test_health():
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


# Links printed on certificates (footer and QR code) resolve
def test_document_verification_links_resolve(png_bytes):
    account = service.ISSUER.issue_account_certificate("alice@example.com")
    doc = account_document(account, config.BASE_URL, config.PLATFORM_NAME)
    r = client.get(urlparse(doc.verification_url).path)
    assert r.status_code == 200
    assert r.json()["certificateId"] == account.identifier

    logo = service.ISSUER.issue_artifact_certificate("alice@example.com", "brand/logo 1", png_bytes)
    doc = artifact_document(logo, png_bytes, config.BASE_URL, config.PLATFORM_NAME)
    r = client.get(urlparse(doc.verification_url).path)
    assert r.status_code == 200
    assert r.json()["logoId"] == "brand/logo 1"


def test_tampered_verification_link():
    account = service.ISSUER.issue_account_certificate("alice@example.com")
    r = client.get("/verify/" + account.identifier.replace("-ALICE-", "-BOB-"))
    assert r.status_code == 404


def test_generate_logo_certificate_unreadable_image():
    r = client.post("/api/certificate/logo/generate", json={
        "clientEmail": "alice@example.com", "logoId": "logo-42", "logoImageBase64": b64(b"not an image"),
    })
    assert r.status_code == 400
    assert r.json()["detail"] == "logoImageBase64 is not a readable image"


class EmptyRenderer(DocumentRenderer):

    def render(self, document):
        return b""


def test_generate_account_certificate_render_failure(monkeypatch):
    monkeypatch.setattr(service, "RENDERER", EmptyRenderer())
    r = client.post("/api/certificate/generate", json={"userEmail": "alice@example.com"})
    assert r.status_code == 500
    assert r.json()["detail"] == "Certificate document could not be rendered"


def test_debug_flag_forces_debug_logging(monkeypatch):
    monkeypatch.setenv("OWNERCERT_DEBUG", "1")
    try:
        service._startup()
        assert logging.getLogger().level == logging.DEBUG
    finally:
        monkeypatch.delenv("OWNERCERT_DEBUG")
        service._startup()
    assert logging.getLogger().level == logging.getLevelName(config.LOG_LEVEL.upper())
