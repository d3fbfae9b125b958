from typing import Optional

from fastapi import FastAPI, HTTPException, Query, Request, Response

from ownercert import (
    CertificateIssuer,
    CertificateVerifier,
    DocumentRenderingError,
    FailureReason,
    IssuanceError,
    VerificationResult,
    account_document,
    artifact_document,
    render_document,
)
from . import config
from .logging_config import audit_log, configure_logging, set_request_id
from .models import AccountCertificateRequest, AccountVerifyRequest, LogoCertificateRequest, LogoVerifyRequest
from .rendering import ReportLabCertificateRenderer
from .util import decode_image_base64, iso_ms, no_store_headers

app = FastAPI(title="Stateless Ownership Certificates")

ISSUER: Optional[CertificateIssuer] = None
VERIFIER: Optional[CertificateVerifier] = None
RENDERER = ReportLabCertificateRenderer()


@app.on_event("startup")
def _startup():
    global ISSUER, VERIFIER
    level = "DEBUG" if config.is_debug() else config.LOG_LEVEL
    configure_logging(level, config.LOG_JSON, config.LOG_FILE)
    secret = config.load_secret()
    ISSUER = CertificateIssuer(secret)
    VERIFIER = CertificateVerifier(secret, max_age=config.max_age(), clock_skew=config.clock_skew())


@app.middleware("http")
async def request_context(request: Request, call_next):
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def pdf_response(pdf: bytes, filename: str, **headers) -> Response:
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{filename}"',
            **no_store_headers(),
            **headers,
        },
    )


def account_payload(result: VerificationResult, method: str, user_email: Optional[str] = None) -> dict:
    return {
        "certificateId": result.certificate_id,
        "userEmail": user_email or result.estimated_email,
        "subjectPrefix": result.subject_prefix,
        "issueDate": result.issue_date,
        "status": "active",
        "createdAt": iso_ms(result.issued_at),
        "verificationMethod": method,
    }


def logo_payload(result: VerificationResult) -> dict:
    return {
        "certificateId": result.certificate_id,
        "logoId": result.artifact_id,
        "clientEmail": result.estimated_email,
        "clientHandle": result.client_handle,
        "issueDate": result.issue_date,
        "createdAt": iso_ms(result.issued_at),
        "status": "active",
        "verified": True,
        "verificationMethod": "checksum",
        "logoImageVerified": result.artifact_bytes_verified,
    }


def _failed(kind: str, certificate_id: str, result: VerificationResult):
    audit_log.verification_failed(kind, certificate_id, result.reason.value, result.detail)


# ============================================================
# Account certificates
# ============================================================

@app.post("/api/certificate/generate")
def generate_account_certificate(req: AccountCertificateRequest):
    if not req.userEmail:
        audit_log.issuance_rejected("account", "userEmail", "missing")
        raise HTTPException(400, "User email is required")

    try:
        cert = ISSUER.issue_account_certificate(req.userEmail)
    except IssuanceError as e:
        audit_log.issuance_rejected("account", e.field, e.message)
        raise HTTPException(400, str(e))

    document = account_document(cert, config.BASE_URL, config.PLATFORM_NAME)
    try:
        pdf = render_document(document, RENDERER)
    except DocumentRenderingError as e:
        audit_log.issuance_rejected("account", "document", str(e))
        raise HTTPException(500, "Certificate document could not be rendered")
    audit_log.certificate_issued("account", cert.identifier, cert.subject_email)

    return pdf_response(
        pdf,
        document.filename,
        **{"X-Certificate-Id": cert.identifier, "X-Certificate-Signature": cert.signature},
    )


@app.get("/api/certificate/verify")
def verify_account_certificate(certificate_id: Optional[str] = Query(None, alias="id")):
    if not certificate_id:
        raise HTTPException(400, "Certificate ID is required")

    result = VERIFIER.verify_account_certificate(certificate_id)
    if not result.is_valid():
        _failed("account", certificate_id, result)
        raise HTTPException(404, "Certificate not found")

    audit_log.certificate_verified("account", result.certificate_id, "stateless")
    payload = account_payload(result, "stateless")
    payload.update({
        "digitalSignature": "Verified via embedded checksum",
        "verified": True,
        "note": "This certificate is verified from its identifier alone, without database storage.",
    })
    return payload


@app.post("/api/certificate/verify")
def verify_account_certificate_full(req: AccountVerifyRequest):
    if not req.certificateId:
        raise HTTPException(400, "Certificate ID is required")

    basic = VERIFIER.verify_account_certificate(req.certificateId)
    if not basic.is_valid():
        _failed("account", req.certificateId, basic)
        return {
            "success": False,
            "message": "Invalid certificate ID format" if basic.reason is FailureReason.FORMAT else "Certificate ID verification failed",
            "reason": basic.reason.value,
            "detail": basic.detail,
            "certificateId": req.certificateId,
        }

    if req.userEmail and req.digitalSignature:
        full = VERIFIER.verify_account_certificate_full(req.certificateId, req.userEmail, req.digitalSignature)
        if not full.is_valid():
            _failed("account", req.certificateId, full)
            return {
                "success": False,
                "message": "Certificate signature verification failed",
                "reason": full.reason.value,
                "detail": full.detail,
                "certificateId": req.certificateId,
            }

        audit_log.certificate_verified("account", full.certificate_id, "full_cryptographic")
        certificate = account_payload(full, "full_cryptographic", user_email=req.userEmail)
        certificate["digitalSignature"] = req.digitalSignature.upper()
        return {
            "success": True,
            "message": "Certificate is fully verified and authentic",
            "certificate": certificate,
        }

    audit_log.certificate_verified("account", basic.certificate_id, "id_structure")
    return {
        "success": True,
        "message": "Certificate ID is valid (basic verification)",
        "certificate": account_payload(basic, "id_structure"),
    }


# ============================================================
# Artifact (logo) certificates
# ============================================================

@app.post("/api/certificate/logo/generate")
def generate_logo_certificate(req: LogoCertificateRequest):
    if not req.clientEmail or not req.logoId or not req.logoImageBase64:
        audit_log.issuance_rejected("artifact", "request", "missing fields")
        raise HTTPException(
            400,
            "Missing required fields: clientEmail, logoId, and logoImageBase64 are required",
        )

    try:
        image = decode_image_base64(req.logoImageBase64)
    except ValueError as e:
        audit_log.issuance_rejected("artifact", "logoImageBase64", str(e))
        raise HTTPException(400, str(e))

    try:
        cert = ISSUER.issue_artifact_certificate(req.clientEmail, req.logoId, image)
    except IssuanceError as e:
        audit_log.issuance_rejected("artifact", e.field, e.message)
        raise HTTPException(400, str(e))

    document = artifact_document(cert, image, config.BASE_URL, config.PLATFORM_NAME)
    try:
        pdf = render_document(document, RENDERER)
    except DocumentRenderingError as e:
        audit_log.issuance_rejected("artifact", "logoImageBase64", str(e))
        raise HTTPException(400, "logoImageBase64 is not a readable image")

    audit_log.certificate_issued("artifact", cert.identifier, cert.subject_email, artifact_id=cert.artifact_id)
    return pdf_response(pdf, document.filename, **{"X-Certificate-Id": cert.identifier})


def _verify_logo(certificate_id: Optional[str], image: Optional[bytes]) -> dict:
    if not certificate_id:
        raise HTTPException(400, "Certificate ID is required")

    result = VERIFIER.verify_artifact_certificate(certificate_id, image)
    if not result.is_valid():
        _failed("artifact", certificate_id, result)
        raise HTTPException(404, f"Certificate verification failed: {result.detail}")

    audit_log.certificate_verified(
        "artifact", result.certificate_id, "checksum",
        artifact_bytes_verified=result.artifact_bytes_verified,
    )
    return logo_payload(result)


@app.get("/api/certificate/logo/verify")
def verify_logo_certificate(certificate_id: Optional[str] = Query(None, alias="id")):
    return _verify_logo(certificate_id, None)


@app.post("/api/certificate/logo/verify")
def verify_logo_certificate_with_image(req: LogoVerifyRequest):
    image = None
    if req.logoImageBase64:
        try:
            image = decode_image_base64(req.logoImageBase64)
        except ValueError as e:
            raise HTTPException(400, str(e))
    return _verify_logo(req.certificateId, image)


# ============================================================
# Verification links printed on certificates
# ============================================================

@app.get("/verify/logo/{certificate_id:path}")
def verify_logo_link(certificate_id: str):
    return _verify_logo(certificate_id, None)


@app.get("/verify/{certificate_id}")
def verify_account_link(certificate_id: str):
    return verify_account_certificate(certificate_id)


@app.get("/health")
def health():
    return {"status": "ok", "env": config.ENV, "config": config.validate_config()}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
