from pydantic import BaseModel
from typing import Optional


class AccountCertificateRequest(BaseModel):
    userEmail: Optional[str] = None


class AccountVerifyRequest(BaseModel):
    certificateId: Optional[str] = None
    userEmail: Optional[str] = None
    digitalSignature: Optional[str] = None


class LogoCertificateRequest(BaseModel):
    clientEmail: Optional[str] = None
    logoId: Optional[str] = None
    logoImageBase64: Optional[str] = None


class LogoVerifyRequest(BaseModel):
    certificateId: Optional[str] = None
    logoImageBase64: Optional[str] = None
