# schemas/certificate.py
from typing import Optional

from pydantic import BaseModel

from models.certificate import Certificate


class CertificateGenerate(BaseModel):
    course_id: str
    quiz_id: str


class CertificateOut(Certificate):
    certificate_url: Optional[str] = None


class CertificateEnvelope(BaseModel):
    success: bool = True
    message: Optional[str] = None
    certificate: CertificateOut
    certificate_url: str
