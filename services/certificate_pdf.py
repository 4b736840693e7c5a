# services/certificate_pdf.py
"""
Certificate artifact rendering with ReportLab.

One fixed landscape A4 template: border, title, the student's name, the
course title, the score and the issue date, with the platform name at the
foot. Returns the PDF as bytes so callers can stream it without touching
disk.
"""
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.pdfgen import canvas

from models.certificate import Certificate

PRIMARY = colors.HexColor("#007bff")
MUTED = colors.HexColor("#6c757d")
INK = colors.HexColor("#212529")
BACKGROUND = colors.HexColor("#f8f9fa")


def render_certificate_pdf(certificate: Certificate, platform_name: str) -> bytes:
    buffer = BytesIO()
    width, height = landscape(A4)
    pdf = canvas.Canvas(buffer, pagesize=(width, height))
    pdf.setTitle(f"Certificate {certificate.certificate_number}")
    center = width / 2

    pdf.setFillColor(BACKGROUND)
    pdf.rect(0, 0, width, height, fill=1, stroke=0)
    pdf.setStrokeColor(PRIMARY)
    pdf.setLineWidth(3)
    pdf.rect(20, 20, width - 40, height - 40, fill=0, stroke=1)

    lines = [
        ("Helvetica-Bold", 40, PRIMARY, "Certificate of Completion", height - 120),
        ("Helvetica", 20, MUTED, "This is to certify that", height - 180),
        ("Helvetica-Bold", 32, INK, certificate.student_name, height - 230),
        ("Helvetica", 18, MUTED, "has successfully completed the course", height - 280),
        ("Helvetica-Bold", 26, PRIMARY, certificate.course_title, height - 325),
        ("Helvetica", 16, MUTED, f"Score: {certificate.score}%", height - 375),
        ("Helvetica", 14, MUTED, f"Issued on: {certificate.issued_at:%B %d, %Y}", height - 405),
        ("Helvetica", 14, MUTED, platform_name, 90),
        ("Helvetica", 10, MUTED, f"Certificate No. {certificate.certificate_number}", 60),
    ]
    for font, size, color, text, y in lines:
        pdf.setFont(font, size)
        pdf.setFillColor(color)
        pdf.drawCentredString(center, y, text)

    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
