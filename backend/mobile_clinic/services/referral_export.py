from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from io import BytesIO
from textwrap import wrap

from openpyxl import Workbook
from openpyxl.utils import get_column_letter
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from sqlalchemy import select
from sqlalchemy.orm import Session

from mobile_clinic.core.errors import NotFound, ValidationError
from mobile_clinic.models.patient import Patient
from mobile_clinic.models.referral import Referral
from mobile_clinic.models.user import User
from mobile_clinic.models.visit import Visit
from mobile_clinic.services.patients import age_on

EXPORT_FORMATS = {"pdf", "excel"}

EXCEL_COLUMNS = [
    ("Patient Name", 25),
    ("Queue No.", 15),
    ("Referral Date", 15),
    ("Referral Type", 20),
    ("Illness", 25),
    ("Duration", 20),
    ("Reason", 50),
]


@dataclass
class ReferralRow:
    english_name: str
    date_of_birth: date | None
    sex: str | None
    address: str | None
    queue_no: str
    referral_date: date
    referral_type: str
    illness: str | None
    duration: str | None
    reason: str | None
    doctor_name: str | None


def referrals_for_date(db: Session, visit_date: date) -> list[ReferralRow]:
    stmt = (
        select(Referral, Visit, Patient, User.username)
        .join(Visit, Visit.id == Referral.visit_id)
        .join(Patient, Patient.id == Visit.patient_id)
        .outerjoin(User, User.id == Referral.doctor_id)
        .where(Visit.visit_date == visit_date)
        .order_by(Patient.english_name.asc(), Visit.created_at.asc(), Referral.id.asc())
    )
    rows = []
    for referral, visit, patient, username in db.execute(stmt).unique().all():
        rows.append(
            ReferralRow(
                english_name=patient.english_name,
                date_of_birth=patient.date_of_birth,
                sex=patient.sex.value if patient.sex else None,
                address=patient.address,
                queue_no=visit.queue_no,
                referral_date=referral.referral_date,
                referral_type=referral.referral_type.value,
                illness=referral.illness,
                duration=referral.duration,
                reason=referral.reason,
                doctor_name=username,
            )
        )
    return rows


def build_referral_letters_pdf(rows: list[ReferralRow]) -> bytes:
    buffer = BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    for row in rows:
        _draw_letter(pdf, row)
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


def _draw_letter(pdf: canvas.Canvas, row: ReferralRow) -> None:
    width, height = A4
    left = 20 * mm
    top = height - 25 * mm
    y = top

    pdf.setFont("Helvetica-Bold", 20)
    pdf.drawString(left, y, "Referral Letter")
    y -= 14 * mm

    pdf.setFont("Helvetica", 12)
    pdf.drawString(left, y, f"Date: {row.referral_date.isoformat()}")
    y -= 14 * mm
    pdf.drawString(left, y, "To whom it may concern,")
    y -= 14 * mm

    age = age_on(row.date_of_birth, row.referral_date)
    for line in [
        f"Patient Name: {row.english_name}",
        f"Gender: {row.sex or 'N/A'}",
        f"Age: {age if age is not None else 'N/A'}",
        f"Address: {row.address or 'N/A'}",
        f"Referred to: {row.referral_type}",
    ]:
        pdf.drawString(left, y, line)
        y -= 6 * mm
    y -= 10 * mm

    illness = row.illness or "an unspecified condition"
    duration = row.duration or "an unspecified duration"
    for line in wrap(f"The patient above has been suffering from {illness} for {duration}.", 85):
        y = _page_break(pdf, y, top)
        pdf.drawString(left, y, line)
        y -= 6 * mm
    y -= 8 * mm

    y = _page_break(pdf, y, top)
    pdf.drawString(left, y, "Reason for referral:")
    y -= 6 * mm
    for line in wrap(row.reason or "N/A", 85):
        y = _page_break(pdf, y, top)
        pdf.drawString(left, y, line)
        y -= 6 * mm
    y -= 14 * mm

    # Closing and signature stay on one page.
    y = _page_break(pdf, y, top, reserve=10 * mm)
    pdf.drawString(left, y, "Thank you.")
    y -= 10 * mm
    pdf.setFont("Helvetica-Bold", 12)
    pdf.drawString(left, y, row.doctor_name or "Referring Doctor")


def _page_break(pdf: canvas.Canvas, y: float, top: float, *, reserve: float = 0) -> float:
    """Start a new page when ``y`` (plus ``reserve`` below it) runs into the bottom margin."""
    if y - reserve >= 25 * mm:
        return y
    pdf.showPage()
    pdf.setFont("Helvetica", 12)
    return top


def build_referrals_excel(rows: list[ReferralRow], visit_date: date) -> bytes:
    wb = Workbook()
    ws = wb.active
    ws.title = f"Referrals {visit_date.isoformat()}"

    ws.append([header for header, _width in EXCEL_COLUMNS])
    for row in rows:
        ws.append(
            [
                row.english_name,
                row.queue_no,
                row.referral_date,
                row.referral_type,
                row.illness or "",
                row.duration or "",
                row.reason or "",
            ]
        )

    for index, (_header, width) in enumerate(EXCEL_COLUMNS, start=1):
        ws.column_dimensions[get_column_letter(index)].width = width

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()


def export_referrals(db: Session, visit_date: date, export_format: str) -> tuple[bytes, str, str]:
    """Render the day's referrals; returns (content, media type, filename)."""
    fmt = (export_format or "").strip().lower()
    if fmt not in EXPORT_FORMATS:
        raise ValidationError.for_field("format", "Format must be 'pdf' or 'excel'")
    rows = referrals_for_date(db, visit_date)
    if not rows:
        raise NotFound(f"No referrals found for date: {visit_date.isoformat()}")
    stamp = visit_date.isoformat()
    if fmt == "pdf":
        return build_referral_letters_pdf(rows), "application/pdf", f"Referrals_{stamp}.pdf"
    return (
        build_referrals_excel(rows, visit_date),
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        f"Referrals_{stamp}.xlsx",
    )
