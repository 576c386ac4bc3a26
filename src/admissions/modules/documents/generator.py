"""
PDF Generator for Application Documents

Renders the application form and the hall ticket (admit card) as A4 PDFs.
Rendering is synchronous; callers run it in a worker thread.
"""

from datetime import date, datetime
from decimal import Decimal
from io import BytesIO
from typing import Any
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from admissions.core.config import settings

TO_BE_ANNOUNCED = "To be announced"

APPLICATION_DECLARATION = (
    "I hereby declare that the information provided in this application form is true "
    "and correct to the best of my knowledge. I understand that providing false "
    "information may result in the cancellation of my application."
)

HALL_TICKET_DECLARATION = (
    "We accept and shall abide by all present and future rules and regulations of the "
    "institution relating to the chosen course, and shall comply with any action taken "
    "for a violation of them on our part."
)


def format_date(value: Any) -> str:
    """Format a date-like value as DD/MM/YYYY; unparseable strings pass through."""
    if value in (None, ""):
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, str):
        try:
            value = date.fromisoformat(value[:10])
        except ValueError:
            return value
    return value.strftime("%d/%m/%Y")


def _text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


class ApplicationPDFGenerator:
    """
    Generate application documents.

    Both documents share the institution header and a photo box in the top
    right corner. Photos are not embedded; the box is left for pasting.
    """

    def __init__(self):
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        self.styles.add(ParagraphStyle(
            name="Institution",
            parent=self.styles["Title"],
            fontSize=18,
            spaceAfter=4,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
        ))
        self.styles.add(ParagraphStyle(
            name="InstitutionAddress",
            parent=self.styles["Normal"],
            fontSize=12,
            alignment=TA_CENTER,
            spaceAfter=10,
        ))
        self.styles.add(ParagraphStyle(
            name="DocHeading",
            parent=self.styles["Normal"],
            fontSize=15,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
            spaceAfter=12,
        ))
        self.styles.add(ParagraphStyle(
            name="SectionHeading",
            parent=self.styles["Normal"],
            fontSize=13,
            textColor=HexColor("#2c3e50"),
            fontName="Helvetica-Bold",
            spaceBefore=10,
            spaceAfter=6,
            keepWithNext=True,
        ))
        self.styles.add(ParagraphStyle(
            name="Declaration",
            parent=self.styles["Normal"],
            fontSize=10,
            alignment=TA_JUSTIFY,
            leading=14,
        ))

    # ============================================
    # Building blocks
    # ============================================

    def _header(self, heading: str) -> list:
        return [
            Paragraph(escape(settings.institution_name), self.styles["Institution"]),
            Paragraph(escape(settings.institution_address), self.styles["InstitutionAddress"]),
            Paragraph(escape(heading), self.styles["DocHeading"]),
        ]

    def _field_table(self, rows: list[tuple[str, Any]]) -> Table:
        data = [
            [
                Paragraph(f"<b>{escape(label)}</b>", self.styles["Normal"]),
                Paragraph(escape(_text(value)), self.styles["Normal"]),
            ]
            for label, value in rows
        ]
        table = Table(data, colWidths=[60 * mm, 110 * mm])
        table.setStyle(TableStyle([
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
            ("LINEBELOW", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ]))
        return table

    def _identity_block(self, rows: list[tuple[str, Any]]) -> Table:
        """Identity fields on the left, photo box on the right."""
        photo = Table([["PHOTO"]], colWidths=[35 * mm], rowHeights=[42 * mm])
        photo.setStyle(TableStyle([
            ("BOX", (0, 0), (-1, -1), 1, colors.black),
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
        ]))
        fields = Table(
            [[Paragraph(f"<b>{escape(label)}:</b> {escape(_text(value))}", self.styles["Normal"])]
             for label, value in rows],
            colWidths=[130 * mm],
        )
        block = Table([[fields, photo]], colWidths=[135 * mm, 40 * mm])
        block.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
        return block

    def _signatures(self, labels: list[str]) -> Table:
        width = 170 * mm / len(labels)
        table = Table(
            [["_" * 24] * len(labels), labels],
            colWidths=[width] * len(labels),
        )
        table.setStyle(TableStyle([
            ("ALIGN", (0, 0), (-1, -1), "CENTER"),
            ("FONTSIZE", (0, 1), (-1, 1), 9),
            ("TOPPADDING", (0, 0), (-1, 0), 30),
        ]))
        return table

    def _section(self, title: str) -> Paragraph:
        return Paragraph(escape(title), self.styles["SectionHeading"])

    def _build(self, story: list, title: str) -> bytes:
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            title=title,
            author=settings.institution_name,
            leftMargin=20 * mm,
            rightMargin=20 * mm,
            topMargin=15 * mm,
            bottomMargin=15 * mm,
        )
        doc.build(story)
        return buffer.getvalue()

    # ============================================
    # Documents
    # ============================================

    def application_form(self, application) -> bytes:
        """Two-page application form with all content blocks and payment details."""
        personal = application.personal_info or {}
        address = application.address_info or {}
        contact = application.contact_info or {}
        education = application.educational_info or {}
        amount = application.payment_amount or Decimal("0")

        story = self._header(settings.exam_title)
        story.append(self._identity_block([
            ("Application No", application.application_no),
            ("Date", format_date(application.applied_at)),
        ]))
        story.append(Spacer(1, 6 * mm))

        story.append(self._section("Personal Information"))
        story.append(self._field_table([
            ("Name of the Candidate", personal.get("name")),
            ("Name of Father", personal.get("fatherName")),
            ("Name of Mother", personal.get("motherName")),
            ("Name of Guardian", personal.get("guardianName")),
            ("Date of Birth", format_date(personal.get("dateOfBirth"))),
        ]))
        story.append(PageBreak())

        story.append(self._section("Address Information"))
        story.append(self._field_table([
            ("Place", address.get("place")),
            ("Mahallu", address.get("mahallu")),
            ("Post Office", address.get("postOffice")),
            ("Pin Code", address.get("pinCode")),
            ("Panchayath", address.get("panchayath")),
            ("Constituency", address.get("constituency")),
            ("District", address.get("district")),
            ("State", address.get("state")),
        ]))

        story.append(self._section("Contact Details"))
        story.append(self._field_table([
            ("Mobile Number", contact.get("mobileNumber")),
            ("Mobile No of Candidate", contact.get("candidateMobile")),
            ("WhatsApp", contact.get("whatsappNumber")),
            ("Email", contact.get("email")),
        ]))

        story.append(self._section("Educational Qualification"))
        story.append(self._field_table([
            ("Madrasa", education.get("madrasa")),
            ("School", education.get("school")),
            ("Reg. No of SSLC/Equivalent", education.get("regNo")),
            ("Medium", education.get("medium")),
            ("Hifz Completed", bool(education.get("hifzCompleted"))),
        ]))

        story.append(self._section("Fee Payment Details"))
        story.append(self._field_table([
            ("Transaction No", application.payment_transaction_id),
            ("Fee Amount", f"Rs. {amount:.2f}"),
            ("Date of Payment", format_date(application.payment_date)),
            ("Status", application.payment_status.value),
        ]))

        story.append(self._section("Declaration"))
        story.append(Paragraph(APPLICATION_DECLARATION, self.styles["Declaration"]))
        story.append(self._signatures(["Signature of Candidate", "Signature of Parent/Guardian"]))

        return self._build(story, f"Application {application.application_no}")

    def hall_ticket(self, application, department_name: str | None = None) -> bytes:
        """Single-page admit card with exam details."""
        personal = application.personal_info or {}
        address = application.address_info or {}
        contact = application.contact_info or {}
        education = application.educational_info or {}

        story = self._header(f"ADMIT CARD - {settings.exam_title}")
        story.append(self._identity_block([
            ("Application No", application.application_no),
            ("Date of Examination", format_date(application.exam_date) or TO_BE_ANNOUNCED),
            ("Time of Examination", application.exam_time or TO_BE_ANNOUNCED),
            ("Examination Centre", application.exam_center_name or TO_BE_ANNOUNCED),
        ]))
        story.append(Spacer(1, 6 * mm))

        address_line = ", ".join(
            part
            for part in (
                address.get("place"),
                address.get("mahallu"),
                address.get("postOffice"),
                address.get("pinCode"),
                address.get("district"),
                address.get("state"),
            )
            if part
        )
        rows = [
            ("Name of the Candidate", personal.get("name")),
            ("Date of Birth", format_date(personal.get("dateOfBirth"))),
            ("Name of Father", personal.get("fatherName")),
            ("Address", address_line),
            ("Mobile Number", contact.get("mobileNumber")),
            ("Medium", education.get("medium")),
        ]
        if department_name:
            rows.append(("Department", department_name))
        story.append(self._field_table(rows))

        story.append(self._section("Declaration"))
        story.append(Paragraph(HALL_TICKET_DECLARATION, self.styles["Declaration"]))
        story.append(self._signatures([
            "Signature of Parent/Guardian",
            "Signature of Candidate",
            "Signature of Invigilator",
        ]))

        return self._build(story, f"Hall Ticket {application.application_no}")
