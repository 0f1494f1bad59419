"""Prescription PDF rendering (ReportLab platypus).

Layout: clinic header, title, patient block, medication table, notes,
prescriber block, footer.
"""

from __future__ import annotations

from io import BytesIO
from xml.sax.saxutils import escape

from django.conf import settings
from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

NA = 'N/A'

FOOTER_LINES = (
    'This prescription is valid for 30 days from the date of issue.',
    'Please consult your pharmacist for any questions about your medications.',
    'For medical emergencies, call 911 or visit your nearest emergency room.',
)


def _styles():
    base = getSampleStyleSheet()
    return {
        'clinic': ParagraphStyle('clinic', parent=base['Heading1'], textColor=colors.HexColor('#1d4ed8')),
        'small': ParagraphStyle('small', parent=base['Normal'], fontSize=9, leading=12, textColor=colors.HexColor('#4b5563')),
        'title': ParagraphStyle('title', parent=base['Title'], alignment=TA_CENTER, spaceBefore=6, spaceAfter=12),
        'section': ParagraphStyle('section', parent=base['Heading3'], spaceBefore=10, spaceAfter=4),
        'body': base['Normal'],
        'cell': ParagraphStyle('cell', parent=base['Normal'], fontSize=9, leading=11),
        'footer': ParagraphStyle('footer', parent=base['Normal'], fontSize=8, leading=10, alignment=TA_CENTER, textColor=colors.grey),
    }


def _text(value) -> str:
    if value in (None, ''):
        return NA
    return escape(str(value))


def _field(label: str, value) -> str:
    return f'<b>{label}:</b> {_text(value)}'


def _prescribed_on(prescription) -> str:
    when = prescription.prescribed_at or timezone.now()
    return timezone.localtime(when).strftime('%Y-%m-%d')


def _header(prescription, st):
    clinic = [
        Paragraph(escape(settings.CLINIC_NAME), st['clinic']),
        Paragraph(
            '<br/>'.join(
                escape(line)
                for line in (
                    settings.CLINIC_ADDRESS,
                    f'Phone: {settings.CLINIC_PHONE}',
                    f'Email: {settings.CLINIC_EMAIL}',
                )
            ),
            st['small'],
        ),
    ]
    meta = Paragraph(
        f'Prescription #{prescription.id}<br/>Date: {_prescribed_on(prescription)}',
        st['small'],
    )
    table = Table([[clinic, meta]], colWidths=[120 * mm, 50 * mm])
    table.setStyle(
        TableStyle(
            [
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('LINEBELOW', (0, 0), (-1, 0), 1, colors.HexColor('#1d4ed8')),
                ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ]
        )
    )
    return table


def _patient_block(patient, st):
    left = [Paragraph(_field(label, value), st['body']) for label, value in (
        ('Name', patient.name),
        ('DOB', patient.dob.isoformat() if patient.dob else None),
        ('Gender', patient.get_gender_display() if patient.gender else None),
    )]
    right = [Paragraph(_field(label, value), st['body']) for label, value in (
        ('Phone', patient.phone),
        ('Email', patient.email),
        ('Address', patient.address),
    )]
    table = Table([[left, right]], colWidths=[85 * mm, 85 * mm])
    table.setStyle(
        TableStyle(
            [
                ('VALIGN', (0, 0), (-1, -1), 'TOP'),
                ('BACKGROUND', (0, 0), (-1, -1), colors.HexColor('#f3f4f6')),
                ('BOX', (0, 0), (-1, -1), 0.5, colors.HexColor('#d1d5db')),
            ]
        )
    )
    return table


def _medication_table(items, st):
    header = ['Medication', 'Dosage', 'Frequency', 'Duration', 'Instructions']
    rows = [[Paragraph(f'<b>{h}</b>', st['cell']) for h in header]]
    style = [
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#e5e7eb')),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#d1d5db')),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
    ]

    if items:
        for item in items:
            rows.append(
                [
                    Paragraph(_text(item.drug_name), st['cell']),
                    Paragraph(_text(item.dosage), st['cell']),
                    Paragraph(_text(item.frequency), st['cell']),
                    Paragraph(_text(item.duration), st['cell']),
                    Paragraph(_text(item.instructions), st['cell']),
                ]
            )
    else:
        rows.append([Paragraph('No medications prescribed', st['cell']), '', '', '', ''])
        style.append(('SPAN', (0, 1), (-1, 1)))

    table = Table(rows, colWidths=[42 * mm, 28 * mm, 30 * mm, 25 * mm, 45 * mm], repeatRows=1)
    table.setStyle(TableStyle(style))
    return table


def build_prescription_pdf(prescription, items) -> bytes:
    """Render ``prescription`` and its ``items`` to PDF bytes."""
    st = _styles()
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=20 * mm,
        rightMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=f'Prescription {prescription.id}',
        author=settings.CLINIC_NAME,
    )

    doctor = prescription.doctor
    story = [
        _header(prescription, st),
        Paragraph('PRESCRIPTION', st['title']),
        Paragraph('Patient Information', st['section']),
        _patient_block(prescription.patient, st),
        Paragraph('Prescribed Medications', st['section']),
        _medication_table(items, st),
    ]

    if prescription.notes:
        story += [
            Paragraph('Additional Notes', st['section']),
            Paragraph(escape(prescription.notes).replace('\n', '<br/>'), st['body']),
        ]

    story += [
        Spacer(1, 12 * mm),
        Paragraph('<b>Prescribed by:</b>', st['body']),
        Paragraph(f'Dr. {escape(doctor.display_name)}', st['body']),
        Paragraph(escape(doctor.specialty or 'General Practice'), st['body']),
        Paragraph(f'Date: {_prescribed_on(prescription)}', st['body']),
        Spacer(1, 14 * mm),
        Paragraph('_' * 30 + "<br/>Doctor's Signature", st['small']),
        Spacer(1, 10 * mm),
        Paragraph('<br/>'.join(FOOTER_LINES), st['footer']),
    ]

    doc.build(story)
    return buffer.getvalue()
