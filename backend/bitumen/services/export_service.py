# Overview: Report generation; renders resource rows as CSV or a landscape PDF table.

"""
Report Exports

Rows come from EntityService.list(), so an export is gated by the same
VIEW grant as the list endpoint. Columns follow the resource's
export_columns. Values are taken from to_dict() so money and dates print
the same way the API returns them.
"""

from __future__ import annotations

import csv
import io
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .resources import ResourceSpec
from bitumen.time_utils import to_utc_z, utcnow


def _column_title(name: str) -> str:
    return name.replace("_", " ").title()


def _cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "Yes" if value else "No"
    return str(value)


def _rows(spec: ResourceSpec, rows) -> list[list[str]]:
    out = []
    for row in rows:
        data = row.to_dict()
        out.append([_cell(data.get(col)) for col in spec.export_columns])
    return out


def export_csv(spec: ResourceSpec, rows) -> str:
    """Header row of export column names, then one line per row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(spec.export_columns)
    writer.writerows(_rows(spec, rows))
    return buffer.getvalue()


def export_pdf(spec: ResourceSpec, rows, title: str | None = None) -> bytes:
    """Single landscape table with a title and generation timestamp. The title is plain text."""
    heading = title or f"{spec.label} report"
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=landscape(A4),
        rightMargin=0.5 * inch,
        leftMargin=0.5 * inch,
        topMargin=0.5 * inch,
        bottomMargin=0.5 * inch,
        title=heading,
    )

    styles = getSampleStyleSheet()
    story = [
        Paragraph(escape(heading), styles["Title"]),
        Paragraph(f"Generated {to_utc_z(utcnow())}", styles["Normal"]),
        Spacer(1, 0.2 * inch),
    ]

    data = [[_column_title(c) for c in spec.export_columns]] + _rows(spec, rows)
    if len(data) == 1:
        story.append(Paragraph("No records.", styles["Normal"]))
    else:
        table = Table(data, repeatRows=1)
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#2F3B4C')),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 0.25, colors.grey),
            ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#F2F4F7')]),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]))
        story.append(table)

    doc.build(story)
    return buffer.getvalue()
