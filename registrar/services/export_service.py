# registrar/services/export_service.py - Spreadsheet export of enrollment records
from io import BytesIO
from typing import List

from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment

from registrar.schemas.student import StudentSummary

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
HEADER_COLOR = "3498DB"

# (header, width)
COLUMNS = [
    ("Matricule", 15),
    ("First name", 20),
    ("Last name", 20),
    ("Birth date", 15),
    ("Sex", 10),
    ("Grade level", 12),
    ("Guardian", 25),
    ("Phone", 15),
    ("Services", 30),
]


def build_enrollment_workbook(rows: List[StudentSummary]) -> bytes:
    """Render students as an .xlsx workbook with a styled header row"""
    wb = Workbook()
    ws = wb.active
    ws.title = "Enrollments"

    ws.append([header for header, _ in COLUMNS])

    for cell in ws[1]:
        cell.font = Font(bold=True, color="FFFFFF")
        cell.fill = PatternFill(start_color=HEADER_COLOR, end_color=HEADER_COLOR, fill_type="solid")
        cell.alignment = Alignment(horizontal="center")

    for index, (_, width) in enumerate(COLUMNS):
        ws.column_dimensions[ws.cell(row=1, column=index + 1).column_letter].width = width

    for student in rows:
        ws.append([
            student.matricule,
            student.first_name,
            student.last_name,
            student.birth_date.strftime("%Y-%m-%d") if student.birth_date else "",
            student.sex or "",
            student.grade_level or "",
            student.guardian_name or "",
            student.guardian_phone or "",
            student.services or "",
        ])

    ws.freeze_panes = "A2"

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
