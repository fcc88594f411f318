# app/services/job_report.py
from io import BytesIO
from typing import Iterable

import openpyxl
from openpyxl.styles import Alignment, Font, PatternFill

from app.schemas.job import JOB_STATUS_LABELS, Job
from app.services.job_service import checklist_progress

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

JOB_HEADERS = ["Job Number", "Status", "Checked", "Total", "Last Updated", "Updated By"]
JOB_WIDTHS = [20, 20, 10, 10, 22, 20]
ITEM_HEADERS = ["Job Number", "Item", "Optional", "Result", "Comment", "Photos"]
ITEM_WIDTHS = [20, 40, 10, 12, 50, 10]


def _style_sheet(ws, widths):
    header_fill = PatternFill(start_color="4472C4", end_color="4472C4", fill_type="solid")
    header_font = Font(bold=True, color="FFFFFF")
    for cell in ws[1]:
        cell.fill = header_fill
        cell.font = header_font
        cell.alignment = Alignment(horizontal="center", vertical="center", wrap_text=True)

    for i, width in enumerate(widths, 1):
        ws.column_dimensions[openpyxl.utils.get_column_letter(i)].width = width

    for row in ws.iter_rows(min_row=2, max_row=ws.max_row, min_col=1, max_col=len(widths)):
        for cell in row:
            cell.alignment = Alignment(horizontal="left", vertical="center", wrap_text=True)


def build_jobs_workbook(jobs: Iterable[Job]) -> bytes:
    """One summary row per job on the first sheet, one row per checklist item on the second."""
    wb = openpyxl.Workbook()
    jobs_ws = wb.active
    jobs_ws.title = "Jobs"
    items_ws = wb.create_sheet("Checklist")
    jobs_ws.append(JOB_HEADERS)
    items_ws.append(ITEM_HEADERS)

    for job in jobs:
        checked, total = checklist_progress(job)
        jobs_ws.append([
            job.job_number,
            JOB_STATUS_LABELS[job.status],
            checked,
            total,
            # Excel has no timezone support
            job.last_updated.strftime("%Y-%m-%d %H:%M:%S UTC"),
            job.updated_by,
        ])
        for item in job.checklist:
            items_ws.append([
                job.job_number,
                item.name,
                "Yes" if item.is_optional else "No",
                item.status.value,
                item.comment,
                len(item.images),
            ])

    _style_sheet(jobs_ws, JOB_WIDTHS)
    _style_sheet(items_ws, ITEM_WIDTHS)

    output = BytesIO()
    wb.save(output)
    return output.getvalue()
