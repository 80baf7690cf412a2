"""
Candidate export (CSV and Excel).

Both formats share one row shape so a spreadsheet opened from either file
has the same columns in the same order.
"""

import csv
import io
import logging
from datetime import date
from typing import Any, Iterable, List, Optional

from openpyxl import Workbook

from talentflow.services.exceptions import EmptyExportError, ValidationError
from talentflow.utils.time import locale_date, utc_now

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["Name", "Email", "Phone", "Job", "Stage", "Rating", "Applied Date"]
MISSING_VALUE = "N/A"
SHEET_TITLE = "Candidates"

CSV_MEDIA_TYPE = "text/csv"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
EXPORT_KINDS = {"csv": CSV_MEDIA_TYPE, "xlsx": XLSX_MEDIA_TYPE}


def _job_title(candidate: Any) -> Optional[str]:
    title = getattr(candidate, "job_title", None)
    if title:
        return title
    job = getattr(candidate, "job", None)
    return getattr(job, "title", None) if job is not None else None


def export_row(candidate: Any) -> List[Any]:
    """One candidate as a list of cell values in EXPORT_COLUMNS order."""
    return [
        candidate.full_name,
        candidate.email,
        candidate.phone or MISSING_VALUE,
        _job_title(candidate) or MISSING_VALUE,
        candidate.current_stage,
        candidate.rating or 0,
        locale_date(candidate.created_at),
    ]


def _rows(candidates: Iterable[Any]) -> List[List[Any]]:
    rows = [export_row(candidate) for candidate in candidates]
    if not rows:
        raise EmptyExportError("No candidates to export")
    return rows


def to_csv(candidates: Iterable[Any]) -> str:
    """Header line plus one line per candidate, newline separated."""
    rows = _rows(candidates)
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(EXPORT_COLUMNS)
    writer.writerows(rows)
    logger.info("Exported %d candidates to CSV", len(rows))
    return output.getvalue()


def to_xlsx(candidates: Iterable[Any]) -> bytes:
    """Workbook with a single 'Candidates' sheet."""
    rows = _rows(candidates)
    wb = Workbook()
    ws = wb.active
    ws.title = SHEET_TITLE
    ws.append(EXPORT_COLUMNS)
    for row in rows:
        ws.append(row)

    output = io.BytesIO()
    wb.save(output)
    logger.info("Exported %d candidates to Excel", len(rows))
    return output.getvalue()


def export_filename(kind: str, today: Optional[date] = None) -> str:
    """candidates-YYYY-MM-DD.<kind>"""
    if kind not in EXPORT_KINDS:
        raise ValidationError(f"Unsupported export format '{kind}'", {"allowed": sorted(EXPORT_KINDS)})
    today = today or utc_now().date()
    return f"candidates-{today.isoformat()}.{kind}"
