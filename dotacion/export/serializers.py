# dotacion/export/serializers.py
"""Conversion of query rows into JSON-ready records, CSV text and XLSX bytes."""

import io
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
from openpyxl.cell.cell import ILLEGAL_CHARACTERS_RE
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from dotacion.query.exceptions import UnsupportedFormat

CSV_MEDIA_TYPE = "text/csv; charset=utf-8"
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

EXPORT_FORMATS: Dict[str, str] = {
    "csv": CSV_MEDIA_TYPE,
    "xlsx": XLSX_MEDIA_TYPE,
}

# Excel sheet name limit
MAX_SHEET_NAME_LENGTH = 31
MAX_COLUMN_WIDTH = 50


def to_flat_records(rows: Iterable[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    """Copy rows into plain dicts, reducing dates and datetimes to YYYY-MM-DD."""
    records = []
    for row in rows:
        record = {}
        for key, value in row.items():
            if isinstance(value, datetime):
                record[key] = value.date().isoformat()
            elif isinstance(value, date):
                record[key] = value.isoformat()
            else:
                record[key] = value
        records.append(record)
    return records


def _escape_csv_value(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if any(ch in text for ch in ('"', ",", "\n", "\r")):
        return '"' + text.replace('"', '""') + '"'
    return text


def _resolve_headers(records: Sequence[Mapping[str, Any]], headers: Optional[Sequence[str]]) -> List[str]:
    if headers is not None:
        return list(headers)
    if records:
        return list(records[0].keys())
    return []


def to_csv(records: Sequence[Mapping[str, Any]], headers: Optional[Sequence[str]] = None) -> str:
    """
    Render records as comma-separated text.

    The header row comes from ``headers`` or the first record's keys. Rows are
    joined with ``\\n`` and there is no trailing newline. With no records the
    output is just the header line, or an empty string if no header is known.
    """
    columns = _resolve_headers(records, headers)
    if not columns:
        return ""

    lines = [",".join(_escape_csv_value(col) for col in columns)]
    for record in records:
        lines.append(",".join(_escape_csv_value(record.get(col)) for col in columns))
    return "\n".join(lines)


def to_xlsx(
    records: Sequence[Mapping[str, Any]],
    sheet_name: str = "Datos",
    headers: Optional[Sequence[str]] = None,
) -> bytes:
    """
    Render records as a single-sheet XLSX workbook.

    Every string is written as text: control characters that XML cannot hold
    are dropped, and values starting with ``=`` stay text instead of formulas.
    """
    columns = _resolve_headers(records, headers)
    rows = [{key: _clean_xlsx_value(value) for key, value in record.items()} for record in records]
    df = pd.DataFrame(rows, columns=columns or None)
    sheet_name = sheet_name[:MAX_SHEET_NAME_LENGTH] or "Datos"

    excel_buffer = io.BytesIO()
    with pd.ExcelWriter(excel_buffer, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=sheet_name, index=False)
        worksheet = writer.sheets[sheet_name]
        _keep_formulas_as_text(worksheet)
        _format_header(worksheet, len(df.columns))
        _auto_adjust_columns(worksheet)

    return excel_buffer.getvalue()


def _clean_xlsx_value(value: Any) -> Any:
    if isinstance(value, str):
        return ILLEGAL_CHARACTERS_RE.sub("", value)
    return value


def _keep_formulas_as_text(worksheet) -> None:
    for row in worksheet.iter_rows():
        for cell in row:
            if cell.data_type == "f":
                cell.data_type = "s"


def _format_header(worksheet, column_count: int) -> None:
    header_font = Font(bold=True)
    for col_num in range(1, column_count + 1):
        worksheet.cell(row=1, column=col_num).font = header_font


def _auto_adjust_columns(worksheet) -> None:
    """Size each column to its longest value, capped at MAX_COLUMN_WIDTH."""
    for index, column in enumerate(worksheet.iter_cols(), start=1):
        max_length = max((len(str(cell.value)) for cell in column if cell.value is not None), default=0)
        worksheet.column_dimensions[get_column_letter(index)].width = min(max_length + 2, MAX_COLUMN_WIDTH)


def build_download_filename(base_name: str, extension: str, now: Optional[datetime] = None) -> str:
    """``{base}_{YYYY-MM-DDTHH-MM-SS}.{ext}`` using the current UTC instant."""
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return f"{base_name}_{now.strftime('%Y-%m-%dT%H-%M-%S')}.{extension}"


def get_media_type(export_format: str) -> str:
    try:
        return EXPORT_FORMATS[export_format]
    except KeyError:
        raise UnsupportedFormat(f"Formato de exportación no soportado: {export_format}") from None


def render_export(
    records: Sequence[Mapping[str, Any]],
    export_format: str,
    sheet_name: str = "Datos",
    headers: Optional[Sequence[str]] = None,
) -> bytes:
    """Render records in the requested download format."""
    get_media_type(export_format)
    if export_format == "xlsx":
        return to_xlsx(records, sheet_name=sheet_name, headers=headers)
    return to_csv(records, headers=headers).encode("utf-8")


@dataclass
class ExportFile:
    """A rendered file ready to be sent as an attachment."""

    content: bytes
    media_type: str
    filename: str
    row_count: int = 0


def build_export_file(
    records: Sequence[Mapping[str, Any]],
    export_format: str,
    base_name: str,
    sheet_name: str = "Datos",
    headers: Optional[Sequence[str]] = None,
) -> ExportFile:
    media_type = get_media_type(export_format)
    return ExportFile(
        content=render_export(records, export_format, sheet_name=sheet_name, headers=headers),
        media_type=media_type,
        filename=build_download_filename(base_name, export_format),
        row_count=len(records),
    )
