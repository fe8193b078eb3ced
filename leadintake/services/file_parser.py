import csv
import io
import logging
import zipfile
from typing import Any, Dict, List, Optional

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from leadintake.services.exceptions import ImportFileError

logger = logging.getLogger(__name__)

CSV_TYPES = {"text/csv", "application/vnd.ms-excel"}
XLSX_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
ACCEPTED_EXTENSIONS = (".csv", ".xlsx", ".xls")


def check_file_type(filename: Optional[str], content_type: Optional[str]) -> None:
    name = (filename or "").lower()
    if content_type in CSV_TYPES or content_type == XLSX_TYPE:
        return
    if name.endswith(ACCEPTED_EXTENSIONS):
        return
    raise ImportFileError("Only CSV or Excel files are supported")


def _cell(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, float) and value.is_integer():
        # spreadsheets hand back phone numbers and budgets as floats
        value = int(value)
    text = str(value).strip()
    return text or None


def _is_blank_row(row: Dict[str, Any]) -> bool:
    return all(value is None for value in row.values())


def parse_csv(content: bytes) -> List[Dict[str, Optional[str]]]:
    try:
        text = content.decode("utf-8-sig")
    except UnicodeDecodeError:
        raise ImportFileError("Invalid CSV format. Please check your file structure.")

    rows = []
    try:
        reader = csv.reader(io.StringIO(text), strict=True)
        header = None
        for line in reader:
            if not line or all(not cell.strip() for cell in line):
                continue
            if header is None:
                header = [cell.strip() for cell in line]
                continue
            if len(line) != len(header):
                raise ImportFileError(
                    f"Invalid CSV format: line {reader.line_num} does not match the header columns"
                )
            rows.append({name: _cell(value) for name, value in zip(header, line) if name})
    except csv.Error as e:
        logger.warning("CSV parse error: %s", e)
        raise ImportFileError("Invalid CSV format. Please check your file structure.")
    return rows


def parse_xlsx(content: bytes) -> List[Dict[str, Optional[str]]]:
    try:
        workbook = load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, OSError) as e:
        logger.warning("Excel parse error: %s", e)
        raise ImportFileError("Invalid Excel file. Please check your file structure.")

    try:
        sheet = workbook.worksheets[0]
        rows = []
        header = None
        for values in sheet.iter_rows(values_only=True):
            cells = [_cell(value) for value in values]
            if all(cell is None for cell in cells):
                continue
            if header is None:
                header = [cell or "" for cell in cells]
                continue
            row = {name: value for name, value in zip(header, cells) if name}
            if not _is_blank_row(row):
                rows.append(row)
        return rows
    finally:
        workbook.close()


def parse_upload(content: bytes, filename: Optional[str], content_type: Optional[str]) -> List[Dict[str, Optional[str]]]:
    """
    Turn an uploaded CSV or .xlsx file into a list of {column: cell} rows.

    Cells are trimmed, empty cells become None and blank lines are skipped.
    Raises ImportFileError for anything that cannot be read as a table.
    """
    check_file_type(filename, content_type)

    if not content or not content.strip():
        raise ImportFileError("File is empty")

    if (filename or "").lower().endswith(".xlsx") or content_type == XLSX_TYPE:
        return parse_xlsx(content)
    return parse_csv(content)
