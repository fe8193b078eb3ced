from typing import Any, Dict, List, Mapping, Optional, Tuple
from pydantic import ValidationError

from leadintake.schemas.buyer_import import BuyerImportRow

# Data rows are numbered as spreadsheet lines: the header is line 1
FIRST_DATA_ROW = 2

MISSING_REQUIRED = "Missing required fields: fullName and phone are required"


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def format_errors(exc: ValidationError) -> List[str]:
    messages = []
    for error in exc.errors():
        path = ".".join(str(part) for part in error["loc"])
        messages.append(f"{path}: {error['msg']}" if path else error["msg"])
    return messages


def normalize_import_row(raw: Mapping[str, Any]) -> Tuple[Optional[BuyerImportRow], List[str]]:
    """
    Coerce one raw file row into a BuyerImportRow.

    Returns (row, []) on success or (None, messages) on failure. A missing
    fullName or phone fails the row without checking anything else; otherwise
    every field is checked and all failures are returned together.
    """
    if _is_blank(raw.get("fullName")) or _is_blank(raw.get("phone")):
        return None, [MISSING_REQUIRED]

    try:
        return BuyerImportRow.model_validate(dict(raw)), []
    except ValidationError as exc:
        return None, format_errors(exc)


def validate_import_rows(rows: List[Mapping[str, Any]]) -> Tuple[List[Tuple[int, BuyerImportRow]], List[Dict[str, Any]]]:
    """
    Run the normalizer over every row.

    Returns the numbered valid rows and the per-row error reports
    ({"row", "valid", "errors"}). Callers must not persist anything when the
    error list is non-empty.
    """
    valid: List[Tuple[int, BuyerImportRow]] = []
    errors: List[Dict[str, Any]] = []

    for index, raw in enumerate(rows):
        row_number = index + FIRST_DATA_ROW
        record, messages = normalize_import_row(raw)
        if messages:
            errors.append({"row": row_number, "valid": False, "errors": messages})
        else:
            valid.append((row_number, record))

    return valid, errors
