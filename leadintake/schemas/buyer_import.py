import re
from typing import List, Optional, Annotated
from pydantic import BaseModel, EmailStr, StringConstraints, field_validator, ValidationInfo
from pydantic.alias_generators import to_camel
from uuid import UUID

from leadintake.models.enums import City, PropertyType, Bhk, Purpose, Timeline, Source, Status, BHK_REQUIRED_TYPES, IMPORT_DEFAULTS, from_label
from leadintake.schemas.buyer import Budget, FullName, Notes, blank_to_none, unique_tags, check_budget_range


_NON_DIGITS = re.compile(r"\D")

# Header row of the import template and of the CSV export
IMPORT_COLUMNS = [
    "fullName", "email", "phone", "city", "propertyType", "bhk",
    "purpose", "budgetMin", "budgetMax", "timeline", "source",
    "status", "notes", "tags",
]


# --- One row of an uploaded file ---
class BuyerImportRow(BaseModel):
    """
    Bulk-import row schema.

    Cells arrive as strings (or None). Empty enum cells fall back to the
    import defaults, budgets keep only their digits, and tags are a single
    comma separated cell. Unlike BuyerForm, bhk is never required here; it is
    dropped for property types other than Apartment and Villa.
    """
    full_name: FullName
    email: Optional[EmailStr] = None
    phone: Annotated[str, StringConstraints(pattern=r"^\d{10,15}$")]
    city: City = IMPORT_DEFAULTS["city"]
    property_type: PropertyType = IMPORT_DEFAULTS["property_type"]
    bhk: Optional[Bhk] = None
    purpose: Purpose = IMPORT_DEFAULTS["purpose"]
    budget_min: Optional[Budget] = None
    budget_max: Optional[Budget] = None
    timeline: Timeline = IMPORT_DEFAULTS["timeline"]
    source: Source = IMPORT_DEFAULTS["source"]
    status: Status = IMPORT_DEFAULTS["status"]
    notes: Optional[Notes] = None
    tags: List[str] = []

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("email", "notes", mode="before")
    @classmethod
    def empty_cell_is_none(cls, value):
        return blank_to_none(value)

    @field_validator("bhk", mode="before")
    @classmethod
    def bhk_from_cell(cls, value):
        value = blank_to_none(value)
        return None if value is None else from_label(Bhk, value)

    @field_validator("bhk")
    @classmethod
    def bhk_dropped_for_non_residential(cls, bhk, info: ValidationInfo):
        if info.data.get("property_type") not in BHK_REQUIRED_TYPES:
            return None
        return bhk

    @field_validator("phone", mode="before")
    @classmethod
    def phone_digits_only(cls, value):
        if value is None:
            return value
        return _NON_DIGITS.sub("", str(value))

    @field_validator("city", "property_type", "purpose", "timeline", "source", "status", mode="before")
    @classmethod
    def empty_cell_takes_default(cls, value, info: ValidationInfo):
        if blank_to_none(value) is None:
            return IMPORT_DEFAULTS[info.field_name]
        # display labels such as "0-3 months" are accepted too
        return from_label(type(IMPORT_DEFAULTS[info.field_name]), value)

    @field_validator("budget_min", "budget_max", mode="before")
    @classmethod
    def budget_digits_only(cls, value):
        if isinstance(value, int) or blank_to_none(value) is None:
            return blank_to_none(value)
        digits = _NON_DIGITS.sub("", str(value))
        return int(digits) if digits else None

    @field_validator("budget_max")
    @classmethod
    def budget_max_not_below_min(cls, budget_max, info: ValidationInfo):
        return check_budget_range(budget_max, info)

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, value):
        if blank_to_none(value) is None:
            return []
        if isinstance(value, str):
            return value.split(",")
        return value

    @field_validator("tags")
    @classmethod
    def collapse_tags(cls, tags):
        return unique_tags(tags)


# --- Validation failure (400) ---
class RowValidationError(BaseModel):
    row: int
    valid: bool = False
    errors: List[str]


class ImportValidationResponse(BaseModel):
    message: str
    errors: List[RowValidationError]


# --- Import summary (200) ---
class ImportedRow(BaseModel):
    row: int
    id: UUID
    full_name: str
    phone: str
    success: bool = True

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class FailedRow(BaseModel):
    row: int
    full_name: str
    phone: str
    success: bool = False
    error: str

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class ImportSummary(BaseModel):
    message: str
    imported_count: int
    skipped_count: int
    imported: List[ImportedRow]
    failed: List[FailedRow]

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
