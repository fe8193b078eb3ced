from typing import List, Optional, Annotated
from pydantic import BaseModel, EmailStr, Field, StringConstraints, field_validator, ValidationInfo
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError
from uuid import UUID
from datetime import datetime

from leadintake.models.enums import City, PropertyType, Bhk, Purpose, Timeline, Source, Status, BHK_REQUIRED_TYPES


FullName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=80)]
Notes = Annotated[str, StringConstraints(max_length=1000)]
# budgets are stored in a 32-bit INTEGER column
Budget = Annotated[int, Field(ge=0, le=2**31 - 1)]


def blank_to_none(value):
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def unique_tags(tags: List[str]) -> List[str]:
    """Drop empty and repeated tags, keeping first-seen order."""
    seen = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


def check_budget_range(budget_max, info: ValidationInfo):
    budget_min = info.data.get("budget_min")
    if budget_min is not None and budget_max is not None and budget_max < budget_min:
        raise PydanticCustomError(
            "budget_range",
            "Maximum budget must be greater than or equal to minimum budget",
        )
    return budget_max


# --- Request body for single-record create / update ---
class BuyerForm(BaseModel):
    full_name: FullName
    email: Optional[EmailStr] = None
    phone: Annotated[str, StringConstraints(pattern=r"^\d{10,15}$")]
    city: City
    property_type: PropertyType
    # validated even when omitted so the Apartment/Villa rule can fire
    bhk: Optional[Bhk] = Field(default=None, validate_default=True)
    purpose: Purpose
    budget_min: Optional[Budget] = None
    budget_max: Optional[Budget] = None
    timeline: Timeline
    source: Source
    status: Status = Status.NEW
    notes: Optional[Notes] = None
    tags: List[str] = []

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator("email", "notes", mode="before")
    @classmethod
    def empty_string_is_none(cls, value):
        return blank_to_none(value)

    @field_validator("bhk")
    @classmethod
    def bhk_only_for_residential(cls, bhk, info: ValidationInfo):
        property_type = info.data.get("property_type")
        if property_type in BHK_REQUIRED_TYPES and bhk is None:
            raise PydanticCustomError(
                "bhk_required",
                "BHK is required for Apartment and Villa property types",
            )
        if property_type is not None and property_type not in BHK_REQUIRED_TYPES and bhk is not None:
            raise PydanticCustomError(
                "bhk_not_applicable",
                "BHK applies only to Apartment and Villa property types",
            )
        return bhk

    @field_validator("budget_max")
    @classmethod
    def budget_max_not_below_min(cls, budget_max, info: ValidationInfo):
        return check_budget_range(budget_max, info)

    @field_validator("tags")
    @classmethod
    def collapse_tags(cls, tags):
        return unique_tags(tags)


# --- Response ---
class BuyerOut(BaseModel):
    id: UUID
    full_name: str
    email: Optional[str]
    phone: str
    city: City
    property_type: PropertyType
    bhk: Optional[Bhk]
    purpose: Purpose
    budget_min: Optional[int]
    budget_max: Optional[int]
    timeline: Timeline
    source: Source
    status: Status
    notes: Optional[str]
    tags: List[str]
    owner_id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


# --- List query params ---
class BuyerListParams(BaseModel):
    search: Optional[str] = None
    city: Optional[City] = None
    property_type: Optional[PropertyType] = Field(default=None, alias="propertyType")
    status: Optional[Status] = None
    timeline: Optional[Timeline] = None
    page: int = 1
    limit: int = 10

    model_config = {"populate_by_name": True}


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class BuyerListResponse(BaseModel):
    buyers: List[BuyerOut]
    pagination: Pagination
