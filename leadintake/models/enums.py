# models/enums.py
"""
Closed value sets for buyer fields.

Values are stored verbatim in the database and matched case-sensitively on
input. Each enum carries its import default (where it has one) and a display
label table used by the export and any UI on top of the API.
"""
from enum import Enum


class City(str, Enum):
    CHANDIGARH = "Chandigarh"
    MOHALI = "Mohali"
    ZIRAKPUR = "Zirakpur"
    PANCHKULA = "Panchkula"
    OTHER = "Other"


class PropertyType(str, Enum):
    APARTMENT = "Apartment"
    VILLA = "Villa"
    PLOT = "Plot"
    OFFICE = "Office"
    RETAIL = "Retail"


class Bhk(str, Enum):
    STUDIO = "Studio"
    ONE = "One"
    TWO = "Two"
    THREE = "Three"
    FOUR = "Four"


class Purpose(str, Enum):
    BUY = "Buy"
    RENT = "Rent"


class Timeline(str, Enum):
    ZERO_TO_THREE = "ZeroToThree"
    THREE_TO_SIX = "ThreeToSix"
    MORE_THAN_SIX = "MoreThanSix"
    EXPLORING = "Exploring"


class Source(str, Enum):
    WEBSITE = "Website"
    REFERRAL = "Referral"
    WALK_IN = "WalkIn"
    CALL = "Call"
    OTHER = "Other"


class Status(str, Enum):
    NEW = "New"
    QUALIFIED = "Qualified"
    CONTACTED = "Contacted"
    VISITED = "Visited"
    NEGOTIATION = "Negotiation"
    CONVERTED = "Converted"
    DROPPED = "Dropped"


class HistoryAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    IMPORT = "IMPORT"


# Property types for which a bhk value is mandatory on the form path
BHK_REQUIRED_TYPES = frozenset({PropertyType.APARTMENT, PropertyType.VILLA})

# Substituted when an import cell is empty
IMPORT_DEFAULTS = {
    "city": City.CHANDIGARH,
    "property_type": PropertyType.APARTMENT,
    "purpose": Purpose.BUY,
    "timeline": Timeline.EXPLORING,
    "source": Source.OTHER,
    "status": Status.NEW,
}

DISPLAY_LABELS = {
    Bhk: {
        Bhk.STUDIO: "Studio",
        Bhk.ONE: "1",
        Bhk.TWO: "2",
        Bhk.THREE: "3",
        Bhk.FOUR: "4",
    },
    Timeline: {
        Timeline.ZERO_TO_THREE: "0-3 months",
        Timeline.THREE_TO_SIX: "3-6 months",
        Timeline.MORE_THAN_SIX: ">6 months",
        Timeline.EXPLORING: "Exploring",
    },
    Source: {
        Source.WEBSITE: "Website",
        Source.REFERRAL: "Referral",
        Source.WALK_IN: "Walk-in",
        Source.CALL: "Call",
        Source.OTHER: "Other",
    },
}


def from_label(enum_cls, text):
    """Map a display label (e.g. "0-3 months") back to its member; other text passes through."""
    for member, label in DISPLAY_LABELS.get(enum_cls, {}).items():
        if label == str(text).strip():
            return member
    return text


def sql_in(enum_cls) -> str:
    """Render an enum's values as a SQL IN list for CHECK constraints."""
    return ", ".join(f"'{member.value}'" for member in enum_cls)
