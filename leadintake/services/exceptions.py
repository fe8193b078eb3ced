# services/exceptions.py
from typing import List


class ImportFileError(ValueError):
    """The uploaded file is unusable as a whole (type, empty, unparseable, too many rows)."""


class ImportValidationError(ValueError):
    """One or more rows failed validation; nothing was persisted."""

    def __init__(self, errors: List[dict]):
        self.errors = errors
        super().__init__(f"{len(errors)} records failed validation")


class DuplicatePhoneError(ValueError):
    def __init__(self, phone: str):
        self.phone = phone
        super().__init__("A buyer with this phone number already exists")


class BuyerNotFoundError(LookupError):
    def __init__(self, buyer_id):
        self.buyer_id = buyer_id
        super().__init__("Buyer not found")


class RateLimitExceeded(Exception):
    pass
