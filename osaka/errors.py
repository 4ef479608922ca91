# osaka/errors.py
from typing import List, Optional


class OsakaError(Exception):
    """Base class for every error the catalog raises on purpose."""


class ValidationError(OsakaError):
    """Client-side rejection. Never reaches the store or the bucket."""

    def __init__(self, violations: List[str], message: Optional[str] = None):
        self.violations = list(violations)
        super().__init__(message or "validation failed: " + ", ".join(self.violations))


class InvalidCategory(ValidationError):
    def __init__(self, category: str):
        self.category = category
        super().__init__(["category_invalid"], f"unknown category: {category!r}")


class StoreError(OsakaError):
    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class UploadError(OsakaError):
    pass


class AuthError(OsakaError):
    pass
