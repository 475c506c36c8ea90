"""
Exception taxonomy for the extraction pipeline
"""
from typing import Optional

from ..config.enums import ErrorKind

class ScraperError(Exception):
    """Base class for errors surfaced to the caller as a typed failure"""

    kind: Optional[ErrorKind] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(ScraperError):
    """The input profile URL is missing or malformed (caller's fault, never retried)"""

    kind = ErrorKind.VALIDATION

class NavigationError(ScraperError):
    """The page did not load within the fallback budget, or loaded the wrong site"""

    kind = ErrorKind.NAVIGATION

class ExtractionError(ScraperError):
    """The DOM could not be read at all"""

    kind = ErrorKind.EXTRACTION
