"""
Strict enum definitions for the extraction pipeline
"""
from enum import Enum

class WaitCondition(Enum):
    """Playwright wait_until values, in fallback order"""
    DOM_PARSED = "domcontentloaded"
    NETWORK_SETTLED = "networkidle"
    NONE = "commit"

class ContainerStrategy(Enum):
    TABLE_ROW = "TABLE_ROW"
    SEMANTIC_MARKER = "SEMANTIC_MARKER"
    UNIQUE_ANCESTOR = "UNIQUE_ANCESTOR"
    GRANDPARENT = "GRANDPARENT"

class ResultStatus(Enum):
    SUCCESS = "SUCCESS"
    EMPTY = "EMPTY"
    FAILED = "FAILED"

class ErrorKind(Enum):
    VALIDATION = "VALIDATION"
    NAVIGATION = "NAVIGATION"
    EXTRACTION = "EXTRACTION"
    TIMEOUT = "TIMEOUT"

class SessionState(Enum):
    OPEN = "open"
    CLOSED = "closed"
