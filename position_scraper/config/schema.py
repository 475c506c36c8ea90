"""
Data schema definitions for position extraction
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .enums import ContainerStrategy, ErrorKind, ResultStatus

@dataclass
class CandidateContainer:
    """One record-indicating anchor and the smallest node believed to own it"""
    anchor: Any
    container: Any
    strategy: ContainerStrategy

@dataclass(frozen=True)
class RawPositionRecord:
    """Fields as read from the page, before any derived metric"""
    market_name: str
    market_url: str  # always absolute
    priced_quantity_text: str = ""  # e.g. "45¢"
    monetary_value_text: str = ""  # e.g. "$5,423"

@dataclass(frozen=True)
class PositionRecord:
    """Final emitted position"""
    market_name: str
    market_url: str
    outcome: str = ""  # "" or a number with exactly 2 decimals
    priced_quantity_text: str = ""
    monetary_value_text: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to the JSON shape returned to callers"""
        return {
            'marketName': self.market_name,
            'marketUrl': self.market_url,
            'outcome': self.outcome,
            'pricedQuantityText': self.priced_quantity_text,
            'monetaryValueText': self.monetary_value_text,
        }

@dataclass
class ExtractionResult:
    """Outcome of one extraction invocation: success, empty success or failure"""
    status: ResultStatus
    target_url: str = ""
    records: List[PositionRecord] = field(default_factory=list)
    message: str = ""
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def success(cls, records: List[PositionRecord], target_url: str = "") -> "ExtractionResult":
        return cls(status=ResultStatus.SUCCESS, target_url=target_url, records=list(records))

    @classmethod
    def empty(cls, message: str, target_url: str = "") -> "ExtractionResult":
        return cls(status=ResultStatus.EMPTY, target_url=target_url, message=message)

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str, target_url: str = "") -> "ExtractionResult":
        return cls(status=ResultStatus.FAILED, target_url=target_url, message=message, error_kind=error_kind)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def ok(self) -> bool:
        return self.status != ResultStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        if self.status == ResultStatus.SUCCESS:
            return {
                'positions': [record.to_dict() for record in self.records],
                'count': self.count,
            }

        if self.status == ResultStatus.EMPTY:
            return {'positions': [], 'count': 0, 'message': self.message}

        if self.error_kind == ErrorKind.VALIDATION:
            return {'error': self.message, 'message': self.message}

        return {'error': 'Scraping failed', 'message': self.message}

    def to_response(self) -> Tuple[int, Dict[str, Any]]:
        """HTTP-style status plus JSON body"""
        if self.status != ResultStatus.FAILED:
            return 200, self.to_dict()
        if self.error_kind == ErrorKind.VALIDATION:
            return 400, self.to_dict()
        return 500, self.to_dict()

@dataclass
class BatchResult:
    """Merged result of several profile URLs processed side by side"""
    results: List[ExtractionResult] = field(default_factory=list)
    records: List[PositionRecord] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def errors(self) -> List[str]:
        return [
            f"Profile {index + 1}: {result.message}"
            for index, result in enumerate(self.results)
            if result.status == ResultStatus.FAILED
        ]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'positions': [record.to_dict() for record in self.records],
            'count': self.count,
            'profiles': [
                {
                    'profileUrl': result.target_url,
                    'status': result.status.value,
                    'count': result.count,
                    'message': result.message,
                }
                for result in self.results
            ],
            'errors': self.errors,
        }
