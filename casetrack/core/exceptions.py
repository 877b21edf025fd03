"""Typed failures raised by the case services and mapped to responses in main.py"""
from dataclasses import dataclass
from typing import List, Optional, Union


@dataclass(frozen=True)
class FieldViolation:
    """A single validation failure, addressed by its dotted field path"""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class CaseValidationError(Exception):
    """Raised when a case document fails shape, enum or required-field checks"""

    def __init__(self, errors: List[FieldViolation]):
        self.errors = errors
        super().__init__(f"Case data validation failed ({len(errors)} violation(s))")


class CaseNotFoundError(Exception):
    """Raised when a case id does not exist"""

    def __init__(self, case_id: Union[int, str]):
        self.case_id = case_id
        super().__init__(f"Case {case_id} not found")


class CaseStorageError(Exception):
    """Raised when the transactional write sequence fails and was rolled back"""

    def __init__(self, operation: str, reason: Optional[str] = None):
        self.operation = operation
        self.reason = reason
        super().__init__(f"Error {operation} case" + (f": {reason}" if reason else ""))
