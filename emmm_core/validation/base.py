"""
Base Validation Classes
=======================

Result container and abstract interface for container validators.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Dict, Any, Union
import logging

logger = logging.getLogger(__name__)


@dataclass
class ValidationResult:
    """
    Container for validation results.

    Attributes:
        is_valid: Whether validation passed
        error_count: Total number of errors
        warning_count: Total number of warnings
        errors: List of error dictionaries with keys:
            - entry: Container entry the problem concerns
            - type: Error type/category
            - message: Error description
            - severity: 'Error' or 'Warning'
        metadata: Additional validation metadata
    """
    is_valid: bool = True
    error_count: int = 0
    warning_count: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def add_error(self,
                  entry: str,
                  message: str,
                  error_type: str = "Validation Error",
                  severity: str = "Error") -> None:
        """
        Add an error to the result.

        Args:
            entry: Container entry name
            message: Error description
            error_type: Error type/category
            severity: 'Error' or 'Warning'
        """
        self.errors.append({
            'entry': entry,
            'type': error_type,
            'message': message,
            'severity': severity,
        })

        if severity == "Error":
            self.error_count += 1
            self.is_valid = False
        elif severity == "Warning":
            self.warning_count += 1

    def get_errors_by_type(self) -> Dict[str, int]:
        """Get error counts by type."""
        by_type: Dict[str, int] = {}
        for error in self.errors:
            error_type = error['type']
            by_type[error_type] = by_type.get(error_type, 0) + 1
        return by_type

    def summary(self) -> str:
        """Generate a text summary of validation results."""
        if self.is_valid and not self.warning_count:
            return "Validation PASSED - No errors found"

        status = "PASSED" if self.is_valid else "FAILED"
        lines = [
            f"Validation {status} - {self.error_count} error(s), {self.warning_count} warning(s)",
            "",
        ]

        for error in self.errors:
            lines.append(f"  [{error['severity']}] {error['type']}: {error['message']}")

        return "\n".join(lines)


class BaseValidator(ABC):
    """Abstract base class for container validators."""

    @abstractmethod
    def validate_package(self, package_path: Union[str, Path]) -> ValidationResult:
        """
        Validate a container.

        Args:
            package_path: Path to the container

        Returns:
            ValidationResult with validation outcome
        """
        pass
