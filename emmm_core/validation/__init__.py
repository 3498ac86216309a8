"""
Validation Framework
====================

Validates document containers against their layout invariants.

Components:
- BaseValidator: Abstract base class for validators
- ValidationResult: Container for validation results
- ArchiveValidator: ZIP container validation
"""

from emmm_core.validation.base import (
    BaseValidator,
    ValidationResult,
)

from emmm_core.validation.archive_validator import (
    ArchiveValidator,
)

__all__ = [
    "BaseValidator",
    "ValidationResult",
    "ArchiveValidator",
]
