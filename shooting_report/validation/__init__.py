"""
NYC Shooting Report - Validation

Stage-by-stage checks on raw, processed and aggregate tables.
"""

from shooting_report.validation.schema_enforcer import (
    SchemaEnforcer,
    ValidationIssue,
    ValidationLevel,
    ValidationResult,
    ValidationStage,
)

__all__ = [
    "SchemaEnforcer",
    "ValidationIssue",
    "ValidationLevel",
    "ValidationResult",
    "ValidationStage",
]
