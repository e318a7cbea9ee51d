"""
Tidy-output contracts.

This module provides:
- Pydantic models for options, schemas and violation reports
- The per-model-type schema registry
- The contract validator for tidy, glance and augment tables
"""

from modeltidy.contracts.data_models import (
    ModelOptions,
    ModelSchema,
    TableRole,
    ValidationReport,
    ValueKind,
    Violation,
    ViolationKind,
    classify_value,
)
from modeltidy.contracts.schema_registry import SchemaRegistry, get_default_registry
from modeltidy.contracts.validators import TidyContractValidator

__all__ = [
    'ModelOptions',
    'ModelSchema',
    'TableRole',
    'ValidationReport',
    'ValueKind',
    'Violation',
    'ViolationKind',
    'classify_value',
    'SchemaRegistry',
    'get_default_registry',
    'TidyContractValidator'
]
