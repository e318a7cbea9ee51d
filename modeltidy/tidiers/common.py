"""Helpers shared by the tidy, glance and augment producers."""

from typing import Any, Optional

import pandas as pd

from modeltidy.adapters import AdapterRegistry, ModelAdapter, default_registry
from modeltidy.contracts import SchemaRegistry, TidyContractValidator, get_default_registry
from modeltidy.utils.config import get_settings
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)


def resolve_adapter(model: Any, adapters: Optional[AdapterRegistry] = None) -> ModelAdapter:
    return (adapters or default_registry).adapter_for(model)


def resolve_schemas(schemas: Optional[SchemaRegistry] = None) -> SchemaRegistry:
    return schemas or get_default_registry()


def output_validator(validate: Optional[bool] = None) -> Optional[TidyContractValidator]:
    """Strict validator for produced tables, or None when validation is off."""
    enabled = get_settings().validate_output if validate is None else validate
    return TidyContractValidator(strict=True) if enabled else None


def log_table(role: str, model_type: str, table: pd.DataFrame):
    logger.log_event("table_produced", {
        'role': role,
        'model_type': model_type,
        'rows': len(table),
        'schema_hash': SchemaRegistry.fingerprint([str(c) for c in table.columns]),
    }, level="DEBUG")
