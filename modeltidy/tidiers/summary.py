"""
Model-level (glance) tables.

Exactly one row. The column set is fixed per model type: a statistic the
model variant does not define is NaN, never an absent column.
"""

from typing import Any, Optional

import numpy as np
import pandas as pd

from modeltidy.adapters import AdapterRegistry
from modeltidy.contracts import SchemaRegistry, TableRole
from modeltidy.tidiers.common import log_table, output_validator, resolve_adapter, resolve_schemas
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)


def glance(
    model: Any,
    *,
    adapters: Optional[AdapterRegistry] = None,
    schemas: Optional[SchemaRegistry] = None,
    validate: Optional[bool] = None
) -> pd.DataFrame:
    """
    Summarize a fitted model in a single row.

    Args:
        model: Fitted model of a registered type
        adapters: Adapter registry (default registry if None)
        schemas: Schema registry (default registry if None)
        validate: Validate the result; defaults to the configured setting

    Returns:
        One-row DataFrame of model statistics
    """
    adapter = resolve_adapter(model, adapters)
    columns = resolve_schemas(schemas).summary_columns(adapter.model_type)
    stats = adapter.model_stats()

    undeclared = sorted(set(stats) - set(columns))
    if undeclared:
        logger.debug("Statistics not in schema were dropped",
                     context={'model_type': adapter.model_type, 'columns': undeclared})

    row = {}
    for name in columns:
        value = stats.get(name)
        row[name] = np.nan if value is None else value
    table = pd.DataFrame([row], columns=columns)

    validator = output_validator(validate)
    if validator is not None:
        validator.check(validator.validate_summary_table(table, expected_columns=columns))
    log_table(TableRole.GLANCE.value, adapter.model_type, table)
    return table
