"""
Component-level (tidy) tables.

One row per model component, columns in the model type's declared order.
"""

from typing import Any, Optional

import numpy as np
import pandas as pd

from modeltidy.adapters import AdapterRegistry
from modeltidy.contracts import ModelOptions, SchemaRegistry, TableRole
from modeltidy.contracts.data_models import CONF_HIGH, CONF_LOW, ESTIMATE, TERM
from modeltidy.tidiers.common import log_table, output_validator, resolve_adapter, resolve_schemas
from modeltidy.utils.config import get_settings
from modeltidy.utils.errors import ModelCapabilityError
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)


def _column_values(values: Any, n_rows: int) -> Any:
    if values is None:
        return np.full(n_rows, np.nan)
    return values


def tidy(
    model: Any,
    conf_int: bool = False,
    conf_level: Optional[float] = None,
    quick: bool = False,
    exponentiate: bool = False,
    *,
    adapters: Optional[AdapterRegistry] = None,
    schemas: Optional[SchemaRegistry] = None,
    validate: Optional[bool] = None
) -> pd.DataFrame:
    """
    Summarize a fitted model's components as a table.

    Args:
        model: Fitted model of a registered type
        conf_int: Add conf.low / conf.high columns
        conf_level: Interval coverage; defaults to the configured level
        quick: Only term and estimate
        exponentiate: Report exp(estimate) and exponentiated bounds
        adapters: Adapter registry (default registry if None)
        schemas: Schema registry (default registry if None)
        validate: Validate the result; defaults to the configured setting

    Returns:
        DataFrame with one row per term

    Raises:
        UnregisteredModelError: If the model type is unknown
        ModelCapabilityError: If intervals are requested from a model without standard errors
        SchemaViolationError: If validation is on and the table breaks the contract
    """
    options = ModelOptions(
        conf_int=conf_int,
        conf_level=conf_level if conf_level is not None else get_settings().conf_level,
        quick=quick,
        exponentiate=exponentiate
    )
    adapter = resolve_adapter(model, adapters)
    columns = resolve_schemas(schemas).component_columns(adapter.model_type, options)

    terms = [str(t) for t in adapter.terms()]
    values = {TERM: terms, ESTIMATE: adapter.estimates()}
    if not options.quick:
        values.update(adapter.component_values())
        if options.conf_int:
            bounds = adapter.conf_int(options.conf_level)
            if bounds is None:
                raise ModelCapabilityError("Confidence intervals need standard errors",
                                           model_type=adapter.model_type, option="conf_int")
            values[CONF_LOW] = bounds[:, 0]
            values[CONF_HIGH] = bounds[:, 1]

    if options.exponentiate:
        for name in (ESTIMATE, CONF_LOW, CONF_HIGH):
            if values.get(name) is not None:
                values[name] = np.exp(values[name])

    table = pd.DataFrame(
        {name: _column_values(values.get(name), len(terms)) for name in columns},
        columns=columns
    )
    table[TERM] = table[TERM].astype(object)

    validator = output_validator(validate)
    if validator is not None:
        validator.check(validator.validate_component_table(table, options,
                                                           expected_columns=columns))
    log_table(TableRole.TIDY.value, adapter.model_type, table)
    return table
