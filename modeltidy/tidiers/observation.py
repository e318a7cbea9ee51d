"""
Observation-level (augment) tables.

The output has exactly one row per input row: the input columns followed
by derived columns carrying the reserved `.` prefix. Rows the model
dropped while fitting keep NaN derived values.
"""

from typing import Any, Optional

import pandas as pd

from modeltidy.adapters import AdapterRegistry, align_to_index
from modeltidy.contracts import TidyContractValidator, TableRole
from modeltidy.contracts.data_models import AUGMENT_COLUMN_ORDER, FITTED, RESID, ROWNAMES
from modeltidy.tidiers.common import log_table, output_validator, resolve_adapter
from modeltidy.utils.config import get_settings
from modeltidy.utils.errors import UnsupportedInputError
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)

INTERVALS = ("none", "confidence", "prediction")


def _has_row_identifiers(index: pd.Index) -> bool:
    return not index.equals(pd.RangeIndex(len(index)))


def augment(
    model: Any,
    data: Optional[pd.DataFrame] = None,
    newdata: Optional[pd.DataFrame] = None,
    se_fit: bool = False,
    interval: str = "none",
    conf_level: Optional[float] = None,
    response: Optional[str] = None,
    *,
    adapters: Optional[AdapterRegistry] = None,
    validate: Optional[bool] = None
) -> pd.DataFrame:
    """
    Add fitted values and other per-observation columns to data.

    With neither `data` nor `newdata`, the model's training data is
    reconstructed and `.resid` comes from the model's residuals. Otherwise
    `.resid` is added only when the response column is in the input.
    Influence columns (`.hat`, `.cooksd`, `.std.resid`) are
    added on the training rows for models that provide them.

    Args:
        model: Fitted model of a registered type
        data: Original training data
        newdata: Held-out data to predict on
        se_fit: Add `.se.fit`
        interval: "none", "confidence" or "prediction" (adds `.lower`/`.upper`)
        conf_level: Interval coverage; defaults to the configured level
        response: Response column name when the model does not record it
        adapters: Adapter registry (default registry if None)
        validate: Validate the result; defaults to the configured setting

    Returns:
        DataFrame with one row per input row

    Raises:
        ConflictingInputError: If both data and newdata are given
        MissingInputError: If neither is given and the model keeps no training data
        UnsupportedInputError: If an input is not a DataFrame
    """
    if interval not in INTERVALS:
        raise UnsupportedInputError(f"interval must be one of {list(INTERVALS)}",
                                    argument="interval", input_type=repr(interval))

    selection = TidyContractValidator()
    selection.validate_input_selection(data is not None, newdata is not None)

    adapter = resolve_adapter(model, adapters)

    reconstructed = data is None and newdata is None
    training = None
    if reconstructed:
        training = adapter.training_data()
        selection.validate_input_selection(False, False,
                                           can_reconstruct=training is not None)

    for name, frame in (("data", data), ("newdata", newdata)):
        if frame is not None and not isinstance(frame, pd.DataFrame):
            raise UnsupportedInputError(f"`{name}` must be a pandas DataFrame",
                                        argument=name, input_type=type(frame).__name__)

    on_training = newdata is None
    base = newdata if newdata is not None else (data if data is not None else training)
    level = conf_level if conf_level is not None else get_settings().conf_level

    fitted = adapter.fitted() if on_training else None
    if fitted is not None and not se_fit and interval == "none":
        derived = pd.DataFrame({FITTED: align_to_index(fitted, base.index).to_numpy()},
                               index=base.index)
    else:
        derived = adapter.predict(base, se_fit=se_fit, interval=interval, level=level)

    # Reconstructed training rows take the model's own residuals, which also
    # cover responses that are not plain input columns (e.g. np.log(y))
    residuals = adapter.residuals() if reconstructed else None
    response = response or adapter.response_name
    if residuals is not None:
        has_response = True
        derived[RESID] = align_to_index(residuals, base.index).to_numpy()
    else:
        has_response = response is not None and response in base.columns
        if has_response:
            observed = pd.to_numeric(base[response], errors='coerce').to_numpy(dtype=float)
            derived[RESID] = observed - derived[FITTED].to_numpy(dtype=float)

    if on_training:
        influence = adapter.influence()
        if influence is not None:
            for name in influence.columns:
                derived[name] = align_to_index(influence[name], base.index).to_numpy()

    collisions = [c for c in base.columns if c in derived.columns or c == ROWNAMES]
    if collisions:
        logger.warning("Input columns replaced by derived columns",
                       context={'columns': [str(c) for c in collisions]})

    has_rownames = _has_row_identifiers(base.index)
    table = base.drop(columns=collisions).reset_index(drop=True)
    input_columns = list(table.columns)
    if has_rownames:
        table.insert(0, ROWNAMES, [str(label) for label in base.index])
    for name in AUGMENT_COLUMN_ORDER:
        if name in derived.columns:
            table[name] = derived[name].to_numpy()

    validator = output_validator(validate)
    if validator is not None:
        validator.check(validator.validate_observation_table(
            table,
            input_row_count=len(base),
            has_response=has_response,
            input_columns=input_columns,
            has_rownames=has_rownames,
            rownames_unique=base.index.is_unique
        ))
    log_table(TableRole.AUGMENT.value, adapter.model_type, table)
    return table
