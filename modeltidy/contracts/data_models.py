"""
Pydantic data models for the tidy-output contract.

Defines table roles, reserved column names, model options, per-model-type
schemas and the structured violation report produced by the validator.
"""

import numbers
from enum import Enum
from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)

RESERVED_PREFIX = "."

TERM = "term"
ESTIMATE = "estimate"
STD_ERROR = "std.error"
STATISTIC = "statistic"
P_VALUE = "p.value"
CONF_LOW = "conf.low"
CONF_HIGH = "conf.high"

QUICK_COLUMNS = [TERM, ESTIMATE]
INTERVAL_COLUMNS = [CONF_LOW, CONF_HIGH]

ROWNAMES = ".rownames"
FITTED = ".fitted"
LOWER = ".lower"
UPPER = ".upper"
SE_FIT = ".se.fit"
RESID = ".resid"
HAT = ".hat"
COOKSD = ".cooksd"
STD_RESID = ".std.resid"

# Derived columns always follow the input columns in this order
AUGMENT_COLUMN_ORDER = [FITTED, LOWER, UPPER, SE_FIT, RESID, HAT, COOKSD, STD_RESID]


class TableRole(str, Enum):
    """Role a tabular result claims."""
    TIDY = "tidy"
    GLANCE = "glance"
    AUGMENT = "augment"


class ValueKind(str, Enum):
    """Kind of a single cell value."""
    NUMBER = "number"
    TEXT = "text"
    MISSING = "missing"
    NESTED = "nested"


_NESTED_TYPES = (list, tuple, dict, set, frozenset, np.ndarray, pd.Series, pd.DataFrame)


def classify_value(value: Any) -> ValueKind:
    """
    Classify a cell value as number, text, missing or nested.

    Booleans count as numbers. NaN, None, pd.NA and NaT are missing.
    Containers of any kind are nested.
    """
    if isinstance(value, _NESTED_TYPES):
        return ValueKind.NESTED
    if value is None or value is pd.NA or value is pd.NaT:
        return ValueKind.MISSING
    if isinstance(value, (bool, np.bool_)):
        return ValueKind.NUMBER
    if isinstance(value, numbers.Number):
        if isinstance(value, numbers.Real) and pd.isna(value):
            return ValueKind.MISSING
        return ValueKind.NUMBER
    if isinstance(value, np.datetime64) and pd.isna(value):
        return ValueKind.MISSING
    return ValueKind.TEXT


class ViolationKind(str, Enum):
    """Kinds of contract violations."""
    MISSING_COLUMN = "missing_column"
    UNEXPECTED_COLUMN = "unexpected_column"
    DUPLICATE_COLUMN = "duplicate_column"
    COLUMN_ORDER = "column_order"
    NULL_VALUE = "null_value"
    DUPLICATE_VALUE = "duplicate_value"
    NON_NUMERIC = "non_numeric"
    INTERVAL_ORDER = "interval_order"
    ROW_COUNT = "row_count"
    NON_SCALAR = "non_scalar"
    UNPREFIXED_COLUMN = "unprefixed_column"


class Violation(BaseModel):
    """A single contract violation with the offending column and/or row."""

    kind: ViolationKind
    column: Optional[str] = None
    row: Optional[int] = None
    message: str

    model_config = ConfigDict(frozen=True)

    def __str__(self):
        where = []
        if self.column is not None:
            where.append(f"column={self.column!r}")
        if self.row is not None:
            where.append(f"row={self.row}")
        location = f" ({', '.join(where)})" if where else ""
        return f"{self.kind.value}{location}: {self.message}"


class ValidationReport(BaseModel):
    """All violations found for one table."""

    role: TableRole
    violations: List[Violation] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def ok(self) -> bool:
        return not self.violations

    def of_kind(self, kind: ViolationKind) -> List[Violation]:
        """Violations of the given kind."""
        return [v for v in self.violations if v.kind == kind]

    def summary(self) -> Dict[str, Any]:
        """
        Summarize violations by kind.

        Returns:
            Dictionary with violation counts and the first few violations
        """
        if not self.violations:
            return {'role': self.role.value, 'total_violations': 0}

        kinds: Dict[str, int] = {}
        for violation in self.violations:
            kinds[violation.kind.value] = kinds.get(violation.kind.value, 0) + 1

        return {
            'role': self.role.value,
            'total_violations': len(self.violations),
            'violation_kinds': kinds,
            'sample_violations': [str(v) for v in self.violations[:5]]
        }


class ModelOptions(BaseModel):
    """
    Options for component-level (tidy) tables.

    `quick` takes precedence over `conf_int`: a quick table never carries
    interval columns.
    """

    conf_int: bool = Field(False, description="Add conf.low / conf.high")
    conf_level: float = Field(0.95, gt=0.0, lt=1.0, description="Interval coverage")
    quick: bool = Field(False, description="Only term and estimate")
    exponentiate: bool = Field(False, description="Exponentiate estimates and bounds")

    model_config = ConfigDict(frozen=True)

    @model_validator(mode='before')
    @classmethod
    def quick_disables_intervals(cls, values):
        if isinstance(values, dict) and values.get('quick') and values.get('conf_int'):
            logger.debug("quick=True requested with conf_int=True; intervals dropped")
            values = {**values, 'conf_int': False}
        return values


class ModelSchema(BaseModel):
    """
    Declared column sets for one model type.

    Column order in each list is the output order.
    """

    model_type: str = Field(..., min_length=1)
    component_columns: List[str] = Field(default_factory=lambda: list(QUICK_COLUMNS))
    summary_columns: List[str] = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    @field_validator('component_columns')
    @classmethod
    def validate_component_columns(cls, v):
        if v[:2] != QUICK_COLUMNS:
            raise ValueError(f"component_columns must start with {QUICK_COLUMNS}")
        if len(set(v)) != len(v):
            raise ValueError("component_columns contains duplicates")
        if set(v) & set(INTERVAL_COLUMNS):
            raise ValueError("interval columns are added by options, not declared")
        return v

    @field_validator('summary_columns')
    @classmethod
    def validate_summary_columns(cls, v):
        if len(set(v)) != len(v):
            raise ValueError("summary_columns contains duplicates")
        return v
