"""
Schema registry for per-model-type table schemas.

Holds the declared component (tidy) and summary (glance) column sets for
each model type. The registry is built once and only read afterwards;
`extended` returns a new registry instead of mutating this one.
"""

import hashlib
from functools import lru_cache
from typing import Dict, Iterable, List, Optional

import pandas as pd
from pydantic import ValidationError

from modeltidy.contracts.data_models import (
    ESTIMATE,
    INTERVAL_COLUMNS,
    P_VALUE,
    QUICK_COLUMNS,
    STATISTIC,
    STD_ERROR,
    TERM,
    ModelOptions,
    ModelSchema,
)
from modeltidy.utils.config import TidySettings, get_settings
from modeltidy.utils.errors import ConfigurationError, UnregisteredModelError
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)

_INFERENCE_COLUMNS = [TERM, ESTIMATE, STD_ERROR, STATISTIC, P_VALUE]

BUILTIN_SCHEMAS = [
    ModelSchema(
        model_type="lm",
        component_columns=_INFERENCE_COLUMNS,
        summary_columns=[
            "r.squared", "adj.r.squared", "sigma", "statistic", "p.value", "df",
            "logLik", "AIC", "BIC", "deviance", "df.residual", "nobs"
        ]
    ),
    ModelSchema(
        model_type="glm",
        component_columns=_INFERENCE_COLUMNS,
        summary_columns=[
            "null.deviance", "df.null", "logLik", "AIC", "BIC", "deviance",
            "df.residual", "nobs"
        ]
    ),
    ModelSchema(
        model_type="quantreg",
        component_columns=_INFERENCE_COLUMNS,
        summary_columns=["tau", "pseudo.r.squared", "df.residual", "nobs"]
    ),
    ModelSchema(
        model_type="sklearn_linear",
        component_columns=[TERM, ESTIMATE],
        summary_columns=["alpha", "l1.ratio", "n.features", "fit.intercept"]
    ),
]


class SchemaRegistry:
    """
    Lookup table of model-type schemas.

    Responsibilities:
    - Resolve the declared column order for tidy and glance tables
    - Fingerprint column lists for logging
    - Report missing/extra columns of a table against a declared list
    """

    def __init__(self, schemas: Optional[Iterable[ModelSchema]] = None):
        self._schemas: Dict[str, ModelSchema] = {}
        for schema in (BUILTIN_SCHEMAS if schemas is None else schemas):
            self._schemas[schema.model_type] = schema

    @classmethod
    def from_settings(cls, settings: TidySettings) -> 'SchemaRegistry':
        """
        Build a registry from the built-in schemas plus configured extras.

        Configured schemas replace built-in ones of the same model type.
        """
        extra = []
        for model_type, spec in settings.schemas.items():
            try:
                extra.append(ModelSchema(model_type=model_type, **spec))
            except (ValidationError, TypeError) as e:
                raise ConfigurationError(f"Invalid schema for {model_type!r}: {e}",
                                         config_key=f"schemas.{model_type}") from e
            if any(s.model_type == model_type for s in BUILTIN_SCHEMAS):
                logger.info(f"Configured schema overrides built-in: {model_type}")
        return cls(BUILTIN_SCHEMAS).extended(*extra)

    def extended(self, *schemas: ModelSchema) -> 'SchemaRegistry':
        """Return a new registry with `schemas` added or replaced."""
        merged = dict(self._schemas)
        for schema in schemas:
            merged[schema.model_type] = schema
        return SchemaRegistry(merged.values())

    def model_types(self) -> List[str]:
        return sorted(self._schemas)

    def get(self, model_type: str) -> ModelSchema:
        """
        Get the schema for a model type.

        Raises:
            UnregisteredModelError: If no schema is declared for the type
        """
        try:
            return self._schemas[model_type]
        except KeyError:
            raise UnregisteredModelError(
                f"No schema registered for model type {model_type!r}",
                model_type=model_type
            ) from None

    def component_columns(self, model_type: str, options: ModelOptions) -> List[str]:
        """
        Ordered tidy columns for a (model type, options) pair.

        Quick tables carry only term and estimate. Otherwise the declared
        columns come first, followed by the interval bounds when requested.
        """
        if options.quick:
            return list(QUICK_COLUMNS)
        columns = list(self.get(model_type).component_columns)
        if options.conf_int:
            columns += INTERVAL_COLUMNS
        return columns

    def summary_columns(self, model_type: str) -> List[str]:
        """Ordered glance columns for a model type."""
        return list(self.get(model_type).summary_columns)

    @staticmethod
    def fingerprint(columns: List[str]) -> str:
        """
        Hash of an ordered column list.

        Args:
            columns: Column names in table order

        Returns:
            First 16 hex chars of the SHA256 digest
        """
        schema_str = ','.join(columns)
        return hashlib.sha256(schema_str.encode()).hexdigest()[:16]

    @staticmethod
    def check_missing_columns(table: pd.DataFrame, expected: List[str]) -> List[str]:
        """Expected columns absent from the table, in declared order."""
        present = set(table.columns)
        return [c for c in expected if c not in present]

    @staticmethod
    def check_extra_columns(table: pd.DataFrame, expected: List[str]) -> List[str]:
        """Table columns not in the expected list, in table order."""
        declared = set(expected)
        return [c for c in table.columns if c not in declared]


@lru_cache(maxsize=1)
def get_default_registry() -> SchemaRegistry:
    """Process-wide schema registry built from the loaded settings."""
    return SchemaRegistry.from_settings(get_settings())
