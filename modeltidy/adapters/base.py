"""
Model adapter interface.

An adapter exposes the few accessors the tidiers need from an opaque
fitted model: term names, coefficient estimates and their inference
columns, fitted values, residuals, training data, prediction and
model-level statistics. Accessors a model type cannot provide return None.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import numpy as np
import pandas as pd
from scipy import stats

from modeltidy.contracts.data_models import P_VALUE, STATISTIC, STD_ERROR
from modeltidy.utils.errors import ModelCapabilityError, ModelError
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)


def as_float_array(values: Any) -> np.ndarray:
    """Flatten values (Series, list, array) into a 1-D float array."""
    return np.asarray(values, dtype=float).ravel()


def align_to_index(values: Any, index: pd.Index) -> pd.Series:
    """
    Place per-observation values onto the rows of `index`.

    Values of matching length are placed positionally. Shorter labelled
    values (a model that dropped rows with missing data) are reindexed by
    label, leaving NaN on the dropped rows.

    Raises:
        ModelError: If the values cannot be matched to the rows
    """
    if len(values) == len(index):
        return pd.Series(as_float_array(values), index=index)

    if isinstance(values, pd.Series) and index.is_unique and values.index.is_unique:
        if values.index.isin(index).all():
            return values.astype(float).reindex(index)

    raise ModelError(
        f"Cannot align {len(values)} model values to {len(index)} input rows",
        details={'values': len(values), 'rows': len(index)}
    )


def safe_stat(getter: Callable[[], Any]) -> float:
    """
    Evaluate a model statistic, returning NaN when it is undefined.

    Model variants that do not define a statistic raise on access; the
    summary table carries a missing value for them instead.
    """
    try:
        value = getter()
    except (AttributeError, NotImplementedError, ValueError, ZeroDivisionError,
            np.linalg.LinAlgError) as e:
        logger.debug("Statistic undefined for model", context={'error': str(e)})
        return np.nan
    if value is None:
        return np.nan
    return float(np.squeeze(value))


class ModelAdapter(ABC):
    """
    Capability set over a fitted model.

    Subclasses are registered per model type with
    `modeltidy.adapters.registry.register_adapter`.
    """

    # Whether Wald intervals use the t distribution (else normal)
    use_t: bool = True

    def __init__(self, model: Any, model_type: Optional[str] = None):
        self.model = model
        self.model_type = model_type

    @abstractmethod
    def terms(self) -> List[str]:
        """Component names, one per estimate."""

    @abstractmethod
    def estimates(self) -> np.ndarray:
        """Point estimates, aligned with `terms()`."""

    def std_errors(self) -> Optional[np.ndarray]:
        return None

    def statistics(self) -> Optional[np.ndarray]:
        return None

    def p_values(self) -> Optional[np.ndarray]:
        return None

    def df_residual(self) -> Optional[float]:
        return None

    def component_values(self) -> Dict[str, Optional[np.ndarray]]:
        """Per-component inference columns keyed by output column name."""
        return {
            STD_ERROR: self.std_errors(),
            STATISTIC: self.statistics(),
            P_VALUE: self.p_values(),
        }

    def conf_int(self, level: float) -> Optional[np.ndarray]:
        """
        Wald confidence interval for each estimate.

        Args:
            level: Coverage, e.g. 0.95

        Returns:
            Array of shape (n_terms, 2), or None without standard errors
        """
        se = self.std_errors()
        if se is None:
            return None

        tail = 1.0 - (1.0 - level) / 2.0
        df = self.df_residual()
        if self.use_t and df is not None and df > 0:
            q = stats.t.ppf(tail, df)
        else:
            q = stats.norm.ppf(tail)

        estimates = self.estimates()
        return np.column_stack([estimates - q * se, estimates + q * se])

    def fitted(self) -> Optional[pd.Series]:
        """Fitted values on the training rows, or None if not stored."""
        return None

    def residuals(self) -> Optional[pd.Series]:
        return None

    def training_data(self) -> Optional[pd.DataFrame]:
        """Training data recovered from the model, or None."""
        return None

    @property
    def response_name(self) -> Optional[str]:
        return None

    def predict(
        self,
        newdata: pd.DataFrame,
        se_fit: bool = False,
        interval: str = "none",
        level: float = 0.95
    ) -> pd.DataFrame:
        """
        Predictions for `newdata` as derived columns indexed like `newdata`.

        Returns a frame with `.fitted` and, when requested, `.se.fit`,
        `.lower` and `.upper`.
        """
        raise ModelCapabilityError("Model type does not support prediction",
                                   model_type=self.model_type, option="predict")

    def influence(self) -> Optional[pd.DataFrame]:
        """Per-observation influence measures on the training rows."""
        return None

    def model_stats(self) -> Dict[str, Any]:
        """Model-level statistics keyed by glance column name."""
        return {}
