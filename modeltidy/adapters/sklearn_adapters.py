"""
Adapters for scikit-learn linear estimators.

scikit-learn keeps neither standard errors nor training data, so tidy
tables carry only terms and estimates, and observation-level tables need
the caller to pass `data` or `newdata`.
"""

from typing import Any, Dict, List

import numpy as np
import pandas as pd
from sklearn.exceptions import NotFittedError
from sklearn.utils.validation import check_is_fitted

from modeltidy.adapters.base import ModelAdapter, as_float_array, safe_stat
from modeltidy.adapters.registry import register_adapter
from modeltidy.contracts.data_models import FITTED
from modeltidy.utils.errors import ModelCapabilityError, ModelError, UnsupportedInputError

INTERCEPT_TERM = "(Intercept)"


def _hyperparameter(model: Any, name: str):
    # CV estimators store the selected value with a trailing underscore
    return getattr(model, f"{name}_", getattr(model, name, None))


@register_adapter(
    "sklearn_linear",
    "LinearRegression", "Ridge", "RidgeCV", "Lasso", "LassoCV",
    "ElasticNet", "ElasticNetCV"
)
class SklearnLinearAdapter(ModelAdapter):
    """Single-output linear estimators exposing `coef_` and `intercept_`."""

    def __init__(self, model: Any, model_type: str = None):
        super().__init__(model, model_type)
        try:
            check_is_fitted(model)
        except NotFittedError as e:
            raise ModelError("Model has not been fitted",
                             details={'model_class': type(model).__name__}) from e

        coef = np.asarray(model.coef_, dtype=float)
        if coef.ndim > 1 and coef.shape[0] > 1:
            raise ModelCapabilityError("Multi-output estimators are not supported",
                                       model_type=model_type, option="multi_output")
        self._coef = coef.ravel()

    @property
    def _fit_intercept(self) -> bool:
        return bool(getattr(self.model, 'fit_intercept', True))

    def features(self) -> List[str]:
        names = getattr(self.model, 'feature_names_in_', None)
        if names is not None:
            return [str(n) for n in names]
        return [f"x{i}" for i in range(len(self._coef))]

    def terms(self) -> List[str]:
        if self._fit_intercept:
            return [INTERCEPT_TERM] + self.features()
        return self.features()

    def estimates(self) -> np.ndarray:
        if self._fit_intercept:
            intercept = as_float_array(self.model.intercept_)[0]
            return np.concatenate([[intercept], self._coef])
        return self._coef.copy()

    def predict(
        self,
        newdata: pd.DataFrame,
        se_fit: bool = False,
        interval: str = "none",
        level: float = 0.95
    ) -> pd.DataFrame:
        if se_fit or interval != "none":
            raise ModelCapabilityError("Standard errors and intervals are not available",
                                       model_type=self.model_type,
                                       option="se_fit" if se_fit else "interval")

        features = self.features()
        missing = [f for f in features if f not in newdata.columns]
        if missing:
            raise UnsupportedInputError("Input lacks columns the model was fitted on",
                                        argument="newdata", missing_columns=missing)

        X = newdata[features]
        complete = X.notna().all(axis=1).to_numpy()
        fitted = np.full(len(X), np.nan)
        if complete.any():
            rows = X[complete]
            if getattr(self.model, 'feature_names_in_', None) is None:
                rows = rows.to_numpy()
            fitted[complete] = as_float_array(self.model.predict(rows))

        return pd.DataFrame({FITTED: fitted}, index=newdata.index)

    def model_stats(self) -> Dict[str, Any]:
        model = self.model
        return {
            "alpha": safe_stat(lambda: _hyperparameter(model, 'alpha')),
            "l1.ratio": safe_stat(lambda: _hyperparameter(model, 'l1_ratio')),
            "n.features": safe_stat(lambda: model.n_features_in_),
            "fit.intercept": self._fit_intercept,
        }
