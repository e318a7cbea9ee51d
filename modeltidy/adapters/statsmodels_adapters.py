"""
Adapters for statsmodels results objects.

Covers linear regression (OLS/WLS/GLS), generalized linear models and
quantile regression. Models fitted through the formula API keep the
original data frame, so their training data can always be recovered.
Models fitted on arrays with missing='drop' only keep the surviving rows.
"""

from typing import Any, Dict, List, Optional

import numpy as np
import pandas as pd
from statsmodels.stats.outliers_influence import OLSInfluence

from modeltidy.adapters.base import (
    ModelAdapter,
    align_to_index,
    as_float_array,
    safe_stat,
)
from modeltidy.adapters.registry import register_adapter
from modeltidy.contracts.data_models import COOKSD, FITTED, HAT, LOWER, SE_FIT, STD_RESID, UPPER
from modeltidy.utils.errors import ModelCapabilityError, UnsupportedInputError
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)


class StatsmodelsAdapter(ModelAdapter):
    """Accessors shared by statsmodels results classes."""

    supports_prediction_interval = False

    @property
    def _model(self):
        return self.model.model

    @property
    def use_t(self) -> bool:
        return bool(getattr(self.model, 'use_t', True))

    @property
    def formula(self) -> Optional[str]:
        return getattr(self._model, 'formula', None)

    def terms(self) -> List[str]:
        return [str(name) for name in self._model.exog_names]

    def estimates(self) -> np.ndarray:
        return as_float_array(self.model.params)

    def std_errors(self) -> np.ndarray:
        return as_float_array(self.model.bse)

    def statistics(self) -> np.ndarray:
        return as_float_array(self.model.tvalues)

    def p_values(self) -> np.ndarray:
        return as_float_array(self.model.pvalues)

    def df_residual(self) -> float:
        return float(self.model.df_resid)

    def _series(self, values: Any) -> pd.Series:
        if isinstance(values, pd.Series):
            return values
        values = as_float_array(values)
        labels = getattr(self._model.data, 'row_labels', None)
        if labels is not None and len(labels) == len(values):
            return pd.Series(values, index=labels)
        return pd.Series(values)

    def fitted(self) -> pd.Series:
        return self._series(self.model.fittedvalues)

    def residuals(self) -> pd.Series:
        return self._series(self.model.resid)

    @property
    def response_name(self) -> str:
        return str(self._model.endog_names)

    def training_data(self) -> pd.DataFrame:
        data = self._model.data
        frame = getattr(data, 'frame', None)
        if isinstance(frame, pd.DataFrame):
            return frame

        dropped = getattr(data, 'missing_row_idx', None)
        if dropped:
            logger.warning("Rows dropped while fitting are not stored by array-fitted models",
                           context={'model_type': self.model_type,
                                    'dropped_rows': len(dropped)})

        exog = data.orig_exog
        if not isinstance(exog, pd.DataFrame):
            exog = pd.DataFrame(np.asarray(exog), columns=self.terms())
        endog = pd.Series(as_float_array(data.orig_endog), index=exog.index,
                          name=self.response_name)
        return pd.concat([endog, exog], axis=1)

    def _exog(self, newdata: pd.DataFrame):
        if self.formula is not None:
            return newdata
        missing = [t for t in self.terms() if t not in newdata.columns]
        if missing:
            raise UnsupportedInputError("Input lacks columns the model was fitted on",
                                        argument="newdata", missing_columns=missing)
        return newdata[self.terms()]

    def predict(
        self,
        newdata: pd.DataFrame,
        se_fit: bool = False,
        interval: str = "none",
        level: float = 0.95
    ) -> pd.DataFrame:
        exog = self._exog(newdata)
        out = pd.DataFrame(index=newdata.index)

        if not se_fit and interval == "none":
            out[FITTED] = align_to_index(self.model.predict(exog), newdata.index).to_numpy()
            return out

        if interval == "prediction" and not self.supports_prediction_interval:
            raise ModelCapabilityError("Prediction intervals are not available",
                                       model_type=self.model_type, option="interval")

        frame = self.model.get_prediction(exog).summary_frame(alpha=1.0 - level)
        out[FITTED] = align_to_index(frame['mean'], newdata.index).to_numpy()
        if interval != "none":
            prefix = 'obs_ci' if interval == "prediction" else 'mean_ci'
            out[LOWER] = align_to_index(frame[f'{prefix}_lower'], newdata.index).to_numpy()
            out[UPPER] = align_to_index(frame[f'{prefix}_upper'], newdata.index).to_numpy()
        if se_fit:
            out[SE_FIT] = align_to_index(frame['mean_se'], newdata.index).to_numpy()
        return out


@register_adapter("lm", "RegressionResults")
class LinearModelAdapter(StatsmodelsAdapter):
    """OLS, WLS and GLS results."""

    supports_prediction_interval = True

    def influence(self) -> pd.DataFrame:
        influence = OLSInfluence(getattr(self.model, '_results', self.model))
        return pd.DataFrame({
            HAT: as_float_array(influence.hat_matrix_diag),
            COOKSD: as_float_array(influence.cooks_distance[0]),
            STD_RESID: as_float_array(influence.resid_studentized_internal),
        }, index=self.fitted().index)

    def model_stats(self) -> Dict[str, Any]:
        res = self.model
        return {
            "r.squared": safe_stat(lambda: res.rsquared),
            "adj.r.squared": safe_stat(lambda: res.rsquared_adj),
            "sigma": safe_stat(lambda: np.sqrt(res.scale)),
            "statistic": safe_stat(lambda: res.fvalue),
            "p.value": safe_stat(lambda: res.f_pvalue),
            "df": safe_stat(lambda: res.df_model),
            "logLik": safe_stat(lambda: res.llf),
            "AIC": safe_stat(lambda: res.aic),
            "BIC": safe_stat(lambda: res.bic),
            "deviance": safe_stat(lambda: res.ssr),
            "df.residual": safe_stat(lambda: res.df_resid),
            "nobs": safe_stat(lambda: res.nobs),
        }


@register_adapter("glm", "GLMResults")
class GLMAdapter(StatsmodelsAdapter):
    """
    Generalized linear model results.

    Fitted values are on the response scale and residuals are response
    residuals, so `.resid == y - .fitted` holds as for linear models.
    """

    def residuals(self) -> pd.Series:
        return self._series(self.model.resid_response)

    def model_stats(self) -> Dict[str, Any]:
        res = self.model
        bic = getattr(res, 'bic_llf', None)
        return {
            "null.deviance": safe_stat(lambda: res.null_deviance),
            "df.null": safe_stat(lambda: res.df_resid + res.df_model),
            "logLik": safe_stat(lambda: res.llf),
            "AIC": safe_stat(lambda: res.aic),
            "BIC": safe_stat(lambda: bic if bic is not None else res.bic),
            "deviance": safe_stat(lambda: res.deviance),
            "df.residual": safe_stat(lambda: res.df_resid),
            "nobs": safe_stat(lambda: res.nobs),
        }


@register_adapter("quantreg", "QuantRegResults")
class QuantRegAdapter(StatsmodelsAdapter):
    """Quantile regression results."""

    def _tau(self) -> float:
        q = getattr(self.model, 'q', None)
        if q is None:
            q = getattr(self._model, 'q', None)
        return q

    def model_stats(self) -> Dict[str, Any]:
        res = self.model
        return {
            "tau": safe_stat(self._tau),
            "pseudo.r.squared": safe_stat(lambda: res.prsquared),
            "df.residual": safe_stat(lambda: res.df_resid),
            "nobs": safe_stat(lambda: res.nobs),
        }
