"""
Contract validator for tidy, glance and augment tables.

Table checks never stop at the first problem: every violation is collected
into a `ValidationReport`. Only `validate_input_selection` raises, because
it decides whether an observation-level table can be computed at all.
"""

from typing import Any, Dict, List, Optional, Sequence, Union

import pandas as pd

from modeltidy.contracts.data_models import (
    CONF_HIGH,
    CONF_LOW,
    ESTIMATE,
    FITTED,
    INTERVAL_COLUMNS,
    QUICK_COLUMNS,
    RESERVED_PREFIX,
    RESID,
    ROWNAMES,
    TERM,
    ModelOptions,
    TableRole,
    ValidationReport,
    ValueKind,
    Violation,
    ViolationKind,
    classify_value,
)
from modeltidy.utils.errors import (
    ConflictingInputError,
    MissingInputError,
    SchemaViolationError,
    UnsupportedInputError,
)
from modeltidy.utils.logger import get_logger

logger = get_logger(__name__)


def _column(table: pd.DataFrame, name: str) -> pd.Series:
    # First occurrence, so duplicated names still yield a Series
    return table.iloc[:, list(table.columns).index(name)]


def _require_frame(table: Any) -> pd.DataFrame:
    if not isinstance(table, pd.DataFrame):
        raise UnsupportedInputError(
            "Tables must be pandas DataFrames",
            argument="table",
            input_type=type(table).__name__
        )
    return table


def _unique(violations: List[Violation]) -> List[Violation]:
    return list(dict.fromkeys(violations))


class TidyContractValidator:
    """
    Validates tabular results against the tidy-output contract.

    The validator keeps no history: each call is a pure function of its
    arguments, so one instance can be shared freely.
    """

    def __init__(self, strict: bool = False):
        """
        Initialize validator.

        Args:
            strict: If True, `check` raises on violations. If False, it logs warnings.
        """
        self.strict = strict

    # ------------------------------------------------------------------
    # shared checks

    def _duplicate_columns(self, table: pd.DataFrame) -> List[Violation]:
        seen = set()
        violations = []
        for name in table.columns:
            if name in seen:
                violations.append(Violation(
                    kind=ViolationKind.DUPLICATE_COLUMN, column=str(name),
                    message="column name appears more than once"
                ))
            seen.add(name)
        return violations

    def _compare_columns(self, table: pd.DataFrame,
                         expected: Sequence[str]) -> List[Violation]:
        actual = [str(c) for c in table.columns]
        expected = list(expected)
        violations = []

        for name in expected:
            if name not in actual:
                violations.append(Violation(
                    kind=ViolationKind.MISSING_COLUMN, column=name,
                    message="declared column is absent"
                ))
        for name in actual:
            if name not in expected:
                violations.append(Violation(
                    kind=ViolationKind.UNEXPECTED_COLUMN, column=name,
                    message="column is not declared for this model type"
                ))

        if not violations and actual != expected:
            violations.append(Violation(
                kind=ViolationKind.COLUMN_ORDER,
                message=f"expected order {expected}, got {actual}"
            ))
        return violations

    def _duplicate_values(self, table: pd.DataFrame, name: str) -> List[Violation]:
        seen = {}
        violations = []
        for row, value in enumerate(_column(table, name).tolist()):
            kind = classify_value(value)
            if kind == ValueKind.MISSING:
                continue
            if kind == ValueKind.NESTED:
                violations.append(Violation(
                    kind=ViolationKind.NON_SCALAR, column=name, row=row,
                    message=f"value of type {type(value).__name__} is not a scalar"
                ))
                continue
            if value in seen:
                violations.append(Violation(
                    kind=ViolationKind.DUPLICATE_VALUE, column=name, row=row,
                    message=f"{value!r} already used in row {seen[value]}"
                ))
            else:
                seen[value] = row
        return violations

    def _non_numeric(self, table: pd.DataFrame, name: str) -> List[Violation]:
        violations = []
        for row, value in enumerate(_column(table, name).tolist()):
            if classify_value(value) in (ValueKind.TEXT, ValueKind.NESTED):
                violations.append(Violation(
                    kind=ViolationKind.NON_NUMERIC, column=name, row=row,
                    message=f"value {value!r} is not numeric"
                ))
        return violations

    # ------------------------------------------------------------------
    # component-level (tidy)

    def validate_component_table(
        self,
        table: pd.DataFrame,
        model_options: Union[ModelOptions, Dict[str, Any], None] = None,
        expected_columns: Optional[Sequence[str]] = None
    ) -> ValidationReport:
        """
        Validate a component-level (tidy) table.

        Args:
            table: Table to check
            model_options: Options the table was produced with
            expected_columns: Declared column order for the model type, if known

        Returns:
            Report with every violation found
        """
        table = _require_frame(table)
        if isinstance(model_options, dict):
            model_options = ModelOptions(**model_options)
        options = model_options or ModelOptions()
        columns = [str(c) for c in table.columns]
        violations = self._duplicate_columns(table)

        if TERM not in columns:
            violations.append(Violation(kind=ViolationKind.MISSING_COLUMN, column=TERM,
                                        message="component tables need a term column"))
        else:
            for row, value in enumerate(_column(table, TERM).tolist()):
                if classify_value(value) == ValueKind.MISSING:
                    violations.append(Violation(kind=ViolationKind.NULL_VALUE, column=TERM,
                                                row=row, message="term is missing"))
            violations += self._duplicate_values(table, TERM)

        if ESTIMATE not in columns:
            violations.append(Violation(kind=ViolationKind.MISSING_COLUMN, column=ESTIMATE,
                                        message="component tables need an estimate column"))
        else:
            violations += self._non_numeric(table, ESTIMATE)

        if options.conf_int:
            violations += self._interval_violations(table, columns)
        else:
            for name in INTERVAL_COLUMNS:
                if name in columns:
                    violations.append(Violation(
                        kind=ViolationKind.UNEXPECTED_COLUMN, column=name,
                        message="interval column present but conf_int was not requested"
                    ))

        if options.quick:
            for name in columns:
                if name not in QUICK_COLUMNS and name not in INTERVAL_COLUMNS:
                    violations.append(Violation(
                        kind=ViolationKind.UNEXPECTED_COLUMN, column=name,
                        message="quick tables carry only term and estimate"
                    ))

        if expected_columns is not None:
            violations += self._compare_columns(table, expected_columns)

        return self._report(TableRole.TIDY, violations)

    def _interval_violations(self, table: pd.DataFrame,
                             columns: List[str]) -> List[Violation]:
        violations = []
        for name in INTERVAL_COLUMNS:
            if name not in columns:
                violations.append(Violation(
                    kind=ViolationKind.MISSING_COLUMN, column=name,
                    message="conf_int was requested but the bound is absent"
                ))
        if violations:
            return violations

        violations += self._non_numeric(table, CONF_LOW)
        violations += self._non_numeric(table, CONF_HIGH)

        lows = _column(table, CONF_LOW).tolist()
        highs = _column(table, CONF_HIGH).tolist()
        for row, (low, high) in enumerate(zip(lows, highs)):
            if classify_value(low) != ValueKind.NUMBER or classify_value(high) != ValueKind.NUMBER:
                continue
            if low > high:
                violations.append(Violation(
                    kind=ViolationKind.INTERVAL_ORDER, column=CONF_LOW, row=row,
                    message=f"conf.low {low} exceeds conf.high {high}"
                ))
        return violations

    # ------------------------------------------------------------------
    # model-level (glance)

    def validate_summary_table(
        self,
        table: pd.DataFrame,
        expected_columns: Optional[Sequence[str]] = None
    ) -> ValidationReport:
        """
        Validate a model-level (glance) table.

        Args:
            table: Table to check
            expected_columns: Declared columns for the model type, in order

        Returns:
            Report with every violation found
        """
        table = _require_frame(table)
        violations = self._duplicate_columns(table)

        if len(table) != 1:
            violations.append(Violation(
                kind=ViolationKind.ROW_COUNT,
                message=f"summary tables have exactly one row, got {len(table)}"
            ))

        for position, name in enumerate(table.columns):
            for row, value in enumerate(table.iloc[:, position].tolist()):
                if classify_value(value) == ValueKind.NESTED:
                    violations.append(Violation(
                        kind=ViolationKind.NON_SCALAR, column=str(name), row=row,
                        message=f"value of type {type(value).__name__} is not a scalar"
                    ))

        if expected_columns is not None:
            violations += self._compare_columns(table, expected_columns)

        return self._report(TableRole.GLANCE, violations)

    # ------------------------------------------------------------------
    # observation-level (augment)

    def validate_observation_table(
        self,
        table: pd.DataFrame,
        input_row_count: int,
        has_response: bool,
        input_columns: Sequence[str] = (),
        has_rownames: bool = False,
        rownames_unique: bool = True
    ) -> ValidationReport:
        """
        Validate an observation-level (augment) table.

        Args:
            table: Table to check
            input_row_count: Rows in the data the table was built from
            has_response: Whether the input carried the response column or
                residuals were taken from the model
            input_columns: Caller-supplied columns; exempt from the prefix rule
            has_rownames: Whether the input carried row identifiers
            rownames_unique: Whether those identifiers were unique

        Returns:
            Report with every violation found
        """
        table = _require_frame(table)
        input_columns = {str(c) for c in input_columns}
        derived = [str(c) for c in table.columns if str(c) not in input_columns]
        violations = self._duplicate_columns(table)

        if len(table) != input_row_count:
            violations.append(Violation(
                kind=ViolationKind.ROW_COUNT,
                message=f"expected {input_row_count} rows, got {len(table)}"
            ))

        for name in derived:
            if not name.startswith(RESERVED_PREFIX):
                violations.append(Violation(
                    kind=ViolationKind.UNPREFIXED_COLUMN, column=name,
                    message=f"added columns must start with {RESERVED_PREFIX!r}"
                ))

        if FITTED not in derived:
            violations.append(Violation(kind=ViolationKind.MISSING_COLUMN, column=FITTED,
                                        message="fitted values are missing"))

        if has_response and RESID not in derived:
            violations.append(Violation(
                kind=ViolationKind.MISSING_COLUMN, column=RESID,
                message="input carries the response but residuals are missing"
            ))
        elif not has_response and RESID in derived:
            violations.append(Violation(
                kind=ViolationKind.UNEXPECTED_COLUMN, column=RESID,
                message="residuals present but the input has no response"
            ))

        if has_rownames and ROWNAMES not in derived:
            violations.append(Violation(
                kind=ViolationKind.MISSING_COLUMN, column=ROWNAMES,
                message="input carried row identifiers but .rownames is missing"
            ))
        elif not has_rownames and ROWNAMES in derived:
            violations.append(Violation(
                kind=ViolationKind.UNEXPECTED_COLUMN, column=ROWNAMES,
                message=".rownames present but the input had no row identifiers"
            ))
        elif ROWNAMES in derived and rownames_unique:
            violations += self._duplicate_values(table, ROWNAMES)

        return self._report(TableRole.AUGMENT, violations)

    # ------------------------------------------------------------------
    # input selection

    def validate_input_selection(
        self,
        data_provided: bool,
        newdata_provided: bool,
        can_reconstruct: bool = True
    ) -> None:
        """
        Check which data an observation-level table may be built from.

        Args:
            data_provided: Caller passed `data`
            newdata_provided: Caller passed `newdata`
            can_reconstruct: Model can recover its training data

        Raises:
            ConflictingInputError: If both inputs were supplied
            MissingInputError: If neither was supplied and reconstruction is impossible
        """
        if data_provided and newdata_provided:
            raise ConflictingInputError(supplied=['data', 'newdata'])
        if not data_provided and not newdata_provided and not can_reconstruct:
            raise MissingInputError(
                "No data supplied and the model cannot reconstruct its training data; "
                "pass `data` or `newdata`"
            )

    # ------------------------------------------------------------------

    def validate(self, table: pd.DataFrame, role: Union[TableRole, str],
                 **kwargs) -> ValidationReport:
        """
        Validate a table against the contract for `role`.

        Keyword arguments are passed to the role's validation method.
        """
        role = TableRole(role)
        if role == TableRole.TIDY:
            return self.validate_component_table(table, **kwargs)
        if role == TableRole.GLANCE:
            return self.validate_summary_table(table, **kwargs)
        return self.validate_observation_table(table, **kwargs)

    def check(self, report: ValidationReport) -> ValidationReport:
        """
        Act on a report according to the validator mode.

        Raises:
            SchemaViolationError: If strict and the report has violations
        """
        if report.ok:
            return report
        if self.strict:
            raise SchemaViolationError(
                f"{report.role.value} table violates its contract "
                f"({len(report.violations)} violations)",
                violations=report.violations,
                role=report.role.value
            )
        logger.warning(f"{report.role.value} table has contract violations",
                       context=report.summary())
        return report

    def _report(self, role: TableRole, violations: List[Violation]) -> ValidationReport:
        report = ValidationReport(role=role, violations=_unique(violations))
        logger.debug("Table validated", context={
            'role': role.value, 'violations': len(report.violations)
        })
        return report
