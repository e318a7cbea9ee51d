"""
Unit tests for the tidy-output contract validator.

Tests cover:
- Component (tidy) tables: term/estimate rules, intervals, quick tables
- Summary (glance) tables: single row, scalars, declared columns
- Observation (augment) tables: row count, prefixes, .resid/.rownames rules
- Input selection for observation tables
- Batch collection and strict mode
"""

import numpy as np
import pandas as pd
import pytest

from modeltidy.contracts import ModelOptions, TableRole, TidyContractValidator, ViolationKind
from modeltidy.utils.errors import (
    ConflictingInputError,
    MissingInputError,
    SchemaViolationError,
    UnsupportedInputError,
)


@pytest.fixture
def validator():
    return TidyContractValidator()


def kinds(report):
    return [v.kind for v in report.violations]


class TestComponentTable:
    """Tests for validate_component_table."""

    def test_valid_minimal_table(self, validator):
        """Test a minimal tidy table passes."""
        table = pd.DataFrame({'term': ['(Intercept)', 'x'], 'estimate': [1.5, -0.3]})

        report = validator.validate_component_table(table, ModelOptions())

        assert report.ok
        assert report.role == TableRole.TIDY

    def test_empty_table_is_valid(self, validator):
        """Test a zero-row tidy table passes."""
        table = pd.DataFrame({'term': pd.Series([], dtype=object),
                              'estimate': pd.Series([], dtype=float)})

        assert validator.validate_component_table(table).ok

    def test_missing_term_and_estimate(self, validator):
        """Test missing required columns are both reported."""
        table = pd.DataFrame({'coef': [1.0]})

        report = validator.validate_component_table(table)

        missing = {v.column for v in report.of_kind(ViolationKind.MISSING_COLUMN)}
        assert missing == {'term', 'estimate'}

    def test_null_and_duplicate_terms(self, validator):
        """Test null and duplicate terms are reported."""
        table = pd.DataFrame({'term': ['x', None, 'x'], 'estimate': [1.0, 2.0, 3.0]})

        report = validator.validate_component_table(table)

        nulls = report.of_kind(ViolationKind.NULL_VALUE)
        dups = report.of_kind(ViolationKind.DUPLICATE_VALUE)
        assert [v.row for v in nulls] == [1]
        assert [v.row for v in dups] == [2]

    def test_non_numeric_estimate(self, validator):
        """Test text estimates are reported."""
        table = pd.DataFrame({'term': ['a', 'b'], 'estimate': [1.0, 'big']})

        report = validator.validate_component_table(table)

        assert kinds(report) == [ViolationKind.NON_NUMERIC]
        assert report.violations[0].row == 1

    def test_missing_estimate_value_is_allowed(self, validator):
        """Test a NaN estimate is allowed."""
        table = pd.DataFrame({'term': ['a', 'b'], 'estimate': [1.0, np.nan]})

        assert validator.validate_component_table(table).ok

    def test_conf_int_requires_both_bounds(self, validator):
        """Test conf_int requires both bound columns."""
        table = pd.DataFrame({'term': ['a'], 'estimate': [1.0], 'conf.low': [0.5]})

        report = validator.validate_component_table(table, ModelOptions(conf_int=True))

        assert [v.column for v in report.of_kind(ViolationKind.MISSING_COLUMN)] == ['conf.high']

    def test_interval_order(self, validator):
        """Test conf.low above conf.high is reported per row."""
        table = pd.DataFrame({
            'term': ['a', 'b', 'c'],
            'estimate': [1.0, 2.0, 3.0],
            'conf.low': [0.5, 2.5, np.nan],
            'conf.high': [1.5, 1.5, 1.0],
        })

        report = validator.validate_component_table(table, {'conf_int': True})

        order = report.of_kind(ViolationKind.INTERVAL_ORDER)
        assert [v.row for v in order] == [1]

    def test_interval_columns_without_request(self, validator):
        """Test interval columns without conf_int are reported."""
        table = pd.DataFrame({'term': ['a'], 'estimate': [1.0],
                              'conf.low': [0.0], 'conf.high': [2.0]})

        report = validator.validate_component_table(table, ModelOptions(conf_int=False))

        unexpected = {v.column for v in report.of_kind(ViolationKind.UNEXPECTED_COLUMN)}
        assert unexpected == {'conf.low', 'conf.high'}

    def test_quick_table_only_term_and_estimate(self, validator):
        """Test quick tables reject extra columns."""
        table = pd.DataFrame({'term': ['a'], 'estimate': [1.0], 'std.error': [0.1]})

        report = validator.validate_component_table(table, ModelOptions(quick=True))

        assert kinds(report) == [ViolationKind.UNEXPECTED_COLUMN]
        assert report.violations[0].column == 'std.error'

    def test_quick_overrides_conf_int(self, validator):
        table = pd.DataFrame({'term': ['a'], 'estimate': [1.0]})
        options = ModelOptions(quick=True, conf_int=True)

        assert not options.conf_int
        assert validator.validate_component_table(table, options).ok

    def test_expected_columns_order(self, validator):
        """Test column order is checked against the schema."""
        table = pd.DataFrame({'estimate': [1.0], 'term': ['a']})

        report = validator.validate_component_table(table,
                                                    expected_columns=['term', 'estimate'])

        assert kinds(report) == [ViolationKind.COLUMN_ORDER]

    def test_expected_columns_missing_and_extra(self, validator):
        """Test missing and extra schema columns are reported."""
        table = pd.DataFrame({'term': ['a'], 'estimate': [1.0], 'extra': [0]})

        report = validator.validate_component_table(
            table, expected_columns=['term', 'estimate', 'std.error'])

        assert {v.kind for v in report.violations} == {
            ViolationKind.MISSING_COLUMN, ViolationKind.UNEXPECTED_COLUMN
        }

    def test_all_violations_reported_in_one_pass(self, validator):
        """Test every violation is collected in one pass."""
        table = pd.DataFrame({
            'term': ['a', 'a', None],
            'estimate': [1.0, 'x', 2.0],
            'conf.low': [3.0, 0.0, 0.0],
            'conf.high': [1.0, 1.0, 1.0],
        })

        report = validator.validate_component_table(table, ModelOptions(conf_int=True))

        assert {v.kind for v in report.violations} == {
            ViolationKind.DUPLICATE_VALUE,
            ViolationKind.NULL_VALUE,
            ViolationKind.NON_NUMERIC,
            ViolationKind.INTERVAL_ORDER,
        }
        assert report.summary()['total_violations'] == 4

    def test_rejects_non_dataframe(self, validator):
        """Test non-DataFrame tables raise UnsupportedInputError."""
        with pytest.raises(UnsupportedInputError):
            validator.validate_component_table({'term': ['a'], 'estimate': [1.0]})


class TestSummaryTable:
    """Tests for validate_summary_table."""

    def test_valid_single_row(self, validator):
        """Test a single-row glance table passes."""
        table = pd.DataFrame([{'r.squared': 0.8, 'nobs': 40, 'sigma': np.nan}])

        report = validator.validate_summary_table(
            table, expected_columns=['r.squared', 'nobs', 'sigma'])

        assert report.ok

    def test_row_count(self, validator):
        """Test glance tables must have exactly one row."""
        table = pd.DataFrame({'nobs': [1, 2]})

        report = validator.validate_summary_table(table)

        assert kinds(report) == [ViolationKind.ROW_COUNT]

    def test_empty_table_row_count(self, validator):
        report = validator.validate_summary_table(pd.DataFrame({'nobs': []}))

        assert kinds(report) == [ViolationKind.ROW_COUNT]

    def test_nested_values(self, validator):
        """Test nested cell values are reported."""
        table = pd.DataFrame({'nobs': [10], 'coefs': [[1.0, 2.0]]})

        report = validator.validate_summary_table(table)

        assert kinds(report) == [ViolationKind.NON_SCALAR]
        assert report.violations[0].column == 'coefs'

    def test_declared_columns(self, validator):
        """Test glance columns are checked against the declared set."""
        table = pd.DataFrame([{'nobs': 10, 'AIC': 1.0}])

        report = validator.validate_summary_table(
            table, expected_columns=['nobs', 'logLik'])

        assert {(v.kind, v.column) for v in report.violations} == {
            (ViolationKind.MISSING_COLUMN, 'logLik'),
            (ViolationKind.UNEXPECTED_COLUMN, 'AIC'),
        }


class TestObservationTable:
    """Tests for validate_observation_table."""

    @pytest.fixture
    def augmented(self):
        return pd.DataFrame({
            'x': [1.0, 2.0, 3.0],
            'y': [1.1, 1.9, 3.2],
            '.fitted': [1.0, 2.0, 3.0],
            '.resid': [0.1, -0.1, 0.2],
        })

    def test_valid_table(self, validator, augmented):
        """Test a valid augment table passes."""
        report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=True, input_columns=['x', 'y'])

        assert report.ok
        assert report.role == TableRole.AUGMENT

    def test_row_count_mismatch(self, validator, augmented):
        """Test a row count different from the input is reported."""
        report = validator.validate_observation_table(
            augmented, input_row_count=4, has_response=True, input_columns=['x', 'y'])

        assert kinds(report) == [ViolationKind.ROW_COUNT]

    def test_unprefixed_added_column(self, validator, augmented):
        """Test added columns without the prefix are reported."""
        augmented['fitted2'] = 0.0

        report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=True, input_columns=['x', 'y'])

        assert [(v.kind, v.column) for v in report.violations] == [
            (ViolationKind.UNPREFIXED_COLUMN, 'fitted2')
        ]

    def test_fitted_required(self, validator):
        """Test a missing .fitted column is reported."""
        table = pd.DataFrame({'x': [1.0]})

        report = validator.validate_observation_table(
            table, input_row_count=1, has_response=False, input_columns=['x'])

        assert [(v.kind, v.column) for v in report.violations] == [
            (ViolationKind.MISSING_COLUMN, '.fitted')
        ]

    def test_resid_requires_response(self, validator, augmented):
        """Test .resid without a response is reported."""
        report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=False, input_columns=['x', 'y'])

        assert [(v.kind, v.column) for v in report.violations] == [
            (ViolationKind.UNEXPECTED_COLUMN, '.resid')
        ]

    def test_resid_missing_with_response(self, validator, augmented):
        """Test a missing .resid with a response is reported."""
        table = augmented.drop(columns=['.resid'])

        report = validator.validate_observation_table(
            table, input_row_count=3, has_response=True, input_columns=['x', 'y'])

        assert [(v.kind, v.column) for v in report.violations] == [
            (ViolationKind.MISSING_COLUMN, '.resid')
        ]

    def test_rownames_iff_identifiers(self, validator, augmented):
        """Test .rownames is required iff the input had identifiers."""
        report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=True,
            input_columns=['x', 'y'], has_rownames=True)
        assert [v.column for v in report.violations] == ['.rownames']

        augmented.insert(0, '.rownames', ['a', 'b', 'c'])
        report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=True,
            input_columns=['x', 'y'], has_rownames=False)
        assert [(v.kind, v.column) for v in report.violations] == [
            (ViolationKind.UNEXPECTED_COLUMN, '.rownames')
        ]

    def test_rownames_uniqueness_follows_input(self, validator, augmented):
        """Test .rownames must be unique only for a unique input index."""
        augmented.insert(0, '.rownames', ['a', 'a', 'b'])

        strict_report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=True, input_columns=['x', 'y'],
            has_rownames=True, rownames_unique=True)
        loose_report = validator.validate_observation_table(
            augmented, input_row_count=3, has_response=True, input_columns=['x', 'y'],
            has_rownames=True, rownames_unique=False)

        assert [v.row for v in strict_report.of_kind(ViolationKind.DUPLICATE_VALUE)] == [1]
        assert loose_report.ok


class TestInputSelection:
    """Tests for validate_input_selection."""

    def test_both_inputs_conflict(self, validator):
        """Test both inputs raise ConflictingInputError."""
        with pytest.raises(ConflictingInputError):
            validator.validate_input_selection(True, True)

    def test_conflict_checked_before_reconstruction(self, validator):
        """Test the conflict wins over the missing-input check."""
        with pytest.raises(ConflictingInputError):
            validator.validate_input_selection(True, True, can_reconstruct=False)

    def test_missing_input_without_reconstruction(self, validator):
        """Test MissingInputError when nothing can be reconstructed."""
        with pytest.raises(MissingInputError):
            validator.validate_input_selection(False, False, can_reconstruct=False)

    @pytest.mark.parametrize("data,newdata,reconstruct", [
        (False, False, True),
        (True, False, False),
        (False, True, False),
    ])
    def test_valid_selections(self, validator, data, newdata, reconstruct):
        assert validator.validate_input_selection(data, newdata, reconstruct) is None


class TestValidatorModes:
    """Tests for role dispatch and strict/non-strict handling."""

    def test_dispatch_by_role_name(self, validator):
        """Test validate dispatches on the role name."""
        table = pd.DataFrame([{'nobs': 3}])

        report = validator.validate(table, 'glance')

        assert report.role == TableRole.GLANCE
        assert report.ok

    def test_strict_check_raises_with_all_violations(self):
        """Test strict check raises with every violation."""
        validator = TidyContractValidator(strict=True)
        table = pd.DataFrame({'term': ['a', 'a'], 'estimate': ['x', 1.0]})
        report = validator.validate_component_table(table)

        with pytest.raises(SchemaViolationError) as exc_info:
            validator.check(report)

        assert exc_info.value.role == 'tidy'
        assert len(exc_info.value.violations) == 2

    def test_non_strict_check_returns_report(self, validator):
        """Test lenient check returns the report."""
        table = pd.DataFrame({'nobs': [1, 2]})
        report = validator.validate_summary_table(table)

        assert validator.check(report) is report

    def test_validator_keeps_no_history(self, validator):
        bad = pd.DataFrame({'nobs': [1, 2]})
        good = pd.DataFrame({'nobs': [1]})

        validator.validate_summary_table(bad)

        assert validator.validate_summary_table(good).ok
