"""
Tests for the n-way ANOVA entry point.

Validates:
    - One-way reference values (F = 1, p = 27/64)
    - Two-way and three-way SS against direct group-mean computations
    - SS additivity, permutation invariance and label-space agreement
    - Pooling of omitted interactions into error when max_order is capped
    - Degenerate (unreplicated) designs and capacity limits
    - Text report and solution accessors
    - Cross-validation against scipy.stats.f_oneway
"""

import numpy as np
import pytest
from scipy import stats

from statbox.anova import anovan, f_pvalue
from statbox.core.exceptions import (
    CapacityError,
    DegenerateDesignError,
    DimensionError,
    ValidationError,
)


def _between_ss(y, labels):
    grand = y.mean()
    return sum(
        (labels == g).sum() * (y[labels == g].mean() - grand) ** 2
        for g in np.unique(labels)
    )


def _within_ss(y, labels):
    return sum(
        np.sum((y[labels == g] - y[labels == g].mean()) ** 2)
        for g in np.unique(labels)
    )


# ═══════════════════════════════════════════════════════════════════════
# One-way
# ═══════════════════════════════════════════════════════════════════════


class TestOneWayReference:

    def test_f_and_p(self, oneway_reference):
        y, groups = oneway_reference
        result = anovan(y, groups)
        np.testing.assert_allclose(result.f_values, [1.0], rtol=1e-12)
        np.testing.assert_allclose(result.p_values, [27 / 64], rtol=1e-10)

    def test_degrees_of_freedom(self, oneway_reference):
        y, groups = oneway_reference
        result = anovan(y, groups)
        np.testing.assert_array_equal(result.df_between, [2])
        assert result.df_within == 6

    def test_sums_of_squares(self, oneway_reference):
        y, groups = oneway_reference
        result = anovan(y, groups)
        np.testing.assert_allclose(result.row('A').sum_sq, 38 / 9, rtol=1e-12)
        np.testing.assert_allclose(result.sse, 38 / 3, rtol=1e-12)
        np.testing.assert_allclose(result.sst, 38 / 9 + 38 / 3, rtol=1e-12)
        np.testing.assert_allclose(result.mse, 19 / 9, rtol=1e-12)

    def test_column_vectors_accepted(self, oneway_reference):
        y, groups = oneway_reference
        result = anovan(y.reshape(-1, 1), groups.reshape(-1, 1))
        np.testing.assert_allclose(result.p_values, [27 / 64], rtol=1e-10)

    def test_string_labels_match_integer_labels(self, oneway_reference):
        y, groups = oneway_reference
        labels = np.array(['lo', 'mid', 'hi'])[groups - 1]
        r_int = anovan(y, groups)
        r_str = anovan(y, labels)
        np.testing.assert_allclose(r_str.f_values, r_int.f_values)
        np.testing.assert_array_equal(r_str.level_maps[0], ['hi', 'lo', 'mid'])

    def test_matches_scipy_f_oneway(self, rng):
        y = np.concatenate([
            rng.normal(10.0, 2.0, 8),
            rng.normal(12.0, 2.0, 11),
            rng.normal(11.0, 2.0, 6),
            rng.normal(14.0, 2.0, 9),
        ])
        groups = np.repeat(['w', 'x', 'y', 'z'], [8, 11, 6, 9])
        result = anovan(y, groups)
        ref = stats.f_oneway(*(y[groups == g] for g in 'wxyz'))
        np.testing.assert_allclose(result.f_values[0], ref.statistic, rtol=1e-10)
        np.testing.assert_allclose(result.p_values[0], ref.pvalue, rtol=1e-8)


# ═══════════════════════════════════════════════════════════════════════
# Factorial designs
# ═══════════════════════════════════════════════════════════════════════


class TestTwoWayReplicated:

    def test_table_structure(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        assert [r.term for r in result.table] == ['A', 'B', 'A x B', 'Error']
        assert [r.order for r in result.table] == [1, 1, 2, 0]
        assert result.error.f_value is None
        assert result.error.p_value is None

    def test_degrees_of_freedom(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        np.testing.assert_array_equal(result.df_between, [2, 2, 4])
        assert result.df_within == 9

    def test_main_effects(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        np.testing.assert_allclose(
            result.row('A').sum_sq, _between_ss(y, groups[:, 0]), rtol=1e-10,
        )
        np.testing.assert_allclose(
            result.row('B').sum_sq, _between_ss(y, groups[:, 1]), rtol=1e-10,
        )

    def test_error_is_within_cell(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        cells = groups[:, 0] * 10 + groups[:, 1]
        np.testing.assert_allclose(result.sse, _within_ss(y, cells), rtol=1e-10)

    def test_f_and_p_consistent(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        for row in result.terms:
            np.testing.assert_allclose(row.f_value, row.mean_sq / result.mse)
            np.testing.assert_allclose(
                row.p_value, stats.f.sf(row.f_value, row.df, result.df_within),
            )


class TestAdditivity:

    def test_balanced_threeway(self, threeway_balanced):
        y, groups = threeway_balanced
        result = anovan(y, groups)
        total = sum(r.sum_sq for r in result.table)
        np.testing.assert_allclose(total, result.sst, rtol=1e-9)
        np.testing.assert_allclose(
            result.sst, np.sum((y - y.mean()) ** 2), rtol=1e-9,
        )
        assert result.warnings == ()

    def test_balanced_threeway_df(self, threeway_balanced):
        y, groups = threeway_balanced
        result = anovan(y, groups)
        np.testing.assert_array_equal(result.df_between, [1, 2, 1, 2, 1, 2, 2])
        assert result.df_within == 48 - 12
        assert sum(result.df_between) + result.df_within == len(y) - 1

    def test_balanced_threeway_effects_detected(self, threeway_balanced):
        y, groups = threeway_balanced
        result = anovan(y, groups)
        assert result.row('A').p_value < 0.001
        assert result.row('B').p_value < 0.001

    def test_unbalanced_error_is_within_cell(self, twoway_unbalanced):
        y, groups = twoway_unbalanced
        result = anovan(y, groups)
        cells = groups[:, 0] * 10 + groups[:, 1]
        np.testing.assert_allclose(result.sse, _within_ss(y, cells), rtol=1e-9)
        assert result.df_within == len(y) - 6


class TestInvariance:

    def test_row_permutation(self, threeway_balanced, rng):
        y, groups = threeway_balanced
        perm = rng.permutation(len(y))
        base = anovan(y, groups)
        permuted = anovan(y[perm], groups[perm])
        np.testing.assert_allclose(permuted.p_values, base.p_values, rtol=1e-9)
        np.testing.assert_allclose(permuted.sse, base.sse, rtol=1e-9)

    def test_shift_invariance(self, twoway_replicated):
        y, groups = twoway_replicated
        base = anovan(y, groups)
        shifted = anovan(y + 1e6, groups)
        np.testing.assert_allclose(shifted.f_values, base.f_values, rtol=1e-6)
        np.testing.assert_allclose(shifted.grand_mean, base.grand_mean + 1e6)

    def test_shared_and_factor_label_spaces_agree(self, twoway_disjoint_labels):
        y, groups = twoway_disjoint_labels
        per_factor = anovan(y, groups)
        shared = anovan(y, groups, label_space='shared')
        assert per_factor.n_levels == (3, 4)
        assert shared.n_levels == (7, 7)
        np.testing.assert_allclose(shared.f_values, per_factor.f_values, rtol=1e-10)
        np.testing.assert_array_equal(shared.df_between, per_factor.df_between)
        assert shared.df_within == per_factor.df_within == 12
        assert shared.info['label_space'] == 'shared'


# ═══════════════════════════════════════════════════════════════════════
# Capped order and degenerate designs
# ═══════════════════════════════════════════════════════════════════════


class TestMaxOrder:

    def test_unreplicated_main_effects(self, twoway_unreplicated):
        y, groups = twoway_unreplicated
        result = anovan(y, groups, max_order=1)
        assert [r.term for r in result.terms] == ['A', 'B']
        assert result.df_within == 8
        assert result.max_order == 1
        assert result.info['pooled_terms'] == ('A x B',)

    def test_pooled_error_is_interaction_ss(self, twoway_unreplicated):
        y, groups = twoway_unreplicated
        result = anovan(y, groups, max_order=1)
        expected = (
            np.sum((y - y.mean()) ** 2)
            - _between_ss(y, groups[:, 0])
            - _between_ss(y, groups[:, 1])
        )
        np.testing.assert_allclose(result.sse, expected, rtol=1e-10)

    def test_capped_threeway(self, threeway_balanced):
        y, groups = threeway_balanced
        full = anovan(y, groups)
        capped = anovan(y, groups, max_order=2)
        assert len(capped.terms) == 6
        assert capped.df_within == full.df_within + 2
        np.testing.assert_allclose(
            capped.sse, full.sse + full.row('A x B x C').sum_sq, rtol=1e-10,
        )
        np.testing.assert_allclose(
            capped.row('A').sum_sq, full.row('A').sum_sq, rtol=1e-12,
        )

    @pytest.mark.parametrize("bad", [0, 3, 1.0])
    def test_invalid_max_order(self, twoway_replicated, bad):
        y, groups = twoway_replicated
        with pytest.raises(ValidationError, match="max_order"):
            anovan(y, groups, max_order=bad)


class TestDegenerate:

    def test_no_replication(self, twoway_unreplicated):
        y, groups = twoway_unreplicated
        with pytest.raises(DegenerateDesignError) as exc_info:
            anovan(y, groups)
        assert exc_info.value.df_error == 0
        assert exc_info.value.n_cells == 15

    def test_capacity(self, threeway_balanced):
        y, groups = threeway_balanced
        with pytest.raises(CapacityError, match="36 cells"):
            anovan(y, groups, max_cells=35)

    def test_zero_error_warns(self):
        y = np.array([1.0, 1.0, 2.0, 2.0])
        groups = np.array([1, 1, 2, 2])
        result = anovan(y, groups)
        assert result.mse == 0.0
        assert np.isinf(result.f_values[0])
        assert result.p_values[0] == 0.0
        assert any("zero" in w for w in result.warnings)

    def test_zero_error_and_zero_effect(self):
        y = np.ones(4)
        groups = np.array([1, 1, 2, 2])
        result = anovan(y, groups)
        assert result.mse == 0.0
        assert np.isnan(result.f_values[0])
        assert np.isnan(result.p_values[0])
        assert any("infinite or undefined" in w for w in result.warnings)

    @pytest.mark.parametrize("limit", [None, 0, 1.5])
    def test_invalid_max_cells(self, oneway_reference, limit):
        y, groups = oneway_reference
        with pytest.raises(ValidationError, match="max_cells"):
            anovan(y, groups, max_cells=limit)


class TestUnbalancedNegativeSS:
    """2 x 2 with cell sizes (10, 1, 1, 10) and an additive response."""

    @pytest.fixture
    def lopsided(self):
        cells = [(1, 1)] * 10 + [(1, 2), (2, 1)] + [(2, 2)] * 10
        groups = np.array(cells)
        noise = np.concatenate([np.tile([0.5, -0.5], 5), [0.0, 0.0], np.tile([0.5, -0.5], 5)])
        y = (groups[:, 0] - 1) + (groups[:, 1] - 1) + noise
        return y, groups

    def test_interaction_ss_negative(self, lopsided):
        y, groups = lopsided
        result = anovan(y, groups)
        np.testing.assert_allclose(result.row('A x B').sum_sq, -180 / 11, rtol=1e-10)
        np.testing.assert_allclose(result.row('A').sum_sq, 200 / 11, rtol=1e-10)

    def test_warning_recorded(self, lopsided):
        y, groups = lopsided
        result = anovan(y, groups)
        assert any(
            "negative sum of squares for A x B" in w for w in result.warnings
        )

    def test_negative_f_gives_unit_p(self, lopsided):
        y, groups = lopsided
        result = anovan(y, groups)
        row = result.row('A x B')
        assert row.f_value < 0
        assert row.p_value == 1.0

    def test_error_still_within_cell(self, lopsided):
        y, groups = lopsided
        result = anovan(y, groups)
        np.testing.assert_allclose(result.sse, 5.0, rtol=1e-10)
        assert result.df_within == 18


# ═══════════════════════════════════════════════════════════════════════
# p-values
# ═══════════════════════════════════════════════════════════════════════


class TestFPValue:

    def test_strictly_decreasing_in_f(self):
        f = np.array([0.1, 0.5, 1.0, 2.0, 4.0, 8.0])
        p = np.array([f_pvalue(v, 3, 20) for v in f])
        assert np.all(np.diff(p) < 0)

    def test_zero_f(self):
        assert f_pvalue(0.0, 2, 6) == 1.0

    def test_undefined(self):
        assert np.isnan(f_pvalue(float('nan'), 2, 6))
        assert np.isnan(f_pvalue(1.0, 0, 6))

    def test_larger_effect_smaller_p(self, oneway_reference):
        y, groups = oneway_reference
        weak = anovan(y, groups)
        strong = anovan(y + 3.0 * groups, groups)
        assert strong.f_values[0] > weak.f_values[0]
        assert strong.p_values[0] < weak.p_values[0]


# ═══════════════════════════════════════════════════════════════════════
# Input handling
# ═══════════════════════════════════════════════════════════════════════


class TestInputs:

    def test_mapping_groups(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, {'dose': groups[:, 0], 'sex': groups[:, 1]})
        assert result.factor_names == ('dose', 'sex')
        assert result.row('dose x sex').df == 4
        np.testing.assert_allclose(
            result.p_values, anovan(y, groups).p_values, rtol=1e-12,
        )

    def test_custom_names(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups, names=['row', 'col'])
        assert [r.term for r in result.terms] == ['row', 'col', 'row x col']

    def test_length_mismatch(self, twoway_replicated):
        y, groups = twoway_replicated
        with pytest.raises(DimensionError, match="y=17, groups=18"):
            anovan(y[:-1], groups)

    def test_matrix_response(self, twoway_replicated):
        _, groups = twoway_replicated
        with pytest.raises(DimensionError):
            anovan(np.zeros((9, 2)), groups)

    def test_nan_response(self, oneway_reference):
        y, groups = oneway_reference
        y = y.copy()
        y[0] = np.nan
        with pytest.raises(ValidationError, match="NaN"):
            anovan(y, groups)

    def test_nan_label(self, oneway_reference):
        y, groups = oneway_reference
        with pytest.raises(ValidationError, match="labels"):
            anovan(y, np.where(groups == 1, np.nan, groups))

    def test_single_level_factor(self, oneway_reference):
        y, _ = oneway_reference
        with pytest.raises(ValidationError, match="at least 2 levels"):
            anovan(y, np.ones(9))

    def test_wrong_number_of_names(self, twoway_replicated):
        y, groups = twoway_replicated
        with pytest.raises(ValidationError, match="expected 2 names"):
            anovan(y, groups, names=['only'])

    def test_unknown_label_space(self, oneway_reference):
        y, groups = oneway_reference
        with pytest.raises(ValidationError, match="label_space"):
            anovan(y, groups, label_space='global')


# ═══════════════════════════════════════════════════════════════════════
# Report and accessors
# ═══════════════════════════════════════════════════════════════════════


class TestSummary:

    def test_oneway_report(self, oneway_reference):
        y, groups = oneway_reference
        lines = anovan(y, groups).summary().split("\n")
        assert lines[0] == ""
        assert lines[1] == "1-way ANOVA Table (Factors A):"
        assert lines[3].startswith("Source of Variation")
        assert lines[4] == "*" * 69
        assert lines[5] == (
            "Error" + " " * 23 + "12.67" + " " * 5 + "6" + " " * 7 + "2.11"
        )
        assert lines[6] == (
            "Factor " + " " * 14 + "A" + " " * 7 + "4.22" + " " * 5 + "2"
            + " " * 7 + "2.11" + " " * 4 + "1.000" + "  0.421875"
        )
        assert lines[-1] == ""

    def test_factor_rows_by_order(self, threeway_balanced):
        y, groups = threeway_balanced
        text = anovan(y, groups).summary()
        assert "3-way ANOVA Table (Factors A,B,C):" in text
        assert text.index("Error") < text.index(" A ") < text.index("A x B x C")

    def test_display_prints(self, oneway_reference, capsys):
        y, groups = oneway_reference
        result = anovan(y, groups, display=True)
        captured = capsys.readouterr()
        assert captured.out == result.summary() + "\n"

    def test_silent_by_default(self, oneway_reference, capsys):
        y, groups = oneway_reference
        anovan(y, groups)
        assert capsys.readouterr().out == ""


class TestSolutionAccessors:

    def test_row_lookup(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        assert result.row('Error') is result.error
        with pytest.raises(KeyError, match="no term 'C'"):
            result.row('C')

    def test_metadata(self, twoway_replicated):
        y, groups = twoway_replicated
        result = anovan(y, groups)
        assert result.n_obs == 18
        assert result.n_levels == (3, 3)
        assert result.backend_name == 'cpu'
        assert result.info['n_factors'] == 2
        assert result.info['n_cells'] == 16
        assert result.info['pooled_terms'] == ()
        assert result.timing['total_seconds'] >= result.timing['aggregate_seconds']
        np.testing.assert_allclose(result.grand_mean, y.mean())

    def test_repr(self, twoway_replicated):
        y, groups = twoway_replicated
        text = repr(anovan(y, groups))
        assert "n=18" in text
        assert "'A x B'" in text
