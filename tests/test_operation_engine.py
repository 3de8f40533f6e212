"""
Unit tests for the preview operation engine.
"""

import unittest

from cleanview.errors import UnknownOperationError
from cleanview.models import NOT_AVAILABLE, RowStatus
from cleanview.operation_engine import (
    OperationEngine,
    OperationType,
    apply_operation,
    column_statistic,
    operation_label,
    round_half_up,
)
from tests.factories import employees, make_snapshot


class TestColumnStatistic(unittest.TestCase):
    """Imputation statistics."""

    def test_mean_rounds_to_integer(self):
        self.assertEqual(column_statistic([10, None, 30], 'mean'), 20)
        self.assertEqual(column_statistic([10, 20, 30, 41], 'mean'), 25)

    def test_mean_rounds_half_up(self):
        self.assertEqual(column_statistic([2, 3], 'mean'), 3)

    def test_median_even_count_averages_then_rounds(self):
        self.assertEqual(column_statistic([4, 1, 3, 2], 'median'), 3)

    def test_median_odd_count_takes_middle(self):
        self.assertEqual(column_statistic([5, None, 1, 3], 'median'), 3)
        self.assertEqual(column_statistic([1.5, 9.25, 4.75], 'median'), 4.75)

    def test_mode_prefers_first_seen_on_ties(self):
        self.assertEqual(column_statistic([1, 2, 2, 3, 3], 'mode'), 2)
        self.assertEqual(column_statistic([7, 3, 3, 7], 'mode'), 7)

    def test_ignores_non_numbers(self):
        values = ['x', True, None, NOT_AVAILABLE, 4, 6]
        self.assertEqual(column_statistic(values, 'mean'), 5)

    def test_no_eligible_values_yields_zero(self):
        for method in ('mean', 'median', 'mode'):
            self.assertEqual(column_statistic([None, 'a'], method), 0)
            self.assertEqual(column_statistic([], method), 0)

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            column_statistic([1, 2], 'average')


class TestRounding(unittest.TestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(-2.5), -2)
        self.assertEqual(round_half_up(1.4), 1)
        self.assertEqual(round_half_up(1.2247, 2), 1.22)
        self.assertEqual(round_half_up(-1.2247, 2), -1.22)


class TestOperationEngine(unittest.TestCase):
    """Operations applied to a preview snapshot."""

    def setUp(self):
        self.engine = OperationEngine()
        self.numeric = frozenset({'age', 'salary'})
        self.snapshot = make_snapshot(employees(), self.numeric)

    def test_replace_nulls(self):
        result, label = self.engine.apply(self.snapshot, 'replace_nulls', self.numeric)

        self.assertEqual(label, "Reemplazar NULL con N/A")
        self.assertEqual(result.total_nulls, 0)
        for info in result.columns_info.values():
            self.assertEqual(info.nulls, 0)
            self.assertEqual(info.null_percentage, 0)

        luis = result.preview_rows[1]
        self.assertIs(luis.get('age'), NOT_AVAILABLE)
        self.assertEqual(luis.status, RowStatus.INACTIVE)
        self.assertIs(result.preview_rows[2].get('city'), NOT_AVAILABLE)
        self.assertEqual(luis.to_dict()['age'], 'N/A')

    def test_replace_nulls_is_idempotent(self):
        once, _ = self.engine.apply(self.snapshot, OperationType.REPLACE_NULLS, self.numeric)
        twice, _ = self.engine.apply(once, OperationType.REPLACE_NULLS, self.numeric)
        self.assertEqual(once, twice)
        self.assertEqual(twice.total_nulls, 0)

    def test_replace_nulls_shares_untouched_rows(self):
        result, _ = self.engine.apply(self.snapshot, 'replace_nulls', self.numeric)
        self.assertIs(result.preview_rows[0], self.snapshot.preview_rows[0])
        self.assertIsNot(result.preview_rows[1], self.snapshot.preview_rows[1])

    def test_impute_mean(self):
        result, label = self.engine.apply(self.snapshot, 'impute', self.numeric, {'method': 'mean'})

        self.assertEqual(label, "Imputar con mean")
        # age: mean(25, 40, 31) = 32; salary: mean(5000, 5000, 7000) = 5666.67
        self.assertEqual(result.preview_rows[1].get('age'), 32)
        self.assertEqual(result.preview_rows[2].get('salary'), 5667)
        self.assertTrue(all(row.status == RowStatus.ACTIVE for row in result.preview_rows))

    def test_impute_updates_only_numeric_stats(self):
        result, _ = self.engine.apply(self.snapshot, 'impute', self.numeric, {'method': 'median'})

        self.assertEqual(result.columns_info['age'].nulls, 0)
        self.assertEqual(result.columns_info['salary'].nulls, 0)
        self.assertEqual(result.columns_info['city'].nulls, 1)
        self.assertEqual(result.total_nulls, 1)
        self.assertIsNone(result.preview_rows[2].get('city'))

    def test_impute_defaults_to_mean(self):
        result, label = self.engine.apply(self.snapshot, 'impute', self.numeric)
        self.assertEqual(label, "Imputar con mean")
        self.assertEqual(result.preview_rows[1].get('age'), 32)

    def test_impute_single_null(self):
        snapshot = make_snapshot([{'v': 10}, {'v': None}, {'v': 30}], {'v'})
        result, _ = apply_operation(snapshot, 'impute', {'v'}, {'method': 'mean'})
        self.assertEqual([row.get('v') for row in result.preview_rows], [10, 20, 30])

    def test_impute_leaves_placeholder_cells(self):
        replaced, _ = self.engine.apply(self.snapshot, 'replace_nulls', self.numeric)
        result, _ = self.engine.apply(replaced, 'impute', self.numeric, {'method': 'mean'})
        self.assertIs(result.preview_rows[1].get('age'), NOT_AVAILABLE)
        self.assertEqual(result.preview_rows[1].status, RowStatus.INACTIVE)

    def test_normalize(self):
        snapshot = make_snapshot([{'v': 10, 'c': 'a'}, {'v': 20, 'c': 'b'}, {'v': 30, 'c': 'a'}, {'v': None, 'c': 'b'}], {'v'})
        result, label = self.engine.apply(snapshot, 'normalize', {'v'})

        self.assertEqual(label, "Normalizar con StandardScaler")
        self.assertEqual([row.get('v') for row in result.preview_rows], [-1.22, 0.0, 1.22, None])
        self.assertEqual([row.get('c') for row in result.preview_rows], ['a', 'b', 'a', 'b'])
        self.assertEqual(result.columns_info, snapshot.columns_info)

    def test_normalize_constant_column(self):
        snapshot = make_snapshot([{'v': 5}, {'v': 5}, {'v': 5}], {'v'})
        result, _ = self.engine.apply(snapshot, 'normalize', {'v'})
        self.assertEqual([row.get('v') for row in result.preview_rows], [0.0, 0.0, 0.0])

    def test_normalize_without_numeric_values_is_noop(self):
        snapshot = make_snapshot([{'v': None}, {'v': None}], {'v'})
        result, _ = self.engine.apply(snapshot, 'normalize', {'v'})
        self.assertEqual(result.column_values('v'), [None, None])
        self.assertEqual(result.columns_info, snapshot.columns_info)

    def test_encode(self):
        snapshot = make_snapshot(
            [{'color': 'red'}, {'color': 'blue'}, {'color': 'red'}, {'color': 'green'}], set()
        )
        result, label = self.engine.apply(snapshot, 'encode', frozenset())

        self.assertEqual(label, "Codificar variables categóricas")
        self.assertEqual([row.get('color') for row in result.preview_rows], [0, 1, 0, 2])

    def test_encode_skips_numeric_and_missing(self):
        result, _ = self.engine.apply(self.snapshot, 'encode', self.numeric)

        self.assertEqual([row.get('name') for row in result.preview_rows], [0, 1, 2, 3])
        self.assertEqual([row.get('city') for row in result.preview_rows], [0, 1, None, 0])
        self.assertEqual([row.get('age') for row in result.preview_rows], [25, None, 40, 31])

    def test_empty_snapshot(self):
        snapshot = make_snapshot([], set())
        for op in OperationType:
            result, _ = self.engine.apply(snapshot, op, frozenset())
            self.assertEqual(result.preview_rows, ())

    def test_original_is_not_modified(self):
        before = self.snapshot.to_dict()
        for op in ('replace_nulls', 'impute', 'normalize', 'encode'):
            self.engine.apply(self.snapshot, op, self.numeric)
        self.assertEqual(self.snapshot.to_dict(), before)

    def test_unknown_operation(self):
        with self.assertRaises(UnknownOperationError):
            self.engine.apply(self.snapshot, 'drop_duplicates', self.numeric)

    def test_unknown_method(self):
        with self.assertRaises(ValueError):
            self.engine.apply(self.snapshot, 'impute', self.numeric, {'method': 'max'})

    def test_labels(self):
        self.assertEqual(operation_label(OperationType.IMPUTE, {'method': 'mode'}), "Imputar con mode")
        self.assertEqual(operation_label(OperationType.ENCODE), "Codificar variables categóricas")


if __name__ == '__main__':
    unittest.main()
