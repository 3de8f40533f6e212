"""
Unit tests for Paginator.
"""

import unittest

from cleanview.pagination import Paginator


class TestPaginator(unittest.TestCase):

    def setUp(self):
        self.paginator = Paginator(page_size=5)
        self.rows = list(range(12))

    def test_pages(self):
        self.assertEqual(self.paginator.page_count(len(self.rows)), 3)
        self.assertEqual(self.paginator.page(self.rows, 1), [0, 1, 2, 3, 4])
        self.assertEqual(self.paginator.page(self.rows, 3), [10, 11])

    def test_out_of_range_pages_are_clamped(self):
        self.assertEqual(self.paginator.page(self.rows, 4), [10, 11])
        self.assertEqual(self.paginator.page(self.rows, 0), [0, 1, 2, 3, 4])
        self.assertEqual(self.paginator.clamp(-3, 12), 1)

    def test_empty_has_one_page(self):
        self.assertEqual(self.paginator.page_count(0), 1)
        self.assertEqual(self.paginator.page([], 1), [])
        self.assertEqual(self.paginator.bounds(2, 0), (0, 0))

    def test_invalid_page_size(self):
        with self.assertRaises(ValueError):
            Paginator(page_size=0)


if __name__ == '__main__':
    unittest.main()
