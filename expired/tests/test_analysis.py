from datetime import date, timedelta
import unittest

from expired.domain.Product import Product
from expired.logic.products.analysis import compute_expiring_soon, count_by_status

TODAY = date(2026, 3, 10)


class TestAnalysis(unittest.TestCase):

    def setUp(self):
        self.products = [
            Product("Milk", TODAY - timedelta(days=2)),
            Product("Yogurt", TODAY + timedelta(days=2)),
            Product("Apples", TODAY + timedelta(days=2)),
            Product("Cheddar", TODAY + timedelta(days=30)),
            Product("Salt"),
        ]

    def test_count_by_status(self):
        counts = count_by_status(self.products, today=TODAY, window=5)
        self.assertEqual(counts, {"All": 5, "Expired": 1, "Expiring Soon": 2, "Good": 2})

    def test_compute_expiring_soon(self):
        rows = compute_expiring_soon(self.products, today=TODAY, window=5)
        self.assertEqual([r["title"] for r in rows], ["Milk", "Apples", "Yogurt"])
        self.assertEqual(rows[0]["days_left"], -2)
        self.assertEqual(rows[1]["exp"], "12-03-2026")
