"""
tests/test_product_copy_service.py

Manual copies through ProductCopyService.copy_with_store.
"""

from __future__ import annotations

import unittest
import uuid

from app.errors import ProductNotFoundError
from app.services.product_copy_service import ProductCopyService
from tests.conftest import InMemoryProductStore, make_record


class TestProductCopyService(unittest.TestCase):
    def setUp(self) -> None:
        self.store = InMemoryProductStore()
        self.service = ProductCopyService()
        self.original = self.store.insert(
            make_record(
                "Cica Cream",
                source_name="VT Cosmetics",
                price=3300,
                sale_price=2970,
                asin="B0CICA",
                image_url="https://cdn.example/cica.jpg",
                source_url="https://vtcosmetics.jp/product/detail.html?product_no=1",
                is_favorite=True,
                memo="check weekly",
            )
        )

    def test_copy_detaches_asin_and_points_to_original(self) -> None:
        source, copied = self.service.copy_with_store(store=self.store, product_id=self.original.id)

        self.assertEqual(source, self.original)
        self.assertNotEqual(copied.id, self.original.id)
        self.assertIsNone(copied.asin)
        self.assertEqual(copied.original_product_id, self.original.id)
        self.assertEqual((copied.name, copied.price, copied.sale_price), ("Cica Cream", 3300, 2970))
        self.assertEqual(copied.source_url, self.original.source_url)
        self.assertFalse(copied.is_favorite)
        self.assertIsNone(copied.memo)
        self.assertTrue(copied.is_manual_copy)

    def test_copy_of_copy_points_to_root(self) -> None:
        _, first_copy = self.service.copy_with_store(store=self.store, product_id=self.original.id)
        _, second_copy = self.service.copy_with_store(store=self.store, product_id=first_copy.id)

        self.assertEqual(second_copy.original_product_id, self.original.id)
        self.assertEqual(len(self.store.records), 3)

    def test_unknown_product_raises(self) -> None:
        with self.assertRaises(ProductNotFoundError):
            self.service.copy_with_store(store=self.store, product_id=uuid.uuid4())
