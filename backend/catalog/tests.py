"""
Test suite for Catalog module
Tests: Product CRUD, low stock filter, stock deltas and line normalisation
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.catalog.services import adjust_stock, line_values
from backend.core.exceptions import PostingFailure
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_product_with_opening_stock(self):
        response = self.client.post('/api/products/', {
            'name': 'Potatoes (Saudi)',
            'unit': 'bag',
            'current_stock': '40.00',
            'reorder_level': '15.00',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['current_stock']), Decimal('40'))
        self.assertFalse(response.data['is_low_stock'])

    def test_create_product_defaults(self):
        response = self.client.post('/api/products/', {'name': 'Potatoes (Egypt)', 'unit': 'kg'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['current_stock']), Decimal('0'))
        self.assertEqual(Decimal(response.data['reorder_level']), Decimal('100'))

    def test_create_product_requires_unit(self):
        response = self.client.post('/api/products/', {'name': 'Potatoes'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('unit', response.data)

    def test_stock_not_editable_after_creation(self):
        """Stock moves only through postings"""
        product = TestDataFactory.create_product(current_stock=Decimal('10.00'))
        response = self.client.patch(f'/api/products/{product.id}/', {
            'current_stock': '999.00',
            'reorder_level': '5.00',
        })
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.current_stock, Decimal('10.00'))
        self.assertEqual(product.reorder_level, Decimal('5.00'))

    def test_low_stock_filter(self):
        low = TestDataFactory.create_product(current_stock=Decimal('10.00'), reorder_level=Decimal('15.00'))
        TestDataFactory.create_product(current_stock=Decimal('20.00'), reorder_level=Decimal('15.00'))
        response = self.client.get('/api/products/?low_stock=true')
        self.assertEqual([p['id'] for p in response.data], [low.id])

    def test_missing_product(self):
        response = self.client.get('/api/products/31337/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class StockServiceTests(TestCase):
    """Test stock delta helpers"""

    def setUp(self):
        self.product = TestDataFactory.create_product(current_stock=Decimal('50.00'))

    def test_adjust_stock_is_relative(self):
        adjust_stock(self.product.id, Decimal('25.50'))
        adjust_stock(self.product.id, Decimal('-5.50'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('70.00'))

    def test_adjust_stock_allows_negative(self):
        adjust_stock(self.product.id, Decimal('-60.00'))
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('-10.00'))

    def test_adjust_stock_missing_product(self):
        with self.assertRaises(PostingFailure):
            adjust_stock(123456, Decimal('1.00'))

    def test_line_values_defaults_total(self):
        product_id, quantity, unit_price, total_price = line_values({
            'product': self.product, 'quantity': '3', 'unit_price': '12.50',
        })
        self.assertEqual(product_id, self.product.id)
        self.assertEqual(quantity, Decimal('3'))
        self.assertEqual(total_price, Decimal('37.50'))

    def test_line_values_keeps_given_total(self):
        _, _, _, total_price = line_values({
            'product_id': self.product.id, 'quantity': '3', 'unit_price': '12.50', 'total_price': '35.00',
        })
        self.assertEqual(total_price, Decimal('35.00'))
