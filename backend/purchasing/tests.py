"""
Test suite for Purchasing module
Tests: Purchase posting, stock increases, expense booking and atomicity
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import PostingFailure
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.ledger.models import Transaction
from backend.purchasing.models import Purchase, PurchaseItem
from backend.purchasing.services import post_purchase


class PurchaseModelTests(TestCase):
    """Test Purchase and PurchaseItem model methods"""

    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product()

    def test_items_total(self):
        purchase = post_purchase({'supplier': self.supplier, 'total_cost': Decimal('1250.00')}, [
            {'product': self.product, 'quantity': Decimal('10.00'), 'unit_price': Decimal('100.00')},
            {'product': self.product, 'quantity': Decimal('5.00'), 'unit_price': Decimal('50.00')},
        ])
        self.assertEqual(purchase.get_items_total(), Decimal('1250.00'))
        self.assertEqual(purchase.items.first().total_price, Decimal('1000.00'))
        self.assertIn('Purchase-', str(purchase))


class PostPurchaseTests(TestCase):
    """Test the purchase posting workflow"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.supplier = TestDataFactory.create_supplier()
        self.potatoes = TestDataFactory.create_product(current_stock=Decimal('50.00'))
        self.onions = TestDataFactory.create_product(current_stock=Decimal('0.00'))

    def test_stock_increases_by_quantity(self):
        post_purchase({'supplier': self.supplier, 'total_cost': Decimal('900.00')}, [
            {'product': self.potatoes, 'quantity': Decimal('50.00'), 'unit_price': Decimal('12.00')},
            {'product': self.onions, 'quantity': Decimal('20.00'), 'unit_price': Decimal('15.00')},
        ], user=self.user)
        self.potatoes.refresh_from_db()
        self.onions.refresh_from_db()
        self.assertEqual(self.potatoes.current_stock, Decimal('100.00'))
        self.assertEqual(self.onions.current_stock, Decimal('20.00'))

    def test_books_single_expense_for_total_cost(self):
        """Transport and labor stay on the header, only total_cost is booked"""
        purchase = post_purchase({
            'supplier': self.supplier,
            'total_cost': Decimal('600.00'),
            'transport_cost': Decimal('80.00'),
            'labor_cost': Decimal('40.00'),
        }, [{'product': self.potatoes, 'quantity': Decimal('50.00'), 'unit_price': Decimal('12.00')}], user=self.user)

        txns = Transaction.objects.all()
        self.assertEqual(txns.count(), 1)
        txn = txns.get()
        self.assertEqual(txn.type, Transaction.TYPE_EXPENSE)
        self.assertEqual(txn.category, Transaction.CATEGORY_PURCHASE)
        self.assertEqual(txn.amount, Decimal('600.00'))
        self.assertEqual(txn.supplier, self.supplier)
        self.assertIsNone(txn.customer)
        self.assertEqual(txn.description, f"Purchase #{purchase.id}")
        self.assertEqual(purchase.created_by, self.user)

    def test_purchase_without_supplier(self):
        post_purchase({'total_cost': Decimal('100.00')}, [
            {'product_id': self.onions.id, 'quantity': Decimal('10.00'), 'unit_price': Decimal('10.00')},
        ])
        txn = Transaction.objects.get()
        self.assertIsNone(txn.subject)

    def test_writes_audit_trail(self):
        purchase = post_purchase({'supplier': self.supplier, 'total_cost': Decimal('120.00')}, [
            {'product': self.potatoes, 'quantity': Decimal('10.00'), 'unit_price': Decimal('12.00')},
        ], user=self.user)
        self.assertTrue(AuditLog.objects.filter(action='purchase_post', object_id=str(purchase.id)).exists())
        self.assertTrue(AuditLog.objects.filter(action='stock_purchase', object_id=str(self.potatoes.id)).exists())

    def test_failure_rolls_back_everything(self):
        """A missing product on the second line leaves no trace of the posting"""
        with self.assertRaises(PostingFailure):
            post_purchase({'supplier': self.supplier, 'total_cost': Decimal('700.00')}, [
                {'product_id': self.potatoes.id, 'quantity': Decimal('50.00'), 'unit_price': Decimal('12.00')},
                {'product_id': 999999, 'quantity': Decimal('5.00'), 'unit_price': Decimal('20.00')},
            ], user=self.user)

        self.potatoes.refresh_from_db()
        self.assertEqual(self.potatoes.current_stock, Decimal('50.00'))
        self.assertEqual(Purchase.objects.count(), 0)
        self.assertEqual(PurchaseItem.objects.count(), 0)
        self.assertEqual(Transaction.objects.count(), 0)


class PurchaseAPITests(TestCase):
    """Test purchase endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(current_stock=Decimal('50.00'))

    def _payload(self, **overrides):
        payload = {
            'supplier': self.supplier.id,
            'total_cost': '600.00',
            'transport_cost': '50.00',
            'items': [{'product': self.product.id, 'quantity': '50.00', 'unit_price': '12.00'}],
        }
        payload.update(overrides)
        return payload

    def test_create_purchase(self):
        response = self.client.post('/api/purchases/', self._payload())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(response.data['items']), 1)
        self.assertEqual(Decimal(response.data['items'][0]['total_price']), Decimal('600'))
        self.assertEqual(Decimal(response.data['labor_cost']), Decimal('0'))
        self.assertEqual(response.data['supplier_name'], self.supplier.name)
        self.assertEqual(response.data['created_by'], self.user.id)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('100.00'))

    def test_missing_total_cost(self):
        payload = self._payload()
        payload.pop('total_cost')
        response = self.client.post('/api/purchases/', payload)
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('total_cost', response.data)

    def test_items_required(self):
        response = self.client.post('/api/purchases/', self._payload(items=[]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('items', response.data)
        self.assertEqual(Purchase.objects.count(), 0)

    def test_zero_quantity_rejected(self):
        response = self.client.post('/api/purchases/', self._payload(
            items=[{'product': self.product.id, 'quantity': '0', 'unit_price': '12.00'}]
        ))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_unknown_product_rejected_without_changes(self):
        response = self.client.post('/api/purchases/', self._payload(items=[
            {'product': self.product.id, 'quantity': '10.00', 'unit_price': '12.00'},
            {'product': 999999, 'quantity': '10.00', 'unit_price': '12.00'},
        ]))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('50.00'))
        self.assertEqual(Transaction.objects.count(), 0)

    def test_list_newest_first(self):
        first = self.client.post('/api/purchases/', self._payload()).data
        second = self.client.post('/api/purchases/', self._payload()).data
        response = self.client.get('/api/purchases/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['id'] for p in response.data], [second['id'], first['id']])

    def test_filter_by_supplier(self):
        other = TestDataFactory.create_supplier()
        self.client.post('/api/purchases/', self._payload())
        self.client.post('/api/purchases/', self._payload(supplier=other.id))
        response = self.client.get(f'/api/purchases/?supplier={other.id}')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['supplier'], other.id)

    def test_list_date_range_is_inclusive(self):
        for day in ('01', '02', '03', '04'):
            self.client.post('/api/purchases/', self._payload(date=f'2024-03-{day}T12:00:00+03:00', notes=day))

        response = self.client.get('/api/purchases/?date_from=2024-03-02&date_to=2024-03-03')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([p['notes'] for p in response.data], ['03', '02'])

        response = self.client.get('/api/purchases/?date_from=2024-03-04')
        self.assertEqual([p['notes'] for p in response.data], ['04'])

    def test_list_invalid_date_rejected(self):
        response = self.client.get('/api/purchases/?date_to=2024-13-40')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date_to', response.data)

    def test_detail_not_found_message(self):
        response = self.client.get('/api/purchases/999999/')
        self.assertEqual(response.data, {'message': 'Purchase not found'})

    def test_detail_and_not_found(self):
        created = self.client.post('/api/purchases/', self._payload()).data
        response = self.client.get(f"/api/purchases/{created['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        missing = self.client.get('/api/purchases/999999/')
        self.assertEqual(missing.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('message', missing.data)

    def test_purchases_are_immutable(self):
        created = self.client.post('/api/purchases/', self._payload()).data
        response = self.client.put(f"/api/purchases/{created['id']}/", self._payload())
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)
