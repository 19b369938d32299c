"""
Test suite for Sales module
Tests: Sale posting, stock decreases, customer debt, cash receipts and atomicity
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import PostingFailure
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.ledger.models import Transaction
from backend.purchasing.services import post_purchase
from backend.sales.models import Sale, SaleItem
from backend.sales.services import post_sale


class PostSaleTests(TestCase):
    """Test the sale posting workflow"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.customer = TestDataFactory.create_customer(total_debt=Decimal('25.00'))
        self.product = TestDataFactory.create_product(current_stock=Decimal('100.00'))

    def _line(self, quantity='10.00', unit_price='10.00', product=None):
        return {'product': product or self.product, 'quantity': Decimal(quantity), 'unit_price': Decimal(unit_price)}

    def test_partial_payment_increases_debt_by_remainder(self):
        sale = post_sale({
            'customer': self.customer,
            'total_amount': Decimal('100.00'),
            'paid_amount': Decimal('40.00'),
            'payment_status': Sale.STATUS_PARTIAL,
        }, [self._line()], user=self.user)

        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('85.00'))
        self.assertEqual(sale.due_amount, Decimal('60.00'))

        txn = Transaction.objects.get()
        self.assertEqual(txn.type, Transaction.TYPE_PAYMENT_IN)
        self.assertEqual(txn.category, Transaction.CATEGORY_SALE)
        self.assertEqual(txn.amount, Decimal('40.00'))
        self.assertEqual(txn.customer, self.customer)
        self.assertEqual(txn.description, f"Sale #{sale.id}")
        self.assertTrue(AuditLog.objects.filter(action='debt_increase', object_id=str(self.customer.id)).exists())

    def test_stock_decreases_by_quantity(self):
        post_sale({
            'customer': self.customer,
            'total_amount': Decimal('300.00'),
            'paid_amount': Decimal('300.00'),
            'payment_status': Sale.STATUS_PAID,
        }, [self._line('30.00')])
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('70.00'))

    def test_fully_paid_sale_leaves_debt(self):
        post_sale({
            'customer': self.customer,
            'total_amount': Decimal('100.00'),
            'paid_amount': Decimal('100.00'),
            'payment_status': Sale.STATUS_PAID,
        }, [self._line()])
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('25.00'))

    def test_overpayment_leaves_debt(self):
        """Negative remainder is not credited to the customer"""
        post_sale({
            'customer': self.customer,
            'total_amount': Decimal('100.00'),
            'paid_amount': Decimal('120.00'),
            'payment_status': Sale.STATUS_PAID,
        }, [self._line()])
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('25.00'))
        self.assertEqual(Transaction.objects.get().amount, Decimal('120.00'))

    def test_credit_sale_records_no_cash(self):
        post_sale({
            'customer': self.customer,
            'total_amount': Decimal('100.00'),
            'paid_amount': Decimal('0.00'),
            'payment_status': Sale.STATUS_CREDIT,
        }, [self._line()])
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('125.00'))
        self.assertEqual(Transaction.objects.count(), 0)

    def test_walk_in_sale_has_no_debt(self):
        post_sale({
            'total_amount': Decimal('100.00'),
            'paid_amount': Decimal('30.00'),
            'payment_status': Sale.STATUS_PARTIAL,
        }, [self._line()])
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('25.00'))
        self.assertIsNone(Transaction.objects.get().customer)

    def test_payment_status_is_stored_as_given(self):
        sale = post_sale({
            'customer': self.customer,
            'total_amount': Decimal('100.00'),
            'paid_amount': Decimal('100.00'),
            'payment_status': Sale.STATUS_CREDIT,
        }, [self._line()])
        self.assertEqual(sale.payment_status, Sale.STATUS_CREDIT)

    def test_overselling_allowed(self):
        post_sale({
            'total_amount': Decimal('1500.00'),
            'paid_amount': Decimal('1500.00'),
            'payment_status': Sale.STATUS_PAID,
        }, [self._line('150.00')])
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('-50.00'))

    def test_purchase_then_equal_sale_restores_stock(self):
        post_purchase({'total_cost': Decimal('240.00')}, [self._line('20.00', '12.00')])
        post_sale({
            'total_amount': Decimal('300.00'),
            'paid_amount': Decimal('300.00'),
            'payment_status': Sale.STATUS_PAID,
        }, [self._line('20.00', '15.00')])
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('100.00'))

    def test_failure_rolls_back_everything(self):
        """A missing product on the second line leaves stock, debt and ledger untouched"""
        with self.assertRaises(PostingFailure):
            post_sale({
                'customer': self.customer,
                'total_amount': Decimal('200.00'),
                'paid_amount': Decimal('50.00'),
                'payment_status': Sale.STATUS_PARTIAL,
            }, [
                {'product_id': self.product.id, 'quantity': Decimal('10.00'), 'unit_price': Decimal('10.00')},
                {'product_id': 999999, 'quantity': Decimal('10.00'), 'unit_price': Decimal('10.00')},
            ], user=self.user)

        self.product.refresh_from_db()
        self.customer.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('100.00'))
        self.assertEqual(self.customer.total_debt, Decimal('25.00'))
        self.assertEqual(Sale.objects.count(), 0)
        self.assertEqual(SaleItem.objects.count(), 0)
        self.assertEqual(Transaction.objects.count(), 0)


class SaleAPITests(TestCase):
    """Test sale endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer()
        self.product = TestDataFactory.create_product(current_stock=Decimal('100.00'))

    def _payload(self, **overrides):
        payload = {
            'customer': self.customer.id,
            'total_amount': '100.00',
            'paid_amount': '40.00',
            'payment_status': 'partial',
            'items': [{'product': self.product.id, 'quantity': '10.00', 'unit_price': '10.00'}],
        }
        payload.update(overrides)
        return payload

    def test_create_sale(self):
        response = self.client.post('/api/sales/', self._payload())
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['due_amount']), Decimal('60'))
        self.assertEqual(response.data['customer_name'], self.customer.name)
        self.assertEqual(len(response.data['items']), 1)
        self.customer.refresh_from_db()
        self.product.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('60.00'))
        self.assertEqual(self.product.current_stock, Decimal('90.00'))

    def test_paid_amount_defaults_to_zero(self):
        payload = self._payload(payment_status='credit')
        payload.pop('paid_amount')
        response = self.client.post('/api/sales/', payload)
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('100.00'))

    def test_invalid_payment_status(self):
        response = self.client.post('/api/sales/', self._payload(payment_status='later'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('payment_status', response.data)

    def test_negative_amount_rejected(self):
        response = self.client.post('/api/sales/', self._payload(paid_amount='-5.00'))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('paid_amount', response.data)

    def test_unknown_customer_rejected(self):
        response = self.client.post('/api/sales/', self._payload(customer=999999))
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.product.refresh_from_db()
        self.assertEqual(self.product.current_stock, Decimal('100.00'))

    def test_list_filters(self):
        self.client.post('/api/sales/', self._payload())
        self.client.post('/api/sales/', self._payload(paid_amount='100.00', payment_status='paid'))
        response = self.client.get('/api/sales/?payment_status=paid')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['payment_status'], 'paid')
        response = self.client.get(f'/api/sales/?customer={self.customer.id}')
        self.assertEqual(len(response.data), 2)

    def test_list_date_range_is_inclusive(self):
        for day in ('01', '02', '03', '04'):
            self.client.post('/api/sales/', self._payload(date=f'2024-03-{day}T12:00:00+03:00', notes=day))

        response = self.client.get('/api/sales/?date_from=2024-03-02&date_to=2024-03-03')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['notes'] for s in response.data], ['03', '02'])

        response = self.client.get('/api/sales/?date_to=2024-03-01')
        self.assertEqual([s['notes'] for s in response.data], ['01'])

    def test_list_invalid_date_rejected(self):
        self.client.post('/api/sales/', self._payload())
        response = self.client.get('/api/sales/?date_from=notadate')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date_from', response.data)

    def test_list_newest_first(self):
        first = self.client.post('/api/sales/', self._payload()).data
        second = self.client.post('/api/sales/', self._payload()).data
        response = self.client.get('/api/sales/')
        self.assertEqual([s['id'] for s in response.data], [second['id'], first['id']])

    def test_detail_not_found(self):
        response = self.client.get('/api/sales/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertIn('message', response.data)
