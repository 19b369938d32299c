"""
Test suite for Ledger module
Tests: Transaction recording, subject resolution, debt payments and side effect scoping
"""
from datetime import datetime
from decimal import Decimal
from django.db import IntegrityError, transaction
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.ledger.models import Transaction
from backend.ledger.services import create_transaction, post_debt_payment, record_transaction


class TransactionModelTests(TestCase):
    """Test the tagged subject"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer()
        self.supplier = TestDataFactory.create_supplier()

    def test_subject_variants(self):
        to_customer = Transaction.objects.create(type='payment_in', category='sale', amount=Decimal('5.00'),
                                                 customer=self.customer)
        to_supplier = Transaction.objects.create(type='expense', category='purchase', amount=Decimal('5.00'),
                                                 supplier=self.supplier)
        standalone = Transaction.objects.create(type='expense', category='diesel', amount=Decimal('5.00'))

        self.assertEqual(to_customer.subject, ('customer', self.customer.id))
        self.assertEqual(to_supplier.subject_type, 'supplier')
        self.assertEqual(to_supplier.related_id, self.supplier.id)
        self.assertIsNone(standalone.subject)
        self.assertIsNone(standalone.related_id)

    def test_both_subjects_rejected_by_database(self):
        with self.assertRaises(IntegrityError):
            with transaction.atomic():
                Transaction.objects.create(type='payment_in', category='sale', amount=Decimal('5.00'),
                                           customer=self.customer, supplier=self.supplier)


class TransactionServiceTests(TestCase):
    """Test record/debt payment workflows"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.customer = TestDataFactory.create_customer(total_debt=Decimal('200.00'))

    def test_record_transaction_has_no_side_effects(self):
        record_transaction({
            'type': Transaction.TYPE_PAYMENT_IN,
            'category': Transaction.CATEGORY_DEBT_PAYMENT,
            'amount': Decimal('50.00'),
            'customer': self.customer,
        }, user=self.user)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('200.00'))

    def test_post_debt_payment(self):
        txn = post_debt_payment(self.customer, Decimal('60.00'), description='Cash at depot', user=self.user)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('140.00'))
        self.assertIsNotNone(self.customer.last_payment_date)
        self.assertTrue(txn.is_debt_payment)
        self.assertEqual(txn.created_by, self.user)

    def test_overpayment_goes_negative(self):
        post_debt_payment(self.customer, Decimal('250.00'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('-50.00'))

    def test_create_transaction_dispatch(self):
        """Only payment_in/debt_payment with a customer settles debt"""
        create_transaction({
            'type': Transaction.TYPE_PAYMENT_IN,
            'category': Transaction.CATEGORY_SALE,
            'amount': Decimal('70.00'),
            'customer': self.customer,
        })
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('200.00'))

        create_transaction({
            'type': Transaction.TYPE_PAYMENT_IN,
            'category': Transaction.CATEGORY_DEBT_PAYMENT,
            'amount': Decimal('70.00'),
            'customer': self.customer,
        })
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('130.00'))

    def test_debt_payment_without_customer_is_recorded_only(self):
        txn = create_transaction({
            'type': Transaction.TYPE_PAYMENT_IN,
            'category': Transaction.CATEGORY_DEBT_PAYMENT,
            'amount': Decimal('70.00'),
        })
        self.assertIsNone(txn.customer)
        self.assertFalse(txn.is_debt_payment)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('200.00'))


class TransactionAPITests(TestCase):
    """Test transaction endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(total_debt=Decimal('300.00'))
        self.supplier = TestDataFactory.create_supplier()

    def test_sale_receipt_does_not_touch_debt(self):
        response = self.client.post('/api/transactions/', {
            'type': 'payment_in', 'category': 'sale', 'amount': '100.00', 'customer': self.customer.id,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('300.00'))

    def test_debt_payment_via_related_id(self):
        response = self.client.post('/api/transactions/', {
            'type': 'payment_in', 'category': 'debt_payment', 'amount': '120.00', 'related_id': self.customer.id,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['subject_type'], 'customer')
        self.assertEqual(response.data['related_id'], self.customer.id)
        self.assertEqual(response.data['created_by_username'], self.user.username)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('180.00'))
        self.assertIsNotNone(self.customer.last_payment_date)

    def test_expense_related_id_is_supplier(self):
        response = self.client.post('/api/transactions/', {
            'type': 'expense', 'category': 'transport', 'amount': '45.00', 'related_id': self.supplier.id,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['supplier'], self.supplier.id)
        self.assertIsNone(response.data['customer'])

    def test_standalone_expense(self):
        response = self.client.post('/api/transactions/', {
            'type': 'expense', 'category': 'diesel', 'amount': '80.00', 'description': 'Truck fuel',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(response.data['subject_type'])

    def test_unknown_related_id(self):
        response = self.client.post('/api/transactions/', {
            'type': 'payment_in', 'category': 'debt_payment', 'amount': '10.00', 'related_id': 999999,
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('related_id', response.data)

    def test_customer_and_supplier_rejected(self):
        response = self.client.post('/api/transactions/', {
            'type': 'payment_in', 'category': 'sale', 'amount': '10.00',
            'customer': self.customer.id, 'supplier': self.supplier.id,
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_related_id_must_match_subject(self):
        other = TestDataFactory.create_customer(name='Other Grocer')
        response = self.client.post('/api/transactions/', {
            'type': 'payment_in', 'category': 'debt_payment', 'amount': '10.00',
            'customer': self.customer.id, 'related_id': other.id,
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('related_id', response.data)
        self.assertEqual(Transaction.objects.count(), 0)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('300.00'))

    def test_related_id_matching_subject_accepted(self):
        response = self.client.post('/api/transactions/', {
            'type': 'expense', 'category': 'transport', 'amount': '12.00',
            'supplier': self.supplier.id, 'related_id': self.supplier.id,
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['supplier'], self.supplier.id)

    def test_amount_must_be_positive(self):
        response = self.client.post('/api/transactions/', {'type': 'expense', 'category': 'diesel', 'amount': '0'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('amount', response.data)

    def test_invalid_type(self):
        response = self.client.post('/api/transactions/', {'type': 'refund', 'category': 'x', 'amount': '5.00'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('type', response.data)

    def test_list_filters_newest_first(self):
        first = self.client.post('/api/transactions/', {'type': 'expense', 'category': 'diesel', 'amount': '10.00'}).data
        self.client.post('/api/transactions/', {'type': 'payment_out', 'category': 'wages', 'amount': '20.00'})
        third = self.client.post('/api/transactions/', {'type': 'expense', 'category': 'rent', 'amount': '30.00'}).data

        response = self.client.get('/api/transactions/?type=expense')
        self.assertEqual([t['id'] for t in response.data], [third['id'], first['id']])
        response = self.client.get('/api/transactions/?category=wages')
        self.assertEqual(len(response.data), 1)

    def test_list_date_range_is_inclusive(self):
        for day, amount in [(1, '10.00'), (2, '20.00'), (3, '30.00'), (4, '40.00')]:
            record_transaction({
                'type': Transaction.TYPE_EXPENSE, 'category': 'diesel', 'amount': Decimal(amount),
                'date': timezone.make_aware(datetime(2024, 3, day, 12, 0)),
            })

        response = self.client.get('/api/transactions/?date_from=2024-03-02&date_to=2024-03-03')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([Decimal(t['amount']) for t in response.data], [Decimal('30.00'), Decimal('20.00')])

        response = self.client.get('/api/transactions/?date_from=2024-03-04')
        self.assertEqual(len(response.data), 1)

    def test_list_invalid_date_rejected(self):
        response = self.client.get('/api/transactions/?date_to=notadate')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('date_to', response.data)

    def test_detail(self):
        created = self.client.post('/api/transactions/', {'type': 'expense', 'category': 'diesel', 'amount': '10.00'}).data
        response = self.client.get(f"/api/transactions/{created['id']}/")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['amount']), Decimal('10'))
        self.assertEqual(self.client.get('/api/transactions/999999/').status_code, status.HTTP_404_NOT_FOUND)


class CustomerPaymentAPITests(TestCase):
    """Test the explicit debt payment endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(total_debt=Decimal('200.00'))

    def test_receive_payment(self):
        response = self.client.post(f'/api/customers/{self.customer.id}/payments/', {'amount': '200.00'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['type'], 'payment_in')
        self.assertEqual(response.data['category'], 'debt_payment')
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('0.00'))

    def test_payment_for_missing_customer(self):
        response = self.client.post('/api/customers/999999/payments/', {'amount': '10.00'})
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(Transaction.objects.count(), 0)

    def test_payment_amount_required(self):
        response = self.client.post(f'/api/customers/{self.customer.id}/payments/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('200.00'))
