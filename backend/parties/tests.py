"""
Test suite for Parties module
Tests: Supplier and Customer CRUD, balance endpoint, debt adjustments
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.exceptions import PostingFailure
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.parties.models import Customer, Supplier
from backend.parties.services import adjust_customer_debt


class SupplierAPITests(TestCase):
    """Test supplier endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_supplier(self):
        response = self.client.post('/api/suppliers/', {'name': 'Hail Farms', 'phone': '0500000001'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['name'], 'Hail Farms')
        self.assertIn('created_at', response.data)

    def test_create_supplier_requires_name(self):
        response = self.client.post('/api/suppliers/', {'phone': '0500000001'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)
        self.assertEqual(Supplier.objects.count(), 0)

    def test_list_suppliers_in_insertion_order(self):
        first = TestDataFactory.create_supplier(name='A Farm')
        second = TestDataFactory.create_supplier(name='B Farm')
        response = self.client.get('/api/suppliers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['id'] for s in response.data], [first.id, second.id])

    def test_update_supplier(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.patch(f'/api/suppliers/{supplier.id}/', {'notes': 'Delivers on Sundays'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        supplier.refresh_from_db()
        self.assertEqual(supplier.notes, 'Delivers on Sundays')


class CustomerAPITests(TestCase):
    """Test customer endpoints"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_customer_defaults(self):
        """New customers start with zero debt"""
        response = self.client.post('/api/customers/', {'name': 'Al Noor Restaurant', 'credit_limit': '5000.00'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Decimal(response.data['total_debt']), Decimal('0'))
        self.assertEqual(Decimal(response.data['credit_limit']), Decimal('5000'))
        self.assertFalse(response.data['is_high_risk'])
        self.assertIsNone(response.data['last_payment_date'])

    def test_total_debt_is_not_writable(self):
        response = self.client.post('/api/customers/', {'name': 'Buffet', 'total_debt': '900.00'})
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        customer = Customer.objects.get(pk=response.data['id'])
        self.assertEqual(customer.total_debt, Decimal('0.00'))

    def test_negative_credit_limit_rejected(self):
        response = self.client.post('/api/customers/', {'name': 'Buffet', 'credit_limit': '-1.00'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('credit_limit', response.data)

    def test_get_customer(self):
        customer = TestDataFactory.create_customer(name='Cafe Riyadh')
        response = self.client.get(f'/api/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'Cafe Riyadh')

    def test_get_missing_customer(self):
        response = self.client.get('/api/customers/424242/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'message': 'Customer not found'})

    def test_search_customers(self):
        TestDataFactory.create_customer(name='Golden Buffet')
        TestDataFactory.create_customer(name='Corner Shop')
        response = self.client.get('/api/customers/?search=buffet')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['name'], 'Golden Buffet')

    def test_filter_high_risk(self):
        """Flagged customers and customers over their credit limit both count"""
        flagged = TestDataFactory.create_customer(name='Flagged', is_high_risk=True)
        over_limit = TestDataFactory.create_customer(name='Over Limit', credit_limit=Decimal('100.00'),
                                                     total_debt=Decimal('500.00'))
        TestDataFactory.create_customer(name='At Limit', credit_limit=Decimal('100.00'), total_debt=Decimal('100.00'))

        response = self.client.get('/api/customers/?high_risk=true')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['id'] for c in response.data], [flagged.id, over_limit.id])

        response = self.client.get('/api/customers/?high_risk=false')
        self.assertEqual(len(response.data), 3)

    def test_customer_balance(self):
        customer = TestDataFactory.create_customer(credit_limit=Decimal('100.00'), total_debt=Decimal('150.00'))
        response = self.client.get(f'/api/customers/{customer.id}/balance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total_debt']), Decimal('150'))
        self.assertTrue(response.data['is_over_limit'])


class CustomerDebtServiceTests(TestCase):
    """Test relative debt updates"""

    def setUp(self):
        self.customer = TestDataFactory.create_customer(total_debt=Decimal('100.00'))

    def test_increase_and_decrease(self):
        adjust_customer_debt(self.customer.id, Decimal('60.00'))
        adjust_customer_debt(self.customer.id, Decimal('-20.00'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('140.00'))
        self.assertIsNone(self.customer.last_payment_date)

    def test_record_payment_stamps_date(self):
        adjust_customer_debt(self.customer.id, Decimal('-100.00'), record_payment=True)
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('0.00'))
        self.assertIsNotNone(self.customer.last_payment_date)

    def test_debt_can_go_negative(self):
        adjust_customer_debt(self.customer.id, Decimal('-150.00'))
        self.customer.refresh_from_db()
        self.assertEqual(self.customer.total_debt, Decimal('-50.00'))

    def test_missing_customer(self):
        with self.assertRaises(PostingFailure):
            adjust_customer_debt(987654, Decimal('10.00'))
