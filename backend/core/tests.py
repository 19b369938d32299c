"""
Test suite for Core module
Tests: JWT auth endpoints, audit logging, error response shapes, management commands
"""
import json
from decimal import Decimal
from io import StringIO
from django.core.management import call_command
from django.test import TestCase
from rest_framework import status
from rest_framework.exceptions import NotFound
from rest_framework.test import APIClient
from backend.catalog.models import Product
from backend.core.exceptions import api_exception_handler
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, get_or_404
from backend.ledger.models import Transaction
from backend.parties.models import Customer


class AuthTests(TestCase):
    """Test registration, login and the current-user endpoint"""

    def setUp(self):
        self.client = APIClient()

    def test_register_returns_tokens(self):
        """Registration creates the user and returns a token pair"""
        response = self.client.post('/api/auth/register/', {
            'username': 'warehouse_clerk',
            'email': 'clerk@example.com',
            'password': 'Potat0-Sacks-2024',
            'password_confirm': 'Potat0-Sacks-2024',
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['username'], 'warehouse_clerk')

    def test_register_password_mismatch(self):
        """Mismatched confirmation is a field error"""
        response = self.client.post('/api/auth/register/', {
            'username': 'clerk2',
            'password': 'Potat0-Sacks-2024',
            'password_confirm': 'something-else-2024',
        })
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('password', response.data)

    def test_login_and_me(self):
        """Login issues an access token accepted by /auth/me/"""
        TestDataFactory.create_user(username='driver', password='testpass123')
        response = self.client.post('/api/auth/login/', {'username': 'driver', 'password': 'testpass123'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.credentials(HTTP_AUTHORIZATION=f"Bearer {response.data['access']}")
        me = self.client.get('/api/auth/me/')
        self.assertEqual(me.status_code, status.HTTP_200_OK)
        self.assertEqual(me.data['username'], 'driver')

    def test_login_wrong_password(self):
        TestDataFactory.create_user(username='driver', password='testpass123')
        response = self.client.post('/api/auth/login/', {'username': 'driver', 'password': 'nope'})
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_api_requires_authentication(self):
        """Business endpoints reject anonymous requests"""
        for path in ['/api/products/', '/api/customers/', '/api/sales/', '/api/analytics/dashboard/']:
            response = self.client.get(path)
            self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED, path)


class AuditLogTests(TestCase):
    """Test audit trail helpers and endpoint"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_user(is_staff=True)
        self.client = AuthenticatedAPIClient()

    def test_create_audit_log(self):
        log = create_audit_log(user=self.user, action='create', model_name='Product',
                               object_id=7, object_name='Potatoes', changes={'opening_stock': '10.00'})
        self.assertIsNotNone(log)
        self.assertEqual(log.object_id, '7')
        self.assertEqual(log.user, self.user)

    def test_create_audit_log_missing_fields(self):
        """Incomplete entries are skipped, not raised"""
        self.assertIsNone(create_audit_log(user=self.user, action='create', model_name=None, object_id=1))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_audit_log_list_admin_only(self):
        create_audit_log(user=self.user, action='create', model_name='Customer', object_id=1)

        self.client.authenticate_user(self.user)
        response = self.client.get('/api/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/audit-logs/?model_name=Customer')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['action'], 'create')


class ExceptionHandlerTests(TestCase):
    """Test error response shapes"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_not_found_has_message(self):
        response = self.client.get('/api/customers/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'message': 'Customer not found'})

    def test_get_or_404(self):
        customer = TestDataFactory.create_customer(name='Cafe Jeddah')
        self.assertEqual(get_or_404(Customer, pk=customer.pk), customer)
        with self.assertRaisesMessage(NotFound, 'Customer not found'):
            get_or_404(Customer.objects.filter(is_high_risk=True), pk=customer.pk)

    def test_validation_error_keeps_fields(self):
        response = self.client.post('/api/suppliers/', {})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('name', response.data)

    def test_unhandled_error_is_generic_500(self):
        response = api_exception_handler(RuntimeError('boom'), {'view': None})
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'message': 'Internal server error'})


class ManagementCommandTests(TestCase):
    """Test seed_demo and check_balances"""

    def test_seed_demo(self):
        out = StringIO()
        call_command('seed_demo', stdout=out)
        self.assertEqual(Product.objects.count(), 2)
        spunta = Product.objects.get(name='Spunta Potatoes')
        self.assertEqual(spunta.current_stock, Decimal('100.00'))
        self.assertEqual(Transaction.objects.get().amount, Decimal('2500.00'))

        call_command('seed_demo', stdout=out)
        self.assertEqual(Product.objects.count(), 2)
        self.assertIn('skipping', out.getvalue())

    def test_check_balances_json(self):
        oversold = TestDataFactory.create_product(name='Oversold', current_stock=Decimal('-5.00'))
        overpaid = TestDataFactory.create_customer(name='Overpaid', total_debt=Decimal('-20.00'))
        over_limit = TestDataFactory.create_customer(name='Over Limit', credit_limit=Decimal('100.00'),
                                                     total_debt=Decimal('250.00'))
        out = StringIO()
        call_command('check_balances', '--json', stdout=out)
        report = json.loads(out.getvalue())
        self.assertEqual([p['id'] for p in report['negative_stock']], [oversold.id])
        self.assertEqual([c['id'] for c in report['negative_debt']], [overpaid.id])
        self.assertEqual([c['id'] for c in report['over_credit_limit']], [over_limit.id])

    def test_check_balances_clean(self):
        out = StringIO()
        call_command('check_balances', stdout=out)
        self.assertIn('Nothing to review', out.getvalue())
