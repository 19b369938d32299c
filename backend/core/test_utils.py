"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from backend.catalog.models import Product
from backend.parties.models import Customer, Supplier
from decimal import Decimal
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_supplier(name=None, phone=None):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'05{random.randint(10000000, 99999999)}'
        return Supplier.objects.create(name=name, phone=phone)

    @staticmethod
    def create_customer(name=None, phone=None, credit_limit=None, total_debt=None, is_high_risk=False):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        if not phone:
            phone = f'05{random.randint(10000000, 99999999)}'
        return Customer.objects.create(
            name=name,
            phone=phone,
            credit_limit=credit_limit if credit_limit is not None else Decimal('5000.00'),
            total_debt=total_debt if total_debt is not None else Decimal('0.00'),
            is_high_risk=is_high_risk
        )

    @staticmethod
    def create_product(name=None, unit='kg', current_stock=None, reorder_level=None):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        return Product.objects.create(
            name=name,
            unit=unit,
            current_stock=current_stock if current_stock is not None else Decimal('0.00'),
            reorder_level=reorder_level if reorder_level is not None else Decimal('100.00')
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
