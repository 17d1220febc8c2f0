"""
Test utilities and factories for creating test data
"""
from datetime import timedelta
from decimal import Decimal
import random
import string

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken

from backend.catalog.models import Product
from backend.inventory.models import StockMovement
from backend.parties.models import Supplier
from backend.purchasing.models import PurchaseOrder

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='staff', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            is_staff=is_staff,
            is_superuser=is_superuser,
        )

    @staticmethod
    def create_admin(**kwargs):
        kwargs.setdefault('role', User.ROLE_ADMIN)
        return TestDataFactory.create_user(**kwargs)

    @staticmethod
    def create_supplier(name=None, email=None, **kwargs):
        """Create a test supplier"""
        if not name:
            name = f'Supplier_{TestDataFactory.random_string(6)}'
        if email is None:
            email = f'{name.lower()}@supplier.test'
        return Supplier.objects.create(name=name, email=email, phone='1234567890', **kwargs)

    @staticmethod
    def create_product(name=None, sku=None, supplier=None, stock_qty=100, min_threshold=10, **kwargs):
        """Create a test product"""
        if not name:
            name = f'Product_{TestDataFactory.random_string(6)}'
        if not sku:
            sku = f'SKU-{TestDataFactory.random_string(8).upper()}'
        kwargs.setdefault('category', 'General')
        kwargs.setdefault('unit_price', Decimal('100.00'))
        kwargs.setdefault('cost_price', Decimal('80.00'))
        return Product.objects.create(
            name=name,
            sku=sku,
            supplier=supplier,
            stock_qty=stock_qty,
            min_threshold=min_threshold,
            **kwargs
        )

    @staticmethod
    def create_movement(product, quantity, movement_type=StockMovement.TYPE_OUT, days_ago=0, moved_at=None, **kwargs):
        """
        Create a stock movement row directly, without touching product stock.
        Useful for building demand history for forecasting tests.
        """
        if moved_at is None:
            moved_at = timezone.now() - timedelta(days=days_ago)
        return StockMovement.objects.create(
            product=product,
            movement_type=movement_type,
            quantity=quantity,
            movement_date=moved_at,
            previous_stock=product.stock_qty,
            new_stock=product.stock_qty,
            **kwargs
        )

    @staticmethod
    def create_purchase_order(product, supplier=None, quantity=10, status=PurchaseOrder.STATUS_PENDING, user=None, **kwargs):
        """Create a test purchase order"""
        kwargs.setdefault('expected_date', timezone.now() + timedelta(days=7))
        return PurchaseOrder.objects.create(
            product=product,
            supplier=supplier or product.supplier or TestDataFactory.create_supplier(),
            quantity=quantity,
            status=status,
            created_by=user,
            **kwargs
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
