"""
Test suite for the parties module
Tests: supplier CRUD, soft delete, performance score and delivery performance
"""
from datetime import timedelta
from django.test import TestCase
from django.utils import timezone
from rest_framework import status
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockMovement
from backend.parties.models import Supplier
from backend.parties.performance import performance_status, supplier_delivery_performance
from backend.purchasing.models import PurchaseOrder


class SupplierModelTests(TestCase):

    def test_performance_score_without_orders(self):
        supplier = TestDataFactory.create_supplier()
        # 0.95 * 40 + 4.5 / 5 * 30
        self.assertEqual(supplier.performance_score, 65.0)

    def test_performance_score_with_orders(self):
        supplier = TestDataFactory.create_supplier(total_orders=10, successful_orders=8)
        self.assertEqual(supplier.performance_score, 89.0)

    def test_performance_status_bands(self):
        self.assertEqual(performance_status(95), 'Excellent')
        self.assertEqual(performance_status(90), 'Excellent')
        self.assertEqual(performance_status(80), 'Good')
        self.assertEqual(performance_status(50), 'Average')
        self.assertEqual(performance_status(10), 'Poor')


class SupplierAPITests(TestCase):
    """Test supplier endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.staff = TestDataFactory.create_user(role='staff')
        self.client.authenticate_user(self.admin)

    def test_create_supplier(self):
        response = self.client.post('/api/v1/suppliers/', {
            'name': 'Acme Traders',
            'email': 'acme@supplier.test',
            'phone': '9999999999',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['country'], 'India')
        self.assertEqual(response.data['payment_terms'], 'Net 30')

    def test_duplicate_email_rejected(self):
        TestDataFactory.create_supplier(name='First', email='dup@supplier.test')
        response = self.client.post('/api/v1/suppliers/', {
            'name': 'Second',
            'email': 'DUP@supplier.test',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_list_with_search_and_active_filters(self):
        TestDataFactory.create_supplier(name='Alpha Parts')
        TestDataFactory.create_supplier(name='Beta Goods', is_active=False)
        response = self.client.get('/api/v1/suppliers/', {'search': 'alpha'})
        self.assertEqual([s['name'] for s in response.data], ['Alpha Parts'])

        response = self.client.get('/api/v1/suppliers/', {'active': 'false'})
        self.assertEqual([s['name'] for s in response.data], ['Beta Goods'])

    def test_delete_deactivates(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        supplier.refresh_from_db()
        self.assertFalse(supplier.is_active)
        self.assertTrue(Supplier.objects.filter(pk=supplier.pk).exists())

    def test_staff_cannot_delete(self):
        supplier = TestDataFactory.create_supplier()
        self.client.authenticate_user(self.staff)
        response = self.client.delete(f'/api/v1/suppliers/{supplier.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_supplier_performance_endpoint(self):
        supplier = TestDataFactory.create_supplier()
        response = self.client.get(f'/api/v1/suppliers/{supplier.id}/performance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['performance_score'], 65.0)


class DeliveryPerformanceTests(TestCase):
    """Test purchase order / delivery matching"""

    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(supplier=self.supplier)
        self.base = timezone.now() - timedelta(days=10)

    def create_order(self, expected_in_days):
        order = TestDataFactory.create_purchase_order(
            self.product, expected_date=self.base + timedelta(days=expected_in_days)
        )
        PurchaseOrder.objects.filter(pk=order.pk).update(created_at=self.base)
        return order

    def deliver(self, after_days):
        TestDataFactory.create_movement(
            self.product, 20, movement_type=StockMovement.TYPE_IN,
            moved_at=self.base + timedelta(days=after_days), supplier=self.supplier,
        )

    def test_no_orders_returns_none(self):
        self.assertIsNone(supplier_delivery_performance(TestDataFactory.create_supplier()))

    def test_on_time_and_late_deliveries(self):
        self.create_order(expected_in_days=7)
        self.create_order(expected_in_days=2)
        self.deliver(after_days=3)
        self.deliver(after_days=5)

        stats = supplier_delivery_performance(self.supplier)
        self.assertEqual(stats['total_orders'], 2)
        self.assertEqual(stats['total_deliveries'], 2)
        self.assertEqual(stats['on_time_deliveries'], 1)
        self.assertEqual(stats['avg_delivery_days'], 4.0)
        self.assertEqual(stats['performance_percentage'], 50.0)
        self.assertEqual(stats['performance_status'], 'Average')

    def test_undelivered_order_not_counted(self):
        self.create_order(expected_in_days=7)
        stats = supplier_delivery_performance(self.supplier)
        self.assertEqual(stats['total_deliveries'], 0)
        self.assertIsNone(stats['avg_delivery_days'])
        self.assertEqual(stats['performance_status'], 'Poor')

    def test_suppliers_performance_endpoint(self):
        self.create_order(expected_in_days=7)
        self.deliver(after_days=1)
        client = AuthenticatedAPIClient().authenticate_user(TestDataFactory.create_user())
        response = client.get('/api/v1/suppliers/performance/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['performance_status'], 'Excellent')
