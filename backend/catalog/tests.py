"""
Test suite for the catalog module
Tests: stock helpers, product filters, product CRUD, role checks and supplier notification
"""
from types import SimpleNamespace
from django.core import mail
from django.test import TestCase, SimpleTestCase, override_settings
from rest_framework import status
from backend.catalog.models import Product
from backend.catalog.utils import check_threshold, stock_level, stock_capacity_status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient


def make_product(**kwargs):
    values = {
        'name': 'Widget', 'sku': 'W-1', 'stock_qty': 50, 'min_threshold': 10,
        'max_threshold': 100, 'reorder_point': 15, 'reorder_quantity': 50,
    }
    values.update(kwargs)
    return SimpleNamespace(**values)


class StockHelperTests(SimpleTestCase):
    """Test the pure stock level helpers"""

    def test_check_threshold_healthy(self):
        result = check_threshold(make_product(stock_qty=50))
        self.assertFalse(result['low_stock'])
        self.assertIsNone(result['alert'])
        self.assertIsNone(result['recommendation'])

    def test_check_threshold_reorder_point(self):
        result = check_threshold(make_product(stock_qty=14))
        self.assertFalse(result['low_stock'])
        self.assertIn('REORDER SUGGESTION', result['recommendation'])
        self.assertIn('50 units', result['recommendation'])

    def test_check_threshold_low(self):
        result = check_threshold(make_product(stock_qty=10))
        self.assertTrue(result['low_stock'])
        self.assertIn('LOW STOCK ALERT', result['alert'])

    def test_check_threshold_critical(self):
        result = check_threshold(make_product(stock_qty=2))
        self.assertTrue(result['low_stock'])
        self.assertIn('CRITICAL', result['alert'])
        self.assertIn('URGENT', result['recommendation'])

    def test_check_threshold_without_reorder_point(self):
        result = check_threshold(make_product(stock_qty=15, reorder_point=0))
        self.assertIn('REORDER SUGGESTION', result['recommendation'])

    def test_stock_level(self):
        self.assertEqual(stock_level(make_product(stock_qty=2)), 'critical')
        self.assertEqual(stock_level(make_product(stock_qty=10)), 'low')
        self.assertEqual(stock_level(make_product(stock_qty=20)), 'medium')
        self.assertEqual(stock_level(make_product(stock_qty=21)), 'good')

    def test_stock_capacity_status(self):
        self.assertEqual(stock_capacity_status(make_product(stock_qty=10)), 'critical')
        self.assertEqual(stock_capacity_status(make_product(stock_qty=25)), 'low')
        self.assertEqual(stock_capacity_status(make_product(stock_qty=50)), 'medium')
        self.assertEqual(stock_capacity_status(make_product(stock_qty=75)), 'good')
        self.assertEqual(stock_capacity_status(make_product(stock_qty=76)), 'excellent')
        self.assertEqual(stock_capacity_status(make_product(stock_qty=50, max_threshold=0)), 'medium')


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class ProductAPITests(TestCase):
    """Test product endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.staff = TestDataFactory.create_user(role='staff')
        self.supplier = TestDataFactory.create_supplier(name='Acme', email='acme@supplier.test')
        self.client.authenticate_user(self.staff)

    def test_create_product_emails_supplier(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Bolt',
            'sku': 'BOLT-1',
            'category': 'Hardware',
            'supplier': self.supplier.id,
            'stock_qty': 40,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['supplier_name'], 'Acme')
        self.assertEqual(response.data['demand_forecast']['trend'], 'stable')
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['acme@supplier.test'])
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='Product').exists())

    def test_create_product_without_supplier_sends_nothing(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Nut', 'sku': 'NUT-1', 'category': 'Hardware',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(len(mail.outbox), 0)

    def test_duplicate_sku_rejected(self):
        TestDataFactory.create_product(sku='DUP-1')
        response = self.client.post('/api/v1/products/', {
            'name': 'Copy', 'sku': 'DUP-1', 'category': 'Hardware',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('sku', response.data)

    def test_min_threshold_above_max_rejected(self):
        response = self.client.post('/api/v1/products/', {
            'name': 'Odd', 'sku': 'ODD-1', 'category': 'Hardware',
            'min_threshold': 200, 'max_threshold': 100,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_product(name='Low', stock_qty=3, min_threshold=10, category='Tools')
        TestDataFactory.create_product(name='Plenty', stock_qty=80, min_threshold=10, category='Parts')
        TestDataFactory.create_product(name='Empty', stock_qty=0, min_threshold=10, category='Parts', is_active=False)

        response = self.client.get('/api/v1/products/', {'low_stock': 'true'})
        self.assertEqual(sorted(p['name'] for p in response.data), ['Empty', 'Low'])

        response = self.client.get('/api/v1/products/', {'category': 'parts', 'active': 'true'})
        self.assertEqual([p['name'] for p in response.data], ['Plenty'])

        response = self.client.get('/api/v1/products/', {'out_of_stock': 'true'})
        self.assertEqual([p['name'] for p in response.data], ['Empty'])

        response = self.client.get('/api/v1/products/', {'search': 'plen'})
        self.assertEqual([p['name'] for p in response.data], ['Plenty'])

    def test_update_product(self):
        product = TestDataFactory.create_product()
        response = self.client.patch(f'/api/v1/products/{product.id}/', {'min_threshold': 20}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        product.refresh_from_db()
        self.assertEqual(product.min_threshold, 20)
        log = AuditLog.objects.get(action='update', object_id=str(product.id))
        self.assertEqual(log.changes, {'min_threshold': {'old': 10, 'new': 20}})

    def test_delete_requires_admin(self):
        product = TestDataFactory.create_product()
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/products/{product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Product.objects.filter(pk=product.pk).exists())

    def test_supplier_role_is_read_only(self):
        supplier_user = TestDataFactory.create_user(role='supplier')
        self.client.authenticate_user(supplier_user)
        self.assertEqual(self.client.get('/api/v1/products/').status_code, status.HTTP_200_OK)
        response = self.client.post('/api/v1/products/', {'name': 'X', 'sku': 'X-1', 'category': 'C'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_unknown_product_404(self):
        response = self.client.get('/api/v1/products/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
