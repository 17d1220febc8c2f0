"""
Test suite for the inventory module
Tests: stock movement recording, insufficient stock, the auto-reorder trigger and movement endpoints
"""
from datetime import timedelta
from unittest import mock
from django.core import mail
from django.test import TestCase, override_settings
from django.utils import timezone
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockMovement
from backend.inventory.services import (
    InsufficientStockError, auto_reorder_quantity, record_stock_movement, trigger_auto_reorder,
)
from backend.purchasing.models import PurchaseOrder


@override_settings(
    ADMIN_EMAIL='admin@stockai.test',
    EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend',
)
class RecordStockMovementTests(TestCase):
    """Test the stock movement service"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(
            supplier=self.supplier, stock_qty=20, min_threshold=10, lead_time=5,
        )

    def test_stock_in_increases_stock(self):
        movement, order = record_stock_movement(self.product, 'IN', 15, user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 35)
        self.assertEqual(movement.previous_stock, 20)
        self.assertEqual(movement.new_stock, 35)
        self.assertEqual(movement.created_by, self.user)
        self.assertIsNone(order)
        self.assertTrue(AuditLog.objects.filter(action='stock_in', object_id=str(self.product.id)).exists())

    def test_stock_out_above_threshold_no_order(self):
        movement, order = record_stock_movement(self.product, 'OUT', 10, user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 10)
        self.assertIsNone(order)
        self.assertEqual(PurchaseOrder.objects.count(), 0)

    def test_stock_out_insufficient_stock(self):
        with self.assertRaises(InsufficientStockError):
            record_stock_movement(self.product, 'OUT', 21, user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 20)
        self.assertEqual(StockMovement.objects.count(), 0)

    def test_stock_out_to_zero_allowed(self):
        record_stock_movement(self.product, 'OUT', 20, user=self.user)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 0)

    def test_invalid_arguments(self):
        with self.assertRaises(ValueError):
            record_stock_movement(self.product, 'MOVE', 1)
        with self.assertRaises(ValueError):
            record_stock_movement(self.product, 'IN', 0)

    def test_stock_out_below_threshold_creates_purchase_order(self):
        before = timezone.now()
        movement, order = record_stock_movement(self.product, 'OUT', 15, user=self.user)

        self.assertIsNotNone(order)
        self.assertEqual(order.quantity, 20)
        self.assertEqual(order.status, PurchaseOrder.STATUS_PENDING)
        self.assertEqual(order.supplier, self.supplier)
        self.assertTrue(order.is_auto_generated)
        self.assertIn('current 5, min 10', order.notes)
        self.assertGreaterEqual(order.expected_date, before + timedelta(days=5))
        self.assertTrue(AuditLog.objects.filter(action='po_auto_create').exists())

        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['admin@stockai.test'])
        self.assertIn(self.product.name, mail.outbox[0].subject)
        html = mail.outbox[0].alternatives[0][0]
        self.assertIn(f'/purchase-orders/{order.pk}/approve/', html)

    def test_each_low_stock_out_creates_an_order(self):
        record_stock_movement(self.product, 'OUT', 15)
        record_stock_movement(self.product, 'OUT', 1)
        self.assertEqual(PurchaseOrder.objects.filter(is_auto_generated=True).count(), 2)

    def test_stock_out_landing_on_threshold_no_order(self):
        _, order = record_stock_movement(self.product, 'OUT', 10)
        self.assertIsNone(order)

    def test_product_without_supplier_skips_order(self):
        product = TestDataFactory.create_product(stock_qty=5, min_threshold=10)
        movement, order = record_stock_movement(product, 'OUT', 1)
        self.assertIsNone(order)
        self.assertEqual(movement.new_stock, 4)

    def test_trigger_failure_keeps_movement(self):
        with mock.patch('backend.inventory.services.trigger_auto_reorder', side_effect=RuntimeError('boom')):
            movement, order = record_stock_movement(self.product, 'OUT', 15)
        self.assertIsNone(order)
        self.assertTrue(StockMovement.objects.filter(pk=movement.pk).exists())
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_qty, 5)

    def test_auto_reorder_quantity_minimum_one(self):
        self.product.min_threshold = 0
        self.assertEqual(auto_reorder_quantity(self.product), 1)
        self.product.min_threshold = 7
        self.assertEqual(auto_reorder_quantity(self.product), 14)

    @override_settings(ADMIN_EMAIL='')
    def test_trigger_without_admin_email(self):
        self.product.stock_qty = 2
        order = trigger_auto_reorder(self.product)
        self.assertIsNotNone(order)
        self.assertIsNone(order.created_by)
        self.assertEqual(len(mail.outbox), 0)

    def test_backdated_movement(self):
        moved_at = timezone.now() - timedelta(days=3)
        movement, _ = record_stock_movement(self.product, 'IN', 1, movement_date=moved_at)
        self.assertEqual(movement.movement_date, moved_at)


@override_settings(ADMIN_EMAIL='admin@stockai.test')
class StockMovementAPITests(TestCase):
    """Test stock movement endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(role='staff')
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(supplier=self.supplier, stock_qty=20, min_threshold=10)

    def test_record_stock_in(self):
        response = self.client.post('/api/v1/stock-movements/', {
            'product': self.product.id,
            'movement_type': 'IN',
            'quantity': 5,
            'remarks': 'Restock',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product']['stock_qty'], 25)
        self.assertIsNone(response.data['warning'])
        self.assertNotIn('purchase_order', response.data)
        self.assertFalse(response.data['threshold']['low_stock'])

    def test_record_stock_out_below_threshold(self):
        response = self.client.post('/api/v1/stock-movements/', {
            'productId': self.product.id,
            'movementType': 'out',
            'quantity': 15,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['product']['stock_qty'], 5)
        self.assertIn('below threshold (5/10)', response.data['warning'])
        self.assertEqual(response.data['purchase_order']['quantity'], 20)
        self.assertTrue(response.data['threshold']['low_stock'])

    def test_insufficient_stock_returns_400(self):
        response = self.client.post('/api/v1/stock-movements/', {
            'product': self.product.id, 'movement_type': 'OUT', 'quantity': 50,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['message'], 'Not enough stock available')

    def test_unknown_product_returns_404(self):
        response = self.client.post('/api/v1/stock-movements/', {
            'product': 99999, 'movement_type': 'IN', 'quantity': 1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_invalid_payload(self):
        response = self.client.post('/api/v1/stock-movements/', {
            'product': self.product.id, 'movement_type': 'SIDEWAYS', 'quantity': 0,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('movement_type', response.data)
        self.assertIn('quantity', response.data)

    def test_list_filters_and_product_movements(self):
        record_stock_movement(self.product, 'IN', 5)
        record_stock_movement(self.product, 'OUT', 2)
        other = TestDataFactory.create_product()
        record_stock_movement(other, 'IN', 1)

        response = self.client.get('/api/v1/stock-movements/', {'product': self.product.id, 'movement_type': 'out'})
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['quantity'], 2)

        response = self.client.get(f'/api/v1/products/{self.product.id}/stock-movements/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)

    def test_movement_detail(self):
        movement, _ = record_stock_movement(self.product, 'IN', 5, user=self.user)
        response = self.client.get(f'/api/v1/stock-movements/{movement.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['created_by_username'], self.user.username)

    def test_supplier_role_cannot_record(self):
        self.client.authenticate_user(TestDataFactory.create_user(role='supplier'))
        response = self.client.post('/api/v1/stock-movements/', {
            'product': self.product.id, 'movement_type': 'IN', 'quantity': 1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
