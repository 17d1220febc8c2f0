"""
Test suite for the purchasing module
Tests: purchase order CRUD, status updates, approval tokens and the public approval link
"""
from datetime import timedelta
from django.core import mail
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status
from backend.core.models import AuditLog
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.purchasing.approval import (
    build_admin_po_html, build_approval_url, generate_approval_token, verify_approval_token,
)
from backend.purchasing.models import PurchaseOrder


class ApprovalTokenTests(SimpleTestCase):
    """Test HMAC approval tokens"""

    def test_token_is_hex_digest_of_id(self):
        token = generate_approval_token(1)
        self.assertEqual(len(token), 64)
        self.assertEqual(token, generate_approval_token('1'))

    def test_verify(self):
        token = generate_approval_token(42)
        self.assertTrue(verify_approval_token(42, token))
        self.assertFalse(verify_approval_token(43, token))
        self.assertFalse(verify_approval_token(42, token[:-1]))
        self.assertFalse(verify_approval_token(42, ''))
        self.assertFalse(verify_approval_token(42, None))

    def test_secret_changes_token(self):
        with self.settings(APPROVAL_SECRET='one'):
            first = generate_approval_token(7)
        with self.settings(APPROVAL_SECRET='two'):
            second = generate_approval_token(7)
        self.assertNotEqual(first, second)


class AdminEmailTests(TestCase):

    @override_settings(APP_BASE_URL='https://stock.example.com/')
    def test_admin_html_contains_order_details_and_link(self):
        supplier = TestDataFactory.create_supplier(name='Acme')
        product = TestDataFactory.create_product(name='Bolt', sku='BOLT-9', supplier=supplier, stock_qty=3)
        order = TestDataFactory.create_purchase_order(product, quantity=20)

        url = build_approval_url(order)
        self.assertTrue(url.startswith(f'https://stock.example.com/api/v1/purchase-orders/{order.pk}/approve/'))
        self.assertTrue(url.endswith(f'{generate_approval_token(order.pk)}/'))

        html = build_admin_po_html(order)
        for text in ('Auto-Created Purchase Order', 'Bolt', 'BOLT-9', 'Acme', url):
            self.assertIn(text, html)


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class PurchaseOrderAPITests(TestCase):
    """Test purchase order endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.staff = TestDataFactory.create_user(role='staff')
        self.client.authenticate_user(self.staff)
        self.supplier = TestDataFactory.create_supplier(name='Acme', email='acme@supplier.test')
        self.product = TestDataFactory.create_product(name='Bolt', supplier=self.supplier)

    def test_create_purchase_order_emails_supplier(self):
        response = self.client.post('/api/v1/purchase-orders/', {
            'supplier': self.supplier.id,
            'product': self.product.id,
            'quantity': 30,
            'expected_date': (timezone.now() + timedelta(days=5)).isoformat(),
            'notes': 'Urgent',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['email_sent'])
        order = PurchaseOrder.objects.get()
        self.assertEqual(order.created_by, self.staff)
        self.assertEqual(order.status, PurchaseOrder.STATUS_PENDING)
        self.assertFalse(order.is_auto_generated)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].subject, 'New Purchase Order - Bolt')
        self.assertIn('Quantity: 30', mail.outbox[0].body)
        self.assertTrue(AuditLog.objects.filter(action='po_create').exists())

    def test_create_requires_fields(self):
        response = self.client.post('/api/v1/purchase-orders/', {'product': self.product.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        for field in ('supplier', 'quantity', 'expected_date'):
            self.assertIn(field, response.data)

    def test_create_rejects_zero_quantity(self):
        response = self.client.post('/api/v1/purchase-orders/', {
            'supplier': self.supplier.id, 'product': self.product.id, 'quantity': 0,
            'expected_date': timezone.now().isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_list_filters(self):
        TestDataFactory.create_purchase_order(self.product, status=PurchaseOrder.STATUS_APPROVED)
        TestDataFactory.create_purchase_order(self.product)
        response = self.client.get('/api/v1/purchase-orders/', {'status': 'Pending'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['supplier_name'], 'Acme')

    def test_update_status(self):
        order = TestDataFactory.create_purchase_order(self.product)
        response = self.client.put(f'/api/v1/purchase-orders/{order.id}/status/', {'status': 'Cancelled'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        order.refresh_from_db()
        self.assertEqual(order.status, PurchaseOrder.STATUS_CANCELLED)
        log = AuditLog.objects.get(action='po_status')
        self.assertEqual(log.changes['status'], {'old': 'Pending', 'new': 'Cancelled'})

    def test_update_status_invalid(self):
        order = TestDataFactory.create_purchase_order(self.product)
        response = self.client.put(f'/api/v1/purchase-orders/{order.id}/status/', {'status': 'Shipped'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_admin_only(self):
        order = TestDataFactory.create_purchase_order(self.product)
        response = self.client.delete(f'/api/v1/purchase-orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/purchase-orders/{order.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(PurchaseOrder.objects.filter(pk=order.pk).exists())


@override_settings(EMAIL_BACKEND='django.core.mail.backends.locmem.EmailBackend')
class ApprovalLinkTests(TestCase):
    """Test the public one-click approval endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.supplier = TestDataFactory.create_supplier(name='Acme', email='acme@supplier.test')
        self.product = TestDataFactory.create_product(name='Bolt', supplier=self.supplier)
        self.order = TestDataFactory.create_purchase_order(self.product, quantity=20)

    def test_valid_link_approves_order(self):
        token = generate_approval_token(self.order.pk)
        response = self.client.get(f'/api/v1/purchase-orders/{self.order.pk}/approve/{token}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('Purchase Order Approved', response.content.decode())
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, PurchaseOrder.STATUS_APPROVED)
        self.assertEqual(len(mail.outbox), 1)
        self.assertEqual(mail.outbox[0].to, ['acme@supplier.test'])
        self.assertTrue(AuditLog.objects.filter(action='po_approve').exists())

    def test_link_approves_cancelled_order_and_resends_email(self):
        PurchaseOrder.objects.filter(pk=self.order.pk).update(status=PurchaseOrder.STATUS_CANCELLED)
        token = generate_approval_token(self.order.pk)
        url = f'/api/v1/purchase-orders/{self.order.pk}/approve/{token}/'

        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_200_OK)
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, PurchaseOrder.STATUS_APPROVED)
        self.assertEqual(len(mail.outbox), 2)

    def test_invalid_token_returns_401(self):
        response = self.client.get(f'/api/v1/purchase-orders/{self.order.pk}/approve/not-a-token/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)
        self.assertEqual(response.content.decode(), 'Invalid or expired approval link')
        self.order.refresh_from_db()
        self.assertEqual(self.order.status, PurchaseOrder.STATUS_PENDING)

    def test_unknown_order_returns_404(self):
        token = generate_approval_token(99999)
        response = self.client.get(f'/api/v1/purchase-orders/99999/approve/{token}/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
