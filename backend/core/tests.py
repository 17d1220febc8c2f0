"""
Test suite for the core module
Tests: registration, JWT login, role permissions, user management and audit logging
"""
from decimal import Decimal
from django.test import TestCase
from rest_framework import status
from backend.core.models import AuditLog, User
from backend.core.permissions import has_role
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.core.utils import create_audit_log, field_changes


class AuthenticationTests(TestCase):
    """Test registration and token endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()

    def test_register_returns_tokens(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newstaff',
            'email': 'newstaff@test.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Str0ngPass!234',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)
        self.assertEqual(response.data['user']['role'], 'staff')

    def test_register_rejects_supplier_role(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'sneaky',
            'email': 'sneaky@test.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Str0ngPass!234',
            'role': 'supplier',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('role', response.data)

    def test_register_password_mismatch(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'mismatch',
            'email': 'mismatch@test.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Different!234',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_register_duplicate_email(self):
        TestDataFactory.create_user(username='first', email='taken@test.com')
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'second',
            'email': 'taken@test.com',
            'password': 'Str0ngPass!234',
            'password_confirm': 'Str0ngPass!234',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('email', response.data)

    def test_login_returns_user_and_tokens(self):
        TestDataFactory.create_user(username='loginuser', password='testpass123', role='admin')
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'loginuser',
            'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('access', response.data)
        self.assertEqual(response.data['user']['role'], 'admin')

    def test_login_inactive_user_rejected(self):
        user = TestDataFactory.create_user(username='inactive', password='testpass123')
        user.is_active = False
        user.save()
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'inactive',
            'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_authentication(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_returns_profile(self):
        user = TestDataFactory.create_user()
        self.client.authenticate_user(user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], user.username)


class RolePermissionTests(TestCase):
    """Test role helpers and admin-only endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()
        self.staff = TestDataFactory.create_user(role='staff')

    def test_has_role(self):
        self.assertTrue(has_role(self.admin, 'admin'))
        self.assertFalse(has_role(self.staff, 'admin'))
        superuser = TestDataFactory.create_user(role='staff', is_superuser=True)
        self.assertTrue(has_role(superuser, 'admin'))

    def test_user_list_admin_only(self):
        self.client.authenticate_user(self.staff)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 2)

    def test_user_list_filter_by_role(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/users/', {'role': 'staff'})
        self.assertEqual([u['username'] for u in response.data], [self.staff.username])

    def test_admin_can_deactivate_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/users/{self.staff.id}/', {'is_active': False}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.staff.refresh_from_db()
        self.assertFalse(self.staff.is_active)
        log = AuditLog.objects.get(action='update', model_name='User')
        self.assertEqual(log.changes, {'is_active': {'old': True, 'new': False}})

    def test_admin_can_create_supplier_account(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'acme_portal',
            'email': 'portal@acme.test',
            'password': 'Sup3r-secret-pass',
            'password_confirm': 'Sup3r-secret-pass',
            'role': 'supplier',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role'], 'supplier')
        self.assertTrue(User.objects.get(username='acme_portal').check_password('Sup3r-secret-pass'))

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.delete(f'/api/v1/users/{self.staff.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertTrue(AuditLog.objects.filter(action='delete', model_name='User').exists())


class AuditLogTests(TestCase):
    """Test audit log creation and listing"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.admin = TestDataFactory.create_admin()

    def test_create_audit_log(self):
        log = create_audit_log(action='create', model_name='Product', object_id='1', user=self.admin,
                               object_name='Widget', changes={'stock_qty': 5})
        self.assertIsNotNone(log)
        self.assertEqual(log.user, self.admin)
        self.assertEqual(log.changes, {'stock_qty': 5})

    def test_create_audit_log_missing_fields(self):
        self.assertIsNone(create_audit_log(action='create', model_name='Product'))
        self.assertEqual(AuditLog.objects.count(), 0)

    def test_audit_log_list_filters(self):
        create_audit_log(action='create', model_name='Product', object_id='1', user=self.admin)
        create_audit_log(action='stock_out', model_name='Product', object_id='1', user=self.admin)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/', {'action': 'stock_out'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['action'], 'stock_out')
        self.assertEqual(response.data[0]['username'], self.admin.username)

    def test_audit_log_list_bad_limit(self):
        for _ in range(3):
            create_audit_log(action='create', model_name='Product', object_id='1', user=self.admin)
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/', {'limit': 'many'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 3)
        response = self.client.get('/api/v1/audit-logs/', {'limit': '2'})
        self.assertEqual(len(response.data), 2)

    def test_audit_log_list_forbidden_for_staff(self):
        self.client.authenticate_user(TestDataFactory.create_user(role=User.ROLE_STAFF))
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class FieldChangesTests(TestCase):

    def test_only_changed_fields_reported(self):
        product = TestDataFactory.create_product(stock_qty=5, min_threshold=10)
        changes = field_changes(product, {'stock_qty': 5, 'min_threshold': 12, 'unit_price': Decimal('90.00')})
        self.assertEqual(changes, {
            'min_threshold': {'old': 10, 'new': 12},
            'unit_price': {'old': '100.00', 'new': '90.00'},
        })

    def test_related_objects_compared_by_pk(self):
        supplier = TestDataFactory.create_supplier()
        product = TestDataFactory.create_product(supplier=supplier)
        self.assertEqual(field_changes(product, {'supplier': supplier}), {})
        self.assertEqual(field_changes(product, {'supplier': None}), {'supplier': {'old': supplier.pk, 'new': None}})
