"""
Test suite for the reports module
Tests: summary reports, monthly report, alerts and dashboard summary
"""
from datetime import datetime, timedelta

from django.test import TestCase
from django.utils import timezone
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.inventory.models import StockMovement
from backend.purchasing.models import PurchaseOrder


class ReportsTestCase(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(role='staff')
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier(name='Acme')


class BasicReportsTests(ReportsTestCase):
    """Test the simple listing and aggregate reports"""

    def test_requires_authentication(self):
        self.client.logout()
        response = self.client.get('/api/v1/reports/stock-summary/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_stock_summary(self):
        TestDataFactory.create_product(supplier=self.supplier, stock_qty=3, min_threshold=10)
        TestDataFactory.create_product(supplier=self.supplier, stock_qty=10, min_threshold=10)
        TestDataFactory.create_product(stock_qty=50)

        response = self.client.get('/api/v1/reports/stock-summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data, {
            'total_products': 3,
            'total_suppliers': 1,
            'low_stock_products': 1,
        })

    def test_top_products_counts_both_directions(self):
        first = TestDataFactory.create_product(name='Bolts')
        second = TestDataFactory.create_product(name='Nuts')
        TestDataFactory.create_movement(first, 10, movement_type=StockMovement.TYPE_IN)
        TestDataFactory.create_movement(first, 5)
        TestDataFactory.create_movement(second, 20)

        response = self.client.get('/api/v1/reports/top-products/')
        self.assertEqual([row['name'] for row in response.data], ['Nuts', 'Bolts'])
        self.assertEqual(response.data[1]['total_qty'], 15)
        self.assertEqual(response.data[1]['movement_count'], 2)

    def test_recent_movements_limited_to_ten(self):
        product = TestDataFactory.create_product()
        for _ in range(12):
            TestDataFactory.create_movement(product, 1)
        response = self.client.get('/api/v1/reports/recent-movements/')
        self.assertEqual(len(response.data), 10)

    def test_supplier_report_product_count(self):
        TestDataFactory.create_product(supplier=self.supplier)
        TestDataFactory.create_product(supplier=self.supplier)
        response = self.client.get('/api/v1/reports/suppliers/')
        self.assertEqual(response.data[0]['name'], 'Acme')
        self.assertEqual(response.data[0]['product_count'], 2)

    def test_low_stock_report_sorted_by_stock(self):
        TestDataFactory.create_product(name='Four', stock_qty=4)
        TestDataFactory.create_product(name='One', stock_qty=1)
        TestDataFactory.create_product(name='Plenty', stock_qty=40)
        response = self.client.get('/api/v1/reports/low-stock/')
        self.assertEqual([row['name'] for row in response.data], ['One', 'Four'])

    def test_purchase_order_report(self):
        product = TestDataFactory.create_product(supplier=self.supplier)
        TestDataFactory.create_purchase_order(product)
        response = self.client.get('/api/v1/reports/purchase-orders/')
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['supplier_name'], 'Acme')


class MonthlyReportTests(ReportsTestCase):
    """Test the monthly report and its previous-month fallback"""

    def setUp(self):
        super().setUp()
        self.product = TestDataFactory.create_product(supplier=self.supplier, stock_qty=40)

    def backdated_movement(self, quantity, moved_at, **kwargs):
        movement = TestDataFactory.create_movement(self.product, quantity, moved_at=moved_at, **kwargs)
        StockMovement.objects.filter(pk=movement.pk).update(created_at=moved_at)
        return movement

    def test_selected_month(self):
        march = timezone.make_aware(datetime(2024, 3, 15, 12, 0))
        self.backdated_movement(30, march, movement_type=StockMovement.TYPE_IN)
        self.backdated_movement(8, march)
        self.backdated_movement(2, march, remarks='Damaged in transit')
        self.backdated_movement(99, march + timedelta(days=30))

        response = self.client.get('/api/v1/reports/monthly/', {'month': '2024-03'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['month'], '2024-03')
        self.assertEqual(response.data['movements'], {'IN': 30, 'OUT': 10})
        self.assertEqual(response.data['total_sales'], 10)
        self.assertEqual(response.data['total_damaged'], 2)
        self.assertEqual(response.data['top_products'][0]['total_sold'], 10)
        self.assertEqual(response.data['inventory'], {'total_products': 1, 'total_stock_qty': 40})

    def test_selected_month_without_activity_does_not_fall_back(self):
        response = self.client.get('/api/v1/reports/monthly/', {'month': '2023-01'})
        self.assertEqual(response.data['month'], '2023-01')
        self.assertEqual(response.data['movements'], {'IN': 0, 'OUT': 0})
        self.assertEqual(response.data['top_products'], [])

    def test_invalid_month(self):
        for value in ('2024-13', 'March', '2024-3', '0000-01', '9999-12', '9999-01'):
            response = self.client.get('/api/v1/reports/monthly/', {'month': value})
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_falls_back_to_previous_month(self):
        now = timezone.localtime()
        last_month = now.replace(day=1, hour=12, minute=0, second=0, microsecond=0) - timedelta(days=1)
        self.backdated_movement(12, last_month, remarks='damaged box')

        response = self.client.get('/api/v1/reports/monthly/')
        self.assertEqual(response.data['month'], f'{last_month.year}-{last_month.month:02d}')
        self.assertEqual(response.data['movements']['OUT'], 12)
        self.assertEqual(response.data['total_damaged'], 12)

    def test_current_month_reported_when_active(self):
        now = timezone.localtime()
        TestDataFactory.create_movement(self.product, 4)

        response = self.client.get('/api/v1/reports/monthly/')
        self.assertEqual(response.data['month'], f'{now.year}-{now.month:02d}')
        self.assertEqual(response.data['total_sales'], 4)


class AlertsTests(ReportsTestCase):
    """Test alert generation"""

    def test_alert_types(self):
        low = TestDataFactory.create_product(name='Low', stock_qty=5, min_threshold=10)
        near = TestDataFactory.create_product(name='Near', stock_qty=15, min_threshold=10)
        healthy = TestDataFactory.create_product(name='Healthy', supplier=self.supplier, stock_qty=100)

        stale = TestDataFactory.create_purchase_order(healthy)
        approved = TestDataFactory.create_purchase_order(healthy, status=PurchaseOrder.STATUS_APPROVED)
        TestDataFactory.create_purchase_order(healthy)
        old = timezone.now() - timedelta(days=20)
        PurchaseOrder.objects.filter(pk__in=[stale.pk, approved.pk]).update(created_at=old)

        response = self.client.get('/api/v1/alerts/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        by_type = {}
        for alert in response.data:
            by_type.setdefault(alert['type'], []).append(alert)

        self.assertEqual([a['product_id'] for a in by_type['Low Stock']], [low.id])
        self.assertEqual(by_type['Low Stock'][0]['message'], "Product 'Low' is below threshold (5/10)")
        self.assertEqual({a['product_id'] for a in by_type['Predicted Shortage']}, {low.id, near.id})
        self.assertEqual([a['purchase_order_id'] for a in by_type['Supplier Delay']], [stale.id])
        self.assertIn("supplier 'Acme'", by_type['Supplier Delay'][0]['message'])

    def test_no_alerts(self):
        TestDataFactory.create_product(stock_qty=100)
        response = self.client.get('/api/v1/alerts/')
        self.assertEqual(response.data, [])


class DashboardSummaryTests(ReportsTestCase):

    def test_summary(self):
        low = TestDataFactory.create_product(stock_qty=2)
        TestDataFactory.create_product(stock_qty=98)
        for _ in range(7):
            TestDataFactory.create_movement(low, 1)

        response = self.client.get('/api/v1/dashboard/summary/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['total_products'], 2)
        self.assertEqual(response.data['total_units_in_inventory'], 100)
        self.assertEqual(len(response.data['low_stock']), 1)
        self.assertEqual(len(response.data['recent_movements']), 5)
