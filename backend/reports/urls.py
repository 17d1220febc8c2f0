from django.urls import path
from . import views

urlpatterns = [
    path('reports/stock-summary/', views.stock_summary, name='report-stock-summary'),
    path('reports/top-products/', views.top_products, name='report-top-products'),
    path('reports/recent-movements/', views.recent_movements, name='report-recent-movements'),
    path('reports/products/', views.product_stock_report, name='report-products'),
    path('reports/suppliers/', views.supplier_report, name='report-suppliers'),
    path('reports/purchase-orders/', views.purchase_order_report, name='report-purchase-orders'),
    path('reports/low-stock/', views.low_stock_report, name='report-low-stock'),
    path('reports/monthly/', views.monthly_report, name='report-monthly'),
    path('alerts/', views.alerts, name='alerts'),
    path('dashboard/summary/', views.dashboard_summary, name='dashboard-summary'),
]
