from django.urls import path
from . import views

urlpatterns = [
    path('ai-analytics/demand-forecast/', views.global_demand_forecast, name='ai-global-demand-forecast'),
    path('ai-analytics/demand-forecast/<int:product_id>/', views.demand_forecast, name='ai-demand-forecast'),
    path('ai-analytics/gemini-forecast/<int:product_id>/', views.gemini_forecast, name='ai-gemini-forecast'),
    path('ai-analytics/anomalies/<int:product_id>/', views.product_anomalies, name='ai-anomalies'),
    path('ai-analytics/insights/<int:product_id>/', views.product_insights, name='ai-insights'),
    path('ai-analytics/inventory-dashboard/', views.inventory_dashboard, name='ai-inventory-dashboard'),
    path('ai-analytics/demand-trends/', views.demand_trends, name='ai-demand-trends'),
    path('ai-analytics/sales-trends/', views.sales_trends, name='ai-sales-trends'),
    path('ai-analytics/batch-forecast/', views.batch_forecast, name='ai-batch-forecast'),
]
