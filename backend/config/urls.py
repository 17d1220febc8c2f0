"""
URL configuration for the StockAI backend.

Every app contributes its own urlpatterns under the versioned api/v1/ prefix.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "StockAI Inventory Admin"
admin.site.site_title = "StockAI Admin Portal"
admin.site.index_title = "Welcome to the StockAI Admin Portal"

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('backend.core.urls')),
    path('api/v1/', include('backend.parties.urls')),
    path('api/v1/', include('backend.catalog.urls')),
    path('api/v1/', include('backend.inventory.urls')),
    path('api/v1/', include('backend.purchasing.urls')),
    path('api/v1/', include('backend.forecasting.urls')),
    path('api/v1/', include('backend.reports.urls')),
]
