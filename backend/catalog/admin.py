from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'category', 'supplier', 'stock_qty', 'min_threshold', 'reorder_point', 'forecast_trend', 'is_active']
    list_filter = ['category', 'is_active', 'forecast_trend', 'created_at']
    search_fields = ['name', 'sku', 'category', 'description']
    ordering = ['name']
    readonly_fields = ['forecast_next_month', 'forecast_next_quarter', 'forecast_confidence', 'forecast_trend', 'forecast_updated_at', 'created_at', 'updated_at']
    raw_id_fields = ['supplier']
