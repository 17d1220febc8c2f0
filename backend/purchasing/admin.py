from django.contrib import admin
from .models import PurchaseOrder


@admin.register(PurchaseOrder)
class PurchaseOrderAdmin(admin.ModelAdmin):
    list_display = ['id', 'product', 'supplier', 'quantity', 'status', 'is_auto_generated', 'expected_date', 'created_at']
    list_filter = ['status', 'is_auto_generated', 'supplier', 'created_at']
    search_fields = ['product__name', 'product__sku', 'supplier__name', 'notes']
    ordering = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']
