from django.conf import settings
from django.db import models
from django.utils import timezone
from backend.catalog.models import Product
from backend.parties.models import Supplier


class StockMovement(models.Model):
    """A single stock-in or stock-out event for a product"""
    TYPE_IN = 'IN'
    TYPE_OUT = 'OUT'

    MOVEMENT_TYPE_CHOICES = [
        (TYPE_IN, 'Stock In'),
        (TYPE_OUT, 'Stock Out'),
    ]

    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='movements')
    movement_type = models.CharField(max_length=3, choices=MOVEMENT_TYPE_CHOICES)
    quantity = models.PositiveIntegerField()
    remarks = models.TextField(blank=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.SET_NULL, null=True, blank=True, related_name='movements')
    previous_stock = models.IntegerField(default=0)
    new_stock = models.IntegerField(default=0)
    reference = models.CharField(max_length=100, blank=True)
    movement_date = models.DateTimeField(default=timezone.now, db_index=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='stock_movements')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.movement_type} {self.quantity} x {self.product.name}"

    class Meta:
        db_table = 'stock_movements'
        ordering = ['-movement_date', '-id']
        indexes = [
            models.Index(fields=['product', 'movement_type', 'movement_date'], name='idx_movement_product_type'),
            models.Index(fields=['movement_type', 'movement_date'], name='idx_movement_type_date'),
        ]
