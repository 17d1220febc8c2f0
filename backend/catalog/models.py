from django.db import models
from decimal import Decimal
from backend.parties.models import Supplier


class Product(models.Model):
    """Product master with stock level and reorder settings"""
    TREND_CHOICES = [
        ('increasing', 'Increasing'),
        ('decreasing', 'Decreasing'),
        ('stable', 'Stable'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    sku = models.CharField(max_length=100, unique=True, db_index=True)
    category = models.CharField(max_length=100, db_index=True)
    description = models.TextField(blank=True)
    supplier = models.ForeignKey(Supplier, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')

    # Stock levels
    stock_qty = models.IntegerField(default=0)
    min_threshold = models.PositiveIntegerField(default=10)
    max_threshold = models.PositiveIntegerField(default=100)
    reorder_point = models.PositiveIntegerField(default=15)
    reorder_quantity = models.PositiveIntegerField(default=50)
    lead_time = models.PositiveIntegerField(default=7, help_text='Supplier lead time in days')

    unit_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))
    cost_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('0.00'))

    # Last demand forecast computed for this product
    forecast_next_month = models.IntegerField(default=0)
    forecast_next_quarter = models.IntegerField(default=0)
    forecast_confidence = models.FloatField(default=0.8)
    forecast_trend = models.CharField(max_length=20, choices=TREND_CHOICES, default='stable')
    forecast_updated_at = models.DateTimeField(null=True, blank=True)

    is_active = models.BooleanField(default=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku})"

    @property
    def is_below_threshold(self):
        return self.stock_qty < self.min_threshold

    class Meta:
        db_table = 'products'
        ordering = ['name']
        indexes = [
            models.Index(fields=['category', 'supplier'], name='idx_product_category_supplier'),
            models.Index(fields=['stock_qty', 'min_threshold'], name='idx_product_stock_threshold'),
        ]
