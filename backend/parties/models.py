from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class Supplier(models.Model):
    """Suppliers that purchase orders are addressed to"""
    name = models.CharField(max_length=200)
    code = models.CharField(max_length=50, unique=True, blank=True, null=True)
    company_name = models.CharField(max_length=200, blank=True)
    contact_person = models.CharField(max_length=200, blank=True)
    email = models.EmailField(blank=True)
    phone = models.CharField(max_length=20, blank=True)
    address = models.TextField(blank=True)
    city = models.CharField(max_length=100, blank=True)
    state = models.CharField(max_length=100, blank=True)
    country = models.CharField(max_length=100, default='India')
    postal_code = models.CharField(max_length=20, blank=True)
    tax_id = models.CharField(max_length=50, blank=True)
    payment_terms = models.CharField(max_length=50, default='Net 30')

    # Performance metrics
    rating = models.FloatField(default=5.0, validators=[MinValueValidator(1), MaxValueValidator(5)])
    on_time_delivery = models.FloatField(default=0.95, validators=[MinValueValidator(0), MaxValueValidator(1)])
    quality_rating = models.FloatField(default=4.5, validators=[MinValueValidator(1), MaxValueValidator(5)])
    avg_lead_time = models.PositiveIntegerField(default=7)
    total_orders = models.PositiveIntegerField(default=0)
    successful_orders = models.PositiveIntegerField(default=0)

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def performance_score(self):
        """Weighted score out of 100: delivery 40, quality 30, reliability 30"""
        delivery_score = self.on_time_delivery * 40
        quality_score = (self.quality_rating / 5) * 30
        reliability_score = (self.successful_orders / self.total_orders) * 30 if self.total_orders > 0 else 0
        return round(delivery_score + quality_score + reliability_score, 2)

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']
        indexes = [
            models.Index(fields=['is_active'], name='idx_supplier_active'),
        ]
