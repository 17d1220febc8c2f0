from rest_framework import serializers
from .models import Product
from .utils import stock_level, stock_capacity_status


class ProductSerializer(serializers.ModelSerializer):
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    supplier_email = serializers.CharField(source='supplier.email', read_only=True, default=None)
    stock_level = serializers.SerializerMethodField()
    stock_status = serializers.SerializerMethodField()
    demand_forecast = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'category', 'description',
            'supplier', 'supplier_name', 'supplier_email',
            'stock_qty', 'min_threshold', 'max_threshold', 'reorder_point', 'reorder_quantity', 'lead_time',
            'unit_price', 'cost_price', 'stock_level', 'stock_status', 'demand_forecast',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def get_stock_level(self, obj):
        return stock_level(obj)

    def get_stock_status(self, obj):
        return stock_capacity_status(obj)

    def get_demand_forecast(self, obj):
        return {
            'next_month': obj.forecast_next_month,
            'next_quarter': obj.forecast_next_quarter,
            'confidence': obj.forecast_confidence,
            'trend': obj.forecast_trend,
            'last_updated': obj.forecast_updated_at.isoformat() if obj.forecast_updated_at else None,
        }

    def validate_stock_qty(self, value):
        if value < 0:
            raise serializers.ValidationError("Stock quantity cannot be negative")
        return value

    def validate(self, attrs):
        min_threshold = attrs.get('min_threshold', getattr(self.instance, 'min_threshold', 10))
        max_threshold = attrs.get('max_threshold', getattr(self.instance, 'max_threshold', 100))
        if max_threshold and min_threshold > max_threshold:
            raise serializers.ValidationError({'min_threshold': 'Minimum threshold cannot exceed maximum threshold'})
        return attrs


class ProductSummarySerializer(serializers.ModelSerializer):
    """Compact product representation embedded in movements and orders"""
    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'category', 'stock_qty', 'min_threshold', 'reorder_point']
