from rest_framework import serializers
from backend.catalog.models import Product
from backend.catalog.serializers import ProductSummarySerializer
from backend.parties.models import Supplier
from .models import StockMovement


class StockMovementSerializer(serializers.ModelSerializer):
    product_detail = ProductSummarySerializer(source='product', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockMovement
        fields = [
            'id', 'product', 'product_detail', 'movement_type', 'quantity', 'remarks',
            'supplier', 'supplier_name', 'previous_stock', 'new_stock', 'reference',
            'movement_date', 'created_by', 'created_by_username', 'created_at',
        ]
        read_only_fields = [
            'product', 'movement_type', 'quantity', 'remarks', 'supplier', 'previous_stock',
            'new_stock', 'reference', 'movement_date', 'created_by', 'created_at',
        ]


class StockMovementCreateSerializer(serializers.Serializer):
    """Input for recording a stock movement"""
    product = serializers.IntegerField()
    movement_type = serializers.ChoiceField(choices=StockMovement.MOVEMENT_TYPE_CHOICES)
    quantity = serializers.IntegerField(min_value=1)
    remarks = serializers.CharField(required=False, allow_blank=True, default='')
    supplier = serializers.PrimaryKeyRelatedField(queryset=Supplier.objects.all(), required=False, allow_null=True)
    movement_date = serializers.DateTimeField(required=False, allow_null=True)
    reference = serializers.CharField(required=False, allow_blank=True, default='', max_length=100)

    def to_internal_value(self, data):
        # accept the legacy client field names
        if hasattr(data, 'copy'):
            data = data.copy()
        aliases = {'productId': 'product', 'movementType': 'movement_type', 'supplierId': 'supplier', 'date': 'movement_date'}
        for alias, field in aliases.items():
            if alias in data and field not in data:
                data[field] = data[alias]
        if isinstance(data.get('movement_type'), str):
            data['movement_type'] = data['movement_type'].upper()
        return super().to_internal_value(data)


class ProductStockSerializer(serializers.ModelSerializer):
    class Meta:
        model = Product
        fields = ['id', 'name', 'sku', 'stock_qty', 'min_threshold', 'max_threshold', 'reorder_point']
