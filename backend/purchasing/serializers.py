from rest_framework import serializers
from backend.catalog.serializers import ProductSummarySerializer
from .models import PurchaseOrder


class PurchaseOrderSerializer(serializers.ModelSerializer):
    product_detail = ProductSummarySerializer(source='product', read_only=True)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True)
    supplier_email = serializers.CharField(source='supplier.email', read_only=True)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = PurchaseOrder
        fields = [
            'id', 'product', 'product_detail', 'supplier', 'supplier_name', 'supplier_email',
            'quantity', 'status', 'created_by', 'created_by_username',
            'expected_date', 'received_date', 'notes', 'is_auto_generated',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['created_by', 'is_auto_generated', 'created_at', 'updated_at']
        extra_kwargs = {
            'expected_date': {'required': True, 'allow_null': False},
        }

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError("Quantity must be greater than zero")
        return value

    def validate_supplier(self, value):
        if not value.is_active:
            raise serializers.ValidationError("Supplier is inactive")
        return value


class PurchaseOrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=PurchaseOrder.STATUS_CHOICES)
