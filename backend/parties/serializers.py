from rest_framework import serializers
from .models import Supplier


class SupplierSerializer(serializers.ModelSerializer):
    performance_score = serializers.FloatField(read_only=True)

    class Meta:
        model = Supplier
        fields = [
            'id', 'name', 'code', 'company_name', 'contact_person', 'email', 'phone', 'address',
            'city', 'state', 'country', 'postal_code', 'tax_id', 'payment_terms',
            'rating', 'on_time_delivery', 'quality_rating', 'avg_lead_time',
            'total_orders', 'successful_orders', 'performance_score',
            'is_active', 'created_at', 'updated_at',
        ]
        read_only_fields = ['created_at', 'updated_at']

    def validate_email(self, value):
        if not value:
            return value
        queryset = Supplier.objects.filter(email__iexact=value)
        if self.instance is not None:
            queryset = queryset.exclude(pk=self.instance.pk)
        if queryset.exists():
            raise serializers.ValidationError("Supplier with this email already exists")
        return value


class SupplierPerformanceSerializer(serializers.ModelSerializer):
    performance_score = serializers.FloatField(read_only=True)

    class Meta:
        model = Supplier
        fields = ['on_time_delivery', 'quality_rating', 'avg_lead_time', 'total_orders', 'successful_orders', 'performance_score']
