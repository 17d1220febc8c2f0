import django_filters
from django.db.models import F, Q
from .models import Product


def parse_bool(value):
    """Interpret 'true'/'false' style query values; None when empty"""
    if value is None or value == '':
        return None
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes')
    return bool(value)


class ProductFilter(django_filters.FilterSet):
    """Filter for Product list endpoints"""

    # Basic search - searches across name, SKU, description, category
    search = django_filters.CharFilter(method='filter_search', label='Search')

    category = django_filters.CharFilter(field_name='category', lookup_expr='iexact')
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    active = django_filters.CharFilter(method='filter_active', label='Active')

    # Stock status filters
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'supplier', 'active', 'low_stock', 'out_of_stock']

    def filter_search(self, queryset, name, value):
        if not value:
            return queryset
        value = value.strip()
        return queryset.filter(
            Q(name__icontains=value) | Q(sku__icontains=value) |
            Q(description__icontains=value) | Q(category__icontains=value)
        )

    def filter_active(self, queryset, name, value):
        is_active = parse_bool(value)
        if is_active is None:
            return queryset
        return queryset.filter(is_active=is_active)

    def filter_low_stock(self, queryset, name, value):
        """Products whose stock is below their minimum threshold"""
        if parse_bool(value):
            return queryset.filter(stock_qty__lt=F('min_threshold'))
        return queryset

    def filter_out_of_stock(self, queryset, name, value):
        if parse_bool(value):
            return queryset.filter(stock_qty__lte=0)
        return queryset
