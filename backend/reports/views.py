import logging
import re
from datetime import timedelta
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Sum, Count, F, Q
from django.utils import timezone

from backend.catalog.models import Product
from backend.catalog.serializers import ProductSerializer, ProductSummarySerializer
from backend.forecasting.services import shift_month, month_key, month_start
from backend.inventory.models import StockMovement
from backend.inventory.serializers import StockMovementSerializer
from backend.parties.models import Supplier
from backend.parties.serializers import SupplierSerializer
from backend.purchasing.models import PurchaseOrder
from backend.purchasing.serializers import PurchaseOrderSerializer

logger = logging.getLogger('backend.reports')

MONTH_RE = re.compile(r'^\d{4}-\d{2}$')
SUPPLIER_DELAY_DAYS = 14


def low_stock_products():
    return Product.objects.filter(stock_qty__lt=F('min_threshold'))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_summary(request):
    """Headline counts for the reports page"""
    return Response({
        'total_products': Product.objects.count(),
        'total_suppliers': Supplier.objects.count(),
        'low_stock_products': low_stock_products().count(),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def top_products(request):
    """Top 5 products by total moved quantity (IN and OUT)"""
    rows = (
        StockMovement.objects
        .values('product_id', 'product__name', 'product__sku')
        .annotate(total_qty=Sum('quantity'), movement_count=Count('id'))
        .order_by('-total_qty')[:5]
    )
    return Response([
        {
            'product_id': row['product_id'],
            'name': row['product__name'],
            'sku': row['product__sku'],
            'total_qty': row['total_qty'],
            'movement_count': row['movement_count'],
        }
        for row in rows
    ])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def recent_movements(request):
    movements = StockMovement.objects.select_related('product', 'supplier', 'created_by').order_by('-created_at', '-id')[:10]
    return Response(StockMovementSerializer(movements, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_stock_report(request):
    products = Product.objects.select_related('supplier').all()
    return Response(ProductSerializer(products, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_report(request):
    suppliers = Supplier.objects.annotate(product_count=Count('products')).order_by('name')
    data = SupplierSerializer(suppliers, many=True).data
    for row, supplier in zip(data, suppliers):
        row['product_count'] = supplier.product_count
    return Response(data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def purchase_order_report(request):
    orders = PurchaseOrder.objects.select_related('product', 'supplier', 'created_by').all()
    return Response(PurchaseOrderSerializer(orders, many=True).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def low_stock_report(request):
    products = low_stock_products().select_related('supplier').order_by('stock_qty')
    return Response(ProductSerializer(products, many=True).data)


def monthly_activity(start, end):
    """Movement totals for movements dated (or recorded) within [start, end)"""
    in_range = StockMovement.objects.filter(
        Q(movement_date__gte=start, movement_date__lt=end) | Q(created_at__gte=start, created_at__lt=end)
    )
    outbound = in_range.filter(movement_type=StockMovement.TYPE_OUT)

    movements = {
        row['movement_type']: row['total_qty']
        for row in in_range.values('movement_type').annotate(total_qty=Sum('quantity'))
    }
    top_sold = (
        outbound.values('product_id', 'product__name')
        .annotate(total_sold=Sum('quantity'))
        .order_by('-total_sold')[:5]
    )
    return {
        'movements': movements,
        'total_sales': outbound.aggregate(total=Sum('quantity'))['total'] or 0,
        'top_products': [
            {'product_id': row['product_id'], 'name': row['product__name'], 'total_sold': row['total_sold']}
            for row in top_sold
        ],
        'total_damaged': in_range.filter(remarks__icontains='damaged').aggregate(total=Sum('quantity'))['total'] or 0,
    }


def has_activity(activity):
    return bool(activity['movements'] or activity['total_sales'] or activity['top_products'] or activity['total_damaged'])


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def monthly_report(request):
    """
    Monthly stock report as JSON.

    `month` (YYYY-MM) selects the month. Without it the current month is
    reported, or the previous month when the current one has no IN/OUT
    activity yet.
    """
    month_param = (request.query_params.get('month') or '').strip()
    now = timezone.localtime()

    if month_param:
        # year 9999 is excluded: the report also needs the following month
        if not MONTH_RE.match(month_param) or not (
            1 <= int(month_param[5:]) <= 12 and 1 <= int(month_param[:4]) < 9999
        ):
            return Response({'error': 'month must be in YYYY-MM format'}, status=status.HTTP_400_BAD_REQUEST)
        year, month = int(month_param[:4]), int(month_param[5:])
    else:
        year, month = now.year, now.month

    start = month_start(now, year, month)
    end = month_start(now, *shift_month(year, month, 1))
    activity = monthly_activity(start, end)
    label = month_key(year, month)

    has_in_or_out = any(key in activity['movements'] for key in (StockMovement.TYPE_IN, StockMovement.TYPE_OUT))
    if not month_param and (not has_in_or_out or (activity['total_sales'] == 0 and not activity['top_products'])):
        prev_year, prev_month = shift_month(year, month, -1)
        previous = monthly_activity(month_start(now, prev_year, prev_month), start)
        if has_activity(previous):
            activity = previous
            label = month_key(prev_year, prev_month)
            logger.info(f"Monthly report: no activity this month, reporting {label}")

    snapshot = Product.objects.aggregate(total_products=Count('id'), total_stock_qty=Sum('stock_qty'))
    return Response({
        'month': label,
        'movements': {
            'IN': activity['movements'].get(StockMovement.TYPE_IN, 0),
            'OUT': activity['movements'].get(StockMovement.TYPE_OUT, 0),
        },
        'total_sales': activity['total_sales'],
        'top_products': activity['top_products'],
        'total_damaged': activity['total_damaged'],
        'inventory': {
            'total_products': snapshot['total_products'] or 0,
            'total_stock_qty': snapshot['total_stock_qty'] or 0,
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def alerts(request):
    """Low stock, predicted shortage and supplier delay alerts"""
    results = []

    for product in low_stock_products().only('id', 'name', 'stock_qty', 'min_threshold'):
        results.append({
            'type': 'Low Stock',
            'product_id': product.id,
            'message': f"Product '{product.name}' is below threshold ({product.stock_qty}/{product.min_threshold})",
        })

    near_shortage = Product.objects.filter(stock_qty__lt=F('min_threshold') * 2).only('id', 'name')
    for product in near_shortage:
        results.append({
            'type': 'Predicted Shortage',
            'product_id': product.id,
            'message': f"Product '{product.name}' may run short soon.",
        })

    cutoff = timezone.now() - timedelta(days=SUPPLIER_DELAY_DAYS)
    delayed = PurchaseOrder.objects.filter(status=PurchaseOrder.STATUS_PENDING, created_at__lt=cutoff).select_related('supplier')
    for order in delayed:
        supplier_name = order.supplier.name if order.supplier else 'Unknown'
        results.append({
            'type': 'Supplier Delay',
            'purchase_order_id': order.id,
            'message': f"Pending PO older than {SUPPLIER_DELAY_DAYS} days for supplier '{supplier_name}'",
        })

    return Response(results)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard_summary(request):
    total_units = Product.objects.aggregate(total=Sum('stock_qty'))['total'] or 0
    low_stock = low_stock_products().order_by('stock_qty')[:20]
    recent = StockMovement.objects.select_related('product', 'supplier', 'created_by').order_by('-created_at', '-id')[:5]

    return Response({
        'total_products': Product.objects.count(),
        'total_units_in_inventory': total_units,
        'low_stock': ProductSummarySerializer(low_stock, many=True).data,
        'recent_movements': StockMovementSerializer(recent, many=True).data,
    })
