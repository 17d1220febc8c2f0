import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.catalog.models import Product
from backend.catalog.utils import check_threshold
from backend.core.permissions import IsAdminOrStaffForWrites
from backend.purchasing.serializers import PurchaseOrderSerializer
from .models import StockMovement
from .serializers import StockMovementSerializer, StockMovementCreateSerializer, ProductStockSerializer
from .services import record_stock_movement, InsufficientStockError

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def stock_movement_list_create(request):
    """List stock movements or record a new one"""
    if request.method == 'GET':
        queryset = StockMovement.objects.select_related('product', 'supplier', 'created_by').all()

        product = request.query_params.get('product', None)
        movement_type = request.query_params.get('movement_type', None)
        date_from = request.query_params.get('date_from', None)
        date_to = request.query_params.get('date_to', None)

        if product:
            queryset = queryset.filter(product_id=product)
        if movement_type:
            queryset = queryset.filter(movement_type=movement_type.upper())
        if date_from:
            queryset = queryset.filter(movement_date__date__gte=date_from)
        if date_to:
            queryset = queryset.filter(movement_date__date__lte=date_to)

        serializer = StockMovementSerializer(queryset, many=True)
        return Response(serializer.data)

    # POST
    serializer = StockMovementCreateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    data = serializer.validated_data
    product = get_object_or_404(Product, pk=data['product'])

    try:
        movement, purchase_order = record_stock_movement(
            product,
            data['movement_type'],
            data['quantity'],
            user=request.user,
            remarks=data.get('remarks', ''),
            supplier=data.get('supplier'),
            movement_date=data.get('movement_date'),
            reference=data.get('reference', ''),
            request=request,
        )
    except InsufficientStockError as e:
        logger.info(str(e))
        return Response({'message': 'Not enough stock available'}, status=status.HTTP_400_BAD_REQUEST)

    product.refresh_from_db()
    warning = None
    if product.stock_qty < product.min_threshold:
        warning = f"Product '{product.name}' is below threshold ({product.stock_qty}/{product.min_threshold})"

    response = {
        'message': 'Stock movement recorded',
        'movement': StockMovementSerializer(movement).data,
        'product': ProductStockSerializer(product).data,
        'threshold': check_threshold(product),
        'warning': warning,
    }
    if purchase_order is not None:
        response['purchase_order'] = PurchaseOrderSerializer(purchase_order).data
    return Response(response, status=status.HTTP_201_CREATED)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def stock_movement_detail(request, pk):
    """Retrieve a stock movement"""
    movement = get_object_or_404(StockMovement.objects.select_related('product', 'supplier', 'created_by'), pk=pk)
    return Response(StockMovementSerializer(movement).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_stock_movements(request, product_id):
    """All movements of one product, newest first"""
    product = get_object_or_404(Product, pk=product_id)
    movements = StockMovement.objects.filter(product=product).select_related('supplier', 'created_by')
    serializer = StockMovementSerializer(movements, many=True)
    return Response({'count': len(serializer.data), 'movements': serializer.data})
