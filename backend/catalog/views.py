import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.core.notifications import send_plain_email
from backend.core.permissions import IsAdminOrStaffForWrites
from backend.core.utils import create_audit_log, field_changes
from .filters import ProductFilter
from .models import Product
from .serializers import ProductSerializer

logger = logging.getLogger(__name__)


def notify_supplier_of_new_product(product):
    """Let the linked supplier know a product now references them"""
    supplier = product.supplier
    if supplier is None or not supplier.email:
        return False
    return send_plain_email(
        supplier.email,
        "New Product Added",
        f"Dear {supplier.name},\n\n"
        f"A new product \"{product.name}\" (SKU: {product.sku}) has been added to the inventory "
        f"and linked to you.\n\nRegards,\nInventory System",
    )


# Product views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def product_list_create(request):
    """List all products or create a new product"""
    if request.method == 'GET':
        queryset = Product.objects.select_related('supplier').all()
        filterset = ProductFilter(request.query_params, queryset=queryset)
        if not filterset.is_valid():
            return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
        serializer = ProductSerializer(filterset.qs, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = ProductSerializer(data=request.data)
        if serializer.is_valid():
            product = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                object_reference=product.sku,
                changes={'stock_qty': product.stock_qty, 'min_threshold': product.min_threshold},
            )
            notify_supplier_of_new_product(product)
            return Response(ProductSerializer(product).data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def product_detail(request, pk):
    """Retrieve, update or delete a product"""
    product = get_object_or_404(Product.objects.select_related('supplier'), pk=pk)

    if request.method == 'GET':
        serializer = ProductSerializer(product)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ProductSerializer(product, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            changes = field_changes(product, serializer.validated_data)
            serializer.save()
            create_audit_log(
                request=request,
                action='update',
                model_name='Product',
                object_id=str(product.id),
                object_name=product.name,
                object_reference=product.sku,
                changes=changes,
            )
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        create_audit_log(
            request=request,
            action='delete',
            model_name='Product',
            object_id=str(product.id),
            object_name=product.name,
            object_reference=product.sku,
        )
        product.delete()
        logger.info(f"Product {pk} deleted by {request.user}")
        return Response({'message': 'Product deleted'}, status=status.HTTP_200_OK)
