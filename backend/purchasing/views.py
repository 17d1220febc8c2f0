import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated, AllowAny
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.template.loader import render_to_string
from backend.core.notifications import send_purchase_order_email
from backend.core.permissions import IsAdminOrStaff, IsAdminOrStaffForWrites
from backend.core.utils import create_audit_log, field_changes
from .approval import verify_approval_token
from .models import PurchaseOrder
from .serializers import PurchaseOrderSerializer, PurchaseOrderStatusSerializer

logger = logging.getLogger(__name__)


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def purchase_order_list_create(request):
    """List purchase orders or create a new one"""
    if request.method == 'GET':
        queryset = PurchaseOrder.objects.select_related('product', 'supplier', 'created_by').all()

        status_filter = request.query_params.get('status', None)
        supplier = request.query_params.get('supplier', None)
        product = request.query_params.get('product', None)
        auto = request.query_params.get('auto', None)

        if status_filter:
            queryset = queryset.filter(status=status_filter)
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        if product:
            queryset = queryset.filter(product_id=product)
        if auto is not None:
            queryset = queryset.filter(is_auto_generated=auto.lower() in ('true', '1', 'yes'))

        serializer = PurchaseOrderSerializer(queryset, many=True)
        return Response(serializer.data)
    else:  # POST
        serializer = PurchaseOrderSerializer(data=request.data)
        if serializer.is_valid():
            order = serializer.save(created_by=request.user)
            create_audit_log(
                request=request,
                action='po_create',
                model_name='PurchaseOrder',
                object_id=str(order.id),
                object_name=order.product.name,
                object_reference=f"PO-{order.id}",
                changes={'quantity': order.quantity, 'supplier': order.supplier.name, 'status': order.status},
            )
            email_sent = send_purchase_order_email(order)
            return Response({
                'message': 'Purchase order created & email sent' if email_sent else 'Purchase order created',
                'email_sent': email_sent,
                'purchase_order': PurchaseOrderSerializer(order).data,
            }, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def purchase_order_detail(request, pk):
    """Retrieve or delete a purchase order"""
    order = get_object_or_404(PurchaseOrder.objects.select_related('product', 'supplier', 'created_by'), pk=pk)

    if request.method == 'GET':
        return Response(PurchaseOrderSerializer(order).data)

    create_audit_log(
        request=request,
        action='delete',
        model_name='PurchaseOrder',
        object_id=str(order.id),
        object_name=order.product.name,
        object_reference=f"PO-{order.id}",
    )
    order.delete()
    return Response({'message': 'Purchase order deleted'}, status=status.HTTP_200_OK)


@api_view(['PUT', 'PATCH'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def purchase_order_status(request, pk):
    """Update only the status of a purchase order"""
    order = get_object_or_404(PurchaseOrder.objects.select_related('product', 'supplier'), pk=pk)
    serializer = PurchaseOrderStatusSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    changes = field_changes(order, serializer.validated_data)
    order.status = serializer.validated_data['status']
    order.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request,
        action='po_status',
        model_name='PurchaseOrder',
        object_id=str(order.id),
        object_name=order.product.name,
        object_reference=f"PO-{order.id}",
        changes=changes,
    )
    return Response({
        'message': 'Purchase order status updated',
        'purchase_order': PurchaseOrderSerializer(order).data,
    })


@api_view(['GET'])
@permission_classes([AllowAny])
def purchase_order_approve(request, pk, token):
    """Approve a purchase order from a signed e-mail link"""
    if not verify_approval_token(pk, token):
        logger.warning(f"Rejected approval link for purchase order {pk}")
        return HttpResponse('Invalid or expired approval link', status=401, content_type='text/plain')

    order = PurchaseOrder.objects.select_related('product', 'supplier').filter(pk=pk).first()
    if order is None:
        return HttpResponse('Purchase order not found', status=404, content_type='text/plain')

    order.status = PurchaseOrder.STATUS_APPROVED
    order.save(update_fields=['status', 'updated_at'])
    create_audit_log(
        request=request,
        action='po_approve',
        model_name='PurchaseOrder',
        object_id=str(order.id),
        object_name=order.product.name,
        object_reference=f"PO-{order.id}",
        changes={'status': order.status, 'via': 'approval_link'},
    )
    send_purchase_order_email(order)
    logger.info(f"Purchase order {order.pk} approved via signed link")
    return HttpResponse(render_to_string('purchasing/approved.html', {'order': order}))
