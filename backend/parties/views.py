from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.db.models import Q
from django.shortcuts import get_object_or_404
from backend.core.permissions import IsAdminOrStaffForWrites
from backend.core.utils import create_audit_log
from .models import Supplier
from .performance import delivery_performance
from .serializers import SupplierSerializer, SupplierPerformanceSerializer


# Supplier views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def supplier_list_create(request):
    """List all suppliers or create a new supplier"""
    if request.method == 'GET':
        queryset = Supplier.objects.all()
        search = request.query_params.get('search', None)
        active = request.query_params.get('active', None)

        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(company_name__icontains=search) |
                Q(code__icontains=search) | Q(email__icontains=search)
            )
        if active is not None and active != '':
            queryset = queryset.filter(is_active=active.lower() == 'true')

        serializer = SupplierSerializer(queryset, many=True)
        return Response(serializer.data)
    else:
        serializer = SupplierSerializer(data=request.data)
        if serializer.is_valid():
            supplier = serializer.save()
            create_audit_log(
                request=request,
                action='create',
                model_name='Supplier',
                object_id=str(supplier.id),
                object_name=supplier.name,
                object_reference=supplier.code,
            )
            return Response(serializer.data, status=status.HTTP_201_CREATED)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminOrStaffForWrites])
def supplier_detail(request, pk):
    """Retrieve, update or deactivate a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)

    if request.method == 'GET':
        serializer = SupplierSerializer(supplier)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = SupplierSerializer(supplier, data=request.data, partial=request.method == 'PATCH')
        if serializer.is_valid():
            serializer.save()
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        # Soft delete: orders and movements keep their supplier
        supplier.is_active = False
        supplier.save(update_fields=['is_active', 'updated_at'])
        create_audit_log(
            request=request,
            action='delete',
            model_name='Supplier',
            object_id=str(supplier.id),
            object_name=supplier.name,
            changes={'is_active': False},
        )
        return Response({'message': 'Supplier deactivated successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def supplier_performance(request, pk):
    """Performance metrics stored on a supplier"""
    supplier = get_object_or_404(Supplier, pk=pk)
    return Response(SupplierPerformanceSerializer(supplier).data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def suppliers_performance(request):
    """Delivery performance for every supplier with purchase orders"""
    return Response(delivery_performance(Supplier.objects.all()))
