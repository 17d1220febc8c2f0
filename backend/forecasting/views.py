import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated
from django.shortcuts import get_object_or_404
from backend.catalog.models import Product
from backend.core.permissions import IsAdminOrStaff
from .heuristics import reorder_decision, action_items
from . import services

logger = logging.getLogger(__name__)


def parse_period(request, default=services.STATISTICAL_WINDOW_DAYS):
    try:
        period = int(request.query_params.get('period', default))
    except (TypeError, ValueError):
        return default
    return period if period > 0 else default


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def demand_forecast(request, product_id):
    """AI forecast for a product with reorder recommendations; saves the forecast on the product"""
    product = get_object_or_404(Product.objects.select_related('supplier'), pk=product_id)
    forecast = services.ai_forecast(product, fallback_window=parse_period(request))
    services.save_product_forecast(product, forecast)

    return Response({
        'success': True,
        'product': services.product_block(product),
        'forecast': forecast,
        'recommendations': reorder_decision(product, forecast),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def gemini_forecast(request, product_id):
    product = get_object_or_404(Product, pk=product_id)
    return Response({
        'success': True,
        'product': {'id': product.pk, 'name': product.name, 'sku': product.sku},
        'forecast': services.ai_forecast(product),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_anomalies(request, product_id):
    """Anomaly report for the last 14 days of demand"""
    product = get_object_or_404(Product, pk=product_id)
    anomalies = services.anomaly_report(product)

    return Response({
        'success': True,
        'product': {'id': product.pk, 'name': product.name, 'sku': product.sku},
        'anomalies': anomalies,
        'risk_assessment': {
            'level': 'high' if anomalies['has_anomaly'] else 'low',
            'description': anomalies['description'],
            'recommended_action': (
                'Monitor closely and adjust inventory accordingly'
                if anomalies['has_anomaly'] else 'Continue normal operations'
            ),
        },
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def product_insights(request, product_id):
    product = get_object_or_404(Product.objects.select_related('supplier'), pk=product_id)
    insights = services.product_insights(product)

    return Response({
        'success': True,
        'product': services.product_block(product),
        'insights': insights,
        'action_items': action_items(product, insights),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def inventory_dashboard(request):
    data = services.inventory_dashboard()
    return Response({'success': True, **data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def demand_trends(request):
    """Statistical trend per active product, grouped by category"""
    data = services.demand_trends(
        category=request.query_params.get('category') or None,
        window_days=parse_period(request),
    )
    return Response({'success': True, **data})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def sales_trends(request):
    return Response(services.sales_trends())


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def global_demand_forecast(request):
    return Response(services.global_demand_forecast())


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminOrStaff])
def batch_forecast(request):
    """Insights for several products at once"""
    product_ids = request.data.get('product_ids')
    if not isinstance(product_ids, list) or not product_ids:
        return Response({'error': 'product_ids must be a non-empty list'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        product_ids = [int(product_id) for product_id in product_ids]
    except (TypeError, ValueError):
        return Response({'error': 'product_ids must contain integers'}, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"Batch forecast requested for {len(product_ids)} products by {request.user}")
    return Response(services.batch_forecast(product_ids))
