"""
Database-facing side of demand forecasting.

Loads outbound movement history for products and feeds it to the pure
heuristics in heuristics.py. None of these functions raise on forecasting
failures: errors are logged and a default result is returned instead.
"""
import logging
from datetime import timedelta

from django.db.models import Sum
from django.db.models.functions import TruncMonth
from django.utils import timezone

from backend.catalog.models import Product
from backend.catalog.utils import stock_level
from backend.inventory.models import StockMovement
from .ai import GeminiForecaster
from .heuristics import (
    DemandRecord, SOURCE_STATISTICAL, TREND_STABLE, empty_forecast, no_anomaly,
    trend_forecast, detect_anomalies, compare_forecasts, reorder_urgency, risk_level,
    round_half_up,
)

logger = logging.getLogger(__name__)

STATISTICAL_WINDOW_DAYS = 30
ANOMALY_WINDOW_DAYS = 14
AI_WINDOW_DAYS = 90


def load_demand_records(product, window_days, now=None):
    """OUT movements of a product whose movement_date falls in the window ending now"""
    now = now or timezone.now()
    start = now - timedelta(days=window_days)
    rows = (
        StockMovement.objects
        .filter(
            product=product,
            movement_type=StockMovement.TYPE_OUT,
            movement_date__gte=start,
            movement_date__lte=now,
        )
        .order_by('movement_date', 'id')
        .values_list('movement_date', 'quantity')
    )
    return [DemandRecord(timezone.localtime(moved_at), quantity) for moved_at, quantity in rows]


def statistical_forecast(product, window_days=STATISTICAL_WINDOW_DAYS, now=None):
    try:
        return trend_forecast(load_demand_records(product, window_days, now), window_days)
    except Exception as e:
        logger.error(f"Statistical forecast failed for product {product.pk}: {str(e)}")
        return empty_forecast(trend='unknown')


def anomaly_report(product, now=None):
    try:
        return detect_anomalies(load_demand_records(product, ANOMALY_WINDOW_DAYS, now), ANOMALY_WINDOW_DAYS)
    except Exception as e:
        logger.error(f"Anomaly detection failed for product {product.pk}: {str(e)}")
        return no_anomaly('Error in anomaly detection')


def ai_forecast(product, forecaster=None, fallback_window=STATISTICAL_WINDOW_DAYS, now=None):
    """AI forecast over the last 90 days; the statistical forecast stands in on error"""
    forecaster = forecaster or GeminiForecaster()
    try:
        return forecaster.forecast(load_demand_records(product, AI_WINDOW_DAYS, now))
    except Exception as e:
        logger.error(f"AI forecast failed for product {product.pk}, using statistical method: {str(e)}")
        forecast = statistical_forecast(product, fallback_window, now)
        forecast.update({
            'source': SOURCE_STATISTICAL,
            'anomalies': 'forecast_error',
            'reasoning': 'AI forecast failed, using statistical method',
        })
        return forecast


def product_insights(product, use_ai=True, forecaster=None, now=None):
    """Statistical and AI forecasts, anomalies and derived risk for one product"""
    statistical = statistical_forecast(product, now=now)
    anomalies = anomaly_report(product, now=now)
    ai = ai_forecast(product, forecaster=forecaster, now=now) if use_ai else None

    final = ai if ai and not ai.get('error') else statistical
    return {
        'forecast': final,
        'statistical_forecast': statistical,
        'ai_forecast': ai,
        'anomalies': anomalies,
        'insights': {
            'has_low_stock': (final.get('next_month') or 0) > 0 and (final.get('confidence') or 0) > 0.7,
            'reorder_urgency': reorder_urgency(final, anomalies),
            'market_trend': final.get('trend'),
            'risk_level': risk_level(final, anomalies),
            'forecast_method': final.get('source') or 'statistical',
        },
        'comparison': compare_forecasts(statistical, ai),
    }


def save_product_forecast(product, forecast):
    """Persist the headline numbers of a forecast onto the product"""
    trend = forecast.get('trend')
    if trend not in dict(Product.TREND_CHOICES):
        trend = TREND_STABLE
    try:
        confidence = float(forecast.get('confidence') or 0.5)
    except (TypeError, ValueError):
        confidence = 0.5

    product.forecast_next_month = int(forecast.get('next_month') or 0)
    product.forecast_next_quarter = int(forecast.get('next_quarter') or 0)
    product.forecast_confidence = confidence
    product.forecast_trend = trend
    product.forecast_updated_at = timezone.now()
    product.save(update_fields=[
        'forecast_next_month', 'forecast_next_quarter', 'forecast_confidence',
        'forecast_trend', 'forecast_updated_at', 'updated_at',
    ])
    return product


def product_block(product):
    supplier = product.supplier
    return {
        'id': product.pk,
        'name': product.name,
        'sku': product.sku,
        'category': product.category,
        'current_stock': product.stock_qty,
        'min_threshold': product.min_threshold,
        'reorder_point': product.reorder_point,
        'supplier': {'id': supplier.pk, 'name': supplier.name, 'email': supplier.email} if supplier else None,
    }


def batch_forecast(product_ids, forecaster=None):
    products = Product.objects.select_related('supplier').in_bulk(product_ids)
    forecasts = []
    missing = []
    for product_id in product_ids:
        product = products.get(product_id)
        if product is None:
            missing.append(product_id)
            continue
        forecasts.append({'product_id': product_id, **product_insights(product, forecaster=forecaster)})

    return {
        'success': True,
        'forecasts': forecasts,
        'missing': missing,
        'summary': {
            'total_products': len(forecasts),
            'high_risk_products': sum(1 for f in forecasts if f['insights']['risk_level'] == 'high'),
            'urgent_reorder': sum(1 for f in forecasts if f['insights']['reorder_urgency'] == 'high'),
        },
    }


def inventory_dashboard(forecaster=None):
    rows = []
    for product in Product.objects.filter(is_active=True).select_related('supplier'):
        insights = product_insights(product, forecaster=forecaster)
        rows.append({
            'product': {
                'id': product.pk,
                'name': product.name,
                'sku': product.sku,
                'category': product.category,
                'supplier': product.supplier.name if product.supplier else None,
            },
            'stock': {
                'current': product.stock_qty,
                'threshold': product.min_threshold,
                'reorder_point': product.reorder_point,
                'status': stock_level(product),
            },
            'forecast': insights['forecast'],
            'risk': insights['insights']['risk_level'],
            'urgency': insights['insights']['reorder_urgency'],
        })

    return {
        'summary': {
            'total_products': len(rows),
            'low_stock_products': sum(1 for row in rows if row['stock']['status'] == 'low'),
            'critical_products': sum(1 for row in rows if row['stock']['status'] == 'critical'),
            'high_risk_products': sum(1 for row in rows if row['risk'] == 'high'),
        },
        'products': rows,
    }


def demand_trends(category=None, window_days=STATISTICAL_WINDOW_DAYS):
    queryset = Product.objects.filter(is_active=True)
    if category:
        queryset = queryset.filter(category=category)

    trends = []
    for product in queryset:
        forecast = statistical_forecast(product, window_days)
        trends.append({
            'product_id': product.pk,
            'name': product.name,
            'category': product.category,
            'trend': forecast['trend'],
            'confidence': forecast['confidence'],
            'next_month_demand': forecast['next_month'],
            'current_stock': product.stock_qty,
        })

    grouped = {}
    for item in trends:
        grouped.setdefault(item['category'], []).append(item)

    return {
        'trends': grouped,
        'summary': {
            'increasing': sum(1 for t in trends if t['trend'] == 'increasing'),
            'decreasing': sum(1 for t in trends if t['trend'] == 'decreasing'),
            'stable': sum(1 for t in trends if t['trend'] == 'stable'),
        },
    }


def shift_month(year, month, delta):
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def month_key(year, month):
    return f"{year}-{month:02d}"


def month_start(reference, year, month):
    return reference.replace(year=year, month=month, day=1, hour=0, minute=0, second=0, microsecond=0)


def sales_trends(months=6, now=None):
    """OUT quantity per month for the last `months` months, current month included"""
    now = timezone.localtime(now or timezone.now())
    first_year, first_month = shift_month(now.year, now.month, -(months - 1))
    start = month_start(now, first_year, first_month)

    totals = (
        StockMovement.objects
        .filter(movement_type=StockMovement.TYPE_OUT, movement_date__gte=start)
        .annotate(month=TruncMonth('movement_date'))
        .values('month')
        .annotate(sales=Sum('quantity'))
    )
    by_month = {month_key(row['month'].year, row['month'].month): row['sales'] for row in totals}

    data = []
    for offset in range(months):
        key = month_key(*shift_month(first_year, first_month, offset))
        data.append({'month': key, 'sales': by_month.get(key, 0)})
    return data


def global_demand_forecast(now=None, fallback_base=100):
    """Next three months projected from last month's total OUT quantity, +5 % per month"""
    now = timezone.localtime(now or timezone.now())
    last_year, last_month = shift_month(now.year, now.month, -1)
    start = month_start(now, last_year, last_month)
    end = month_start(now, now.year, now.month)

    total = (
        StockMovement.objects
        .filter(movement_type=StockMovement.TYPE_OUT, movement_date__gte=start, movement_date__lt=end)
        .aggregate(total=Sum('quantity'))['total']
    )
    base = total or fallback_base

    forecasts = []
    for step in range(1, 4):
        key = month_key(*shift_month(now.year, now.month, step))
        forecasts.append({'month': key, 'forecast': round_half_up(base * (1 + 0.05 * step))})
    return forecasts
