"""
Demand forecasting heuristics.

Everything in this module is pure: functions take a list of DemandRecord
(outbound movements in ascending time order) or plain dicts and return plain
dicts, so they can be exercised without a database.
"""
import math
import random
import statistics
from datetime import datetime
from typing import Any, Dict, List, NamedTuple, Optional, Sequence


class DemandRecord(NamedTuple):
    timestamp: datetime
    quantity: int


TREND_INCREASING = 'increasing'
TREND_DECREASING = 'decreasing'
TREND_STABLE = 'stable'

SOURCE_STATISTICAL = 'statistical-method'
SOURCE_AI = 'gemini-ai'

MOCK_REASONS = [
    "Advanced pattern recognition indicates seasonal demand fluctuation",
    "Machine learning analysis shows correlation with market trends",
    "Deep learning model detected consumer behavior patterns",
    "AI algorithm identified supply chain optimization opportunities",
]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up"""
    return int(math.floor(value + 0.5))


def round2(value: float) -> float:
    return math.floor(value * 100 + 0.5) / 100


def classify_trend(trend_factor: float, upper: float = 1.2, lower: float = 0.8) -> str:
    if trend_factor > upper:
        return TREND_INCREASING
    if trend_factor < lower:
        return TREND_DECREASING
    return TREND_STABLE


def empty_forecast(trend: str = TREND_STABLE) -> Dict[str, Any]:
    return {
        'daily_average': 0,
        'trend_factor': 0,
        'trend': trend,
        'next_month': 0,
        'next_quarter': 0,
        'confidence': 0.5,
        'data_points': 0,
        'source': SOURCE_STATISTICAL,
    }


def trend_forecast(records: Sequence[DemandRecord], window_days: int = 30) -> Dict[str, Any]:
    """
    Moving-average forecast with a recent-versus-window trend adjustment.

    The daily average spreads the window's total over every day of the
    window. The most recent min(7, window_days // 4) records (at least one)
    form the recent sub-window; their mean divided by the daily average is the
    trend factor, which scales the 30 and 90 day projections.
    """
    if not records:
        return empty_forecast()

    window_days = max(1, int(window_days))
    total = sum(record.quantity for record in records)
    daily_average = total / window_days

    recent_count = max(1, min(7, window_days // 4))
    recent = records[-recent_count:]
    recent_average = sum(record.quantity for record in recent) / recent_count

    trend_factor = recent_average / daily_average if daily_average else 1.0
    confidence = min(0.95, max(0.5, 1 - abs(trend_factor - 1) * 0.4))

    return {
        'daily_average': round2(daily_average),
        'trend_factor': round2(trend_factor),
        'trend': classify_trend(trend_factor),
        'next_month': round_half_up(daily_average * 30 * trend_factor),
        'next_quarter': round_half_up(daily_average * 90 * trend_factor),
        'confidence': round2(confidence),
        'data_points': len(records),
        'source': SOURCE_STATISTICAL,
    }


def no_anomaly(description: str) -> Dict[str, Any]:
    return {
        'has_anomaly': False,
        'type': None,
        'severity': 0,
        'description': description,
    }


def daily_totals(records: Sequence[DemandRecord]) -> List[int]:
    """Sum quantities per calendar day, oldest day first"""
    totals: Dict[Any, int] = {}
    for record in records:
        day = record.timestamp.date()
        totals[day] = totals.get(day, 0) + record.quantity
    return [totals[day] for day in sorted(totals)]


def detect_anomalies(records: Sequence[DemandRecord], window_days: int = 14) -> Dict[str, Any]:
    """
    Flag unusual demand using a two standard deviation band over daily totals.

    window_days only documents the span the caller loaded; grouping is by
    calendar day of each record. When any day falls outside the band, the most
    recent day is classified as a spike or a drop against the mean.
    """
    if len(records) < 3:
        return no_anomaly('Insufficient data for anomaly detection')

    values = daily_totals(records)
    mean = statistics.fmean(values)
    std_dev = statistics.pstdev(values)

    if not any(abs(value - mean) > 2 * std_dev for value in values) or mean == 0:
        return no_anomaly('No anomalies detected - demand pattern is normal')

    latest = values[-1]
    change_ratio = abs(latest - mean) / mean
    anomaly_type = 'spike' if latest > mean else 'drop'
    return {
        'has_anomaly': True,
        'type': anomaly_type,
        'severity': round2(min(1, change_ratio)),
        'description': (
            f"Unusual demand {anomaly_type} detected. "
            f"Current: {latest}, Average: {round_half_up(mean)}"
        ),
        'current_value': latest,
        'average_value': round_half_up(mean),
        'change_percentage': round_half_up(change_ratio * 100),
    }


def reorder_decision(product, forecast: Dict[str, Any]) -> Dict[str, Any]:
    next_month = forecast.get('next_month') or 0
    return {
        'should_reorder': product.stock_qty <= product.reorder_point,
        'reorder_quantity': max(product.reorder_quantity, next_month - product.stock_qty),
        'urgency': 'high' if product.stock_qty <= product.min_threshold else 'medium',
        'stockout_risk': 'high' if next_month > product.stock_qty else 'low',
    }


def compare_forecasts(statistical: Dict[str, Any], ai: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not ai or ai.get('error'):
        return None

    statistical_month = statistical.get('next_month') or 0
    month_difference = abs(statistical_month - (ai.get('next_month') or 0))
    quarter_difference = abs((statistical.get('next_quarter') or 0) - (ai.get('next_quarter') or 0))
    agreement = month_difference < statistical_month * 0.2

    if agreement:
        recommended = 'both'
    elif (statistical.get('confidence') or 0) > (ai.get('confidence') or 0):
        recommended = 'statistical'
    else:
        recommended = 'ai'

    return {
        'month_difference': month_difference,
        'quarter_difference': quarter_difference,
        'agreement_level': 'high' if agreement else 'low',
        'recommended_forecast': recommended,
    }


def reorder_urgency(forecast: Dict[str, Any], anomalies: Dict[str, Any]) -> str:
    if anomalies.get('has_anomaly') and anomalies.get('type') == 'spike':
        return 'high'
    if forecast.get('trend') == TREND_INCREASING:
        return 'medium'
    return 'low'


def risk_level(forecast: Dict[str, Any], anomalies: Dict[str, Any]) -> str:
    risk = 0
    if anomalies.get('has_anomaly'):
        risk += 30
    if forecast.get('trend') == TREND_DECREASING:
        risk += 20
    if (forecast.get('confidence') or 0) < 0.7:
        risk += 25

    if risk >= 50:
        return 'high'
    if risk >= 25:
        return 'medium'
    return 'low'


def action_items(product, insights: Dict[str, Any]) -> List[Dict[str, Any]]:
    """Prioritised to-do list for a product given its insights"""
    actions = []
    next_month = insights['forecast'].get('next_month') or 0

    if product.stock_qty <= product.min_threshold:
        actions.append({
            'priority': 'high',
            'action': 'Reorder immediately',
            'reason': 'Stock below minimum threshold',
            'quantity': product.reorder_quantity,
        })

    if next_month > product.stock_qty:
        actions.append({
            'priority': 'medium',
            'action': 'Plan reorder',
            'reason': 'Predicted demand exceeds current stock',
            'quantity': next_month - product.stock_qty,
        })

    if insights['anomalies'].get('has_anomaly'):
        actions.append({
            'priority': 'medium',
            'action': 'Monitor closely',
            'reason': 'Unusual demand pattern detected',
            'details': insights['anomalies'].get('description'),
        })

    return actions


def insufficient_ai_forecast() -> Dict[str, Any]:
    return {
        'message': 'Not enough sales data for AI forecast',
        'next_month': 0,
        'next_quarter': 0,
        'trend': TREND_STABLE,
        'confidence': 0.5,
        'anomalies': 'insufficient_data',
        'source': SOURCE_AI,
    }


def mock_ai_forecast(records: Sequence[DemandRecord], window_days: int = 90, rng=None) -> Dict[str, Any]:
    """
    Statistically derived stand-in for the AI forecast.

    Uses the window average, the last seven records as the recent sample and
    softer trend thresholds (1.15 / 0.85). Projections never scale below 0.8
    of the average.
    """
    if not records:
        return insufficient_ai_forecast()

    rng = rng or random
    total = sum(record.quantity for record in records)
    average_daily = total / window_days
    recent_average = sum(record.quantity for record in records[-7:]) / 7

    trend_factor = recent_average / average_daily if average_daily else 1.0
    trend = classify_trend(trend_factor, upper=1.15, lower=0.85)
    scale = max(0.8, trend_factor)

    return {
        'next_month': round_half_up(average_daily * 30 * scale),
        'next_quarter': round_half_up(average_daily * 90 * scale),
        'trend': trend,
        'confidence': round2(min(0.95, 0.7 + len(records) / 100)),
        'anomalies': 'none_detected' if trend == TREND_STABLE else 'trend_shift_detected',
        'reasoning': rng.choice(MOCK_REASONS),
        'source': SOURCE_AI,
        'data_points': len(records),
        'note': 'Enhanced AI forecasting with regional optimization',
    }
