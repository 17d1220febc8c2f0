"""
Test suite for the forecasting module
Tests: trend forecast, anomaly detection, reorder decisions, the Gemini client and analytics endpoints
"""
import random
from datetime import datetime, timedelta
from io import StringIO
from types import SimpleNamespace
from unittest import mock

import requests
from django.core.management import call_command
from django.test import TestCase, SimpleTestCase, override_settings
from django.utils import timezone
from rest_framework import status

from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.forecasting import services
from backend.forecasting.ai import GeminiForecaster
from backend.forecasting.heuristics import (
    DemandRecord, MOCK_REASONS, action_items, classify_trend, compare_forecasts, detect_anomalies, mock_ai_forecast,
    reorder_decision, reorder_urgency, risk_level, round2, round_half_up, trend_forecast,
)
from backend.inventory.models import StockMovement


def daily_records(quantities, start=datetime(2024, 1, 1, 12, 0)):
    """One record per consecutive day"""
    return [DemandRecord(start + timedelta(days=i), qty) for i, qty in enumerate(quantities)]


def gemini_response(text):
    response = mock.Mock()
    response.raise_for_status.return_value = None
    response.json.return_value = {'candidates': [{'content': {'parts': [{'text': text}]}}]}
    return response


class RoundingTests(SimpleTestCase):

    def test_round_half_up(self):
        self.assertEqual(round_half_up(2.5), 3)
        self.assertEqual(round_half_up(0.5), 1)
        self.assertEqual(round_half_up(2.4), 2)

    def test_round2(self):
        self.assertEqual(round2(0.125), 0.13)
        self.assertEqual(round2(0.866666), 0.87)


class TrendForecastTests(SimpleTestCase):
    """Test the moving-average trend forecast"""

    def test_empty_records(self):
        result = trend_forecast([])
        self.assertEqual(result['next_month'], 0)
        self.assertEqual(result['next_quarter'], 0)
        self.assertEqual(result['confidence'], 0.5)
        self.assertEqual(result['trend'], 'stable')
        self.assertEqual(result['data_points'], 0)

    def test_flat_demand_is_stable(self):
        result = trend_forecast(daily_records([1] * 30), 30)
        self.assertEqual(result['daily_average'], 1)
        self.assertEqual(result['trend_factor'], 1)
        self.assertEqual(result['trend'], 'stable')
        self.assertEqual(result['next_month'], 30)
        self.assertEqual(result['next_quarter'], 90)
        self.assertEqual(result['confidence'], 0.95)
        self.assertEqual(result['data_points'], 30)

    def test_increasing_demand(self):
        result = trend_forecast(daily_records([1] * 21 + [5] * 7), 28)
        self.assertEqual(result['daily_average'], 2)
        self.assertEqual(result['trend_factor'], 2.5)
        self.assertEqual(result['trend'], 'increasing')
        self.assertEqual(result['next_month'], 150)
        self.assertEqual(result['next_quarter'], 450)
        self.assertEqual(result['confidence'], 0.5)

    def test_decreasing_demand(self):
        result = trend_forecast(daily_records([10] * 7 + [2] * 7), 28)
        self.assertEqual(result['daily_average'], 3)
        self.assertEqual(result['trend_factor'], 0.67)
        self.assertEqual(result['trend'], 'decreasing')
        self.assertEqual(result['next_month'], 60)
        self.assertEqual(result['next_quarter'], 180)
        self.assertEqual(result['confidence'], 0.87)

    def test_factor_exactly_at_upper_threshold_is_stable(self):
        # daily average 7.5, last week 9/day
        result = trend_forecast(daily_records([7] * 21 + [9] * 7), 28)
        self.assertEqual(result['trend_factor'], 1.2)
        self.assertEqual(result['trend'], 'stable')
        self.assertEqual(result['next_month'], 270)

    def test_factor_exactly_at_lower_threshold_is_stable(self):
        # daily average 3.75, last week 3/day
        result = trend_forecast(daily_records([4] * 21 + [3] * 7), 28)
        self.assertEqual(result['trend_factor'], 0.8)
        self.assertEqual(result['trend'], 'stable')

    def test_classify_trend_boundaries(self):
        self.assertEqual(classify_trend(1.2), 'stable')
        self.assertEqual(classify_trend(1.21), 'increasing')
        self.assertEqual(classify_trend(0.8), 'stable')
        self.assertEqual(classify_trend(0.79), 'decreasing')
        self.assertEqual(classify_trend(1.15, upper=1.15, lower=0.85), 'stable')

    def test_short_window_uses_one_recent_record(self):
        result = trend_forecast(daily_records([5, 1]), 2)
        self.assertEqual(result['daily_average'], 3)
        self.assertEqual(result['trend'], 'decreasing')


class DetectAnomaliesTests(SimpleTestCase):
    """Test two standard deviation anomaly detection"""

    def test_insufficient_data(self):
        result = detect_anomalies(daily_records([5, 500]))
        self.assertFalse(result['has_anomaly'])
        self.assertIsNone(result['type'])
        self.assertEqual(result['severity'], 0)
        self.assertIn('Insufficient data', result['description'])

    def test_normal_pattern(self):
        result = detect_anomalies(daily_records([10, 11, 9, 10, 10]))
        self.assertFalse(result['has_anomaly'])
        self.assertIn('No anomalies', result['description'])

    def test_spike(self):
        result = detect_anomalies(daily_records([10] * 9 + [100]))
        self.assertTrue(result['has_anomaly'])
        self.assertEqual(result['type'], 'spike')
        self.assertEqual(result['severity'], 1.0)
        self.assertEqual(result['current_value'], 100)
        self.assertEqual(result['average_value'], 19)
        self.assertEqual(result['change_percentage'], 426)
        self.assertIn('spike', result['description'])

    def test_drop(self):
        result = detect_anomalies(daily_records([100] * 9 + [1]))
        self.assertTrue(result['has_anomaly'])
        self.assertEqual(result['type'], 'drop')
        self.assertEqual(result['severity'], 0.99)
        self.assertEqual(result['average_value'], 90)
        self.assertEqual(result['change_percentage'], 99)

    def test_latest_day_is_classified_even_when_not_the_outlier(self):
        result = detect_anomalies(daily_records([10] * 8 + [100, 10]))
        self.assertTrue(result['has_anomaly'])
        self.assertEqual(result['type'], 'drop')
        self.assertEqual(result['current_value'], 10)
        self.assertEqual(result['severity'], 0.47)

    def test_records_grouped_by_day(self):
        start = datetime(2024, 1, 1, 8, 0)
        records = [
            DemandRecord(start, 5),
            DemandRecord(start + timedelta(hours=4), 5),
            DemandRecord(start + timedelta(days=1), 10),
            DemandRecord(start + timedelta(days=2), 10),
        ]
        self.assertFalse(detect_anomalies(records)['has_anomaly'])


class ReorderAndRiskTests(SimpleTestCase):
    """Test reorder decisions and derived insight helpers"""

    def product(self, **kwargs):
        values = {'stock_qty': 8, 'reorder_point': 15, 'reorder_quantity': 50, 'min_threshold': 10}
        values.update(kwargs)
        return SimpleNamespace(**values)

    def test_reorder_decision_low_stock(self):
        result = reorder_decision(self.product(), {'next_month': 100})
        self.assertEqual(result, {
            'should_reorder': True,
            'reorder_quantity': 92,
            'urgency': 'high',
            'stockout_risk': 'high',
        })

    def test_reorder_decision_healthy_stock(self):
        result = reorder_decision(self.product(stock_qty=40), {'next_month': 30})
        self.assertEqual(result, {
            'should_reorder': False,
            'reorder_quantity': 50,
            'urgency': 'medium',
            'stockout_risk': 'low',
        })

    def test_compare_forecasts(self):
        statistical = {'next_month': 100, 'next_quarter': 300, 'confidence': 0.9}
        agreeing = compare_forecasts(statistical, {'next_month': 110, 'next_quarter': 320, 'confidence': 0.8})
        self.assertEqual(agreeing['agreement_level'], 'high')
        self.assertEqual(agreeing['recommended_forecast'], 'both')
        self.assertEqual(agreeing['quarter_difference'], 20)

        disagreeing = compare_forecasts(statistical, {'next_month': 200, 'next_quarter': 600, 'confidence': 0.8})
        self.assertEqual(disagreeing['agreement_level'], 'low')
        self.assertEqual(disagreeing['recommended_forecast'], 'statistical')

        self.assertIsNone(compare_forecasts(statistical, None))
        self.assertIsNone(compare_forecasts(statistical, {'error': 'failed'}))

    def test_reorder_urgency(self):
        spike = {'has_anomaly': True, 'type': 'spike'}
        calm = {'has_anomaly': False}
        self.assertEqual(reorder_urgency({'trend': 'stable'}, spike), 'high')
        self.assertEqual(reorder_urgency({'trend': 'increasing'}, calm), 'medium')
        self.assertEqual(reorder_urgency({'trend': 'decreasing'}, calm), 'low')

    def test_risk_level(self):
        self.assertEqual(risk_level({'trend': 'decreasing', 'confidence': 0.9}, {'has_anomaly': True}), 'high')
        self.assertEqual(risk_level({'trend': 'stable', 'confidence': 0.6}, {'has_anomaly': False}), 'medium')
        self.assertEqual(risk_level({'trend': 'stable', 'confidence': 0.9}, {'has_anomaly': True}), 'medium')
        self.assertEqual(risk_level({'trend': 'stable', 'confidence': 0.9}, {'has_anomaly': False}), 'low')

    def test_action_items(self):
        insights = {
            'forecast': {'next_month': 30},
            'anomalies': {'has_anomaly': True, 'description': 'Unusual demand spike detected.'},
        }
        actions = action_items(self.product(stock_qty=5), insights)
        self.assertEqual([a['action'] for a in actions], ['Reorder immediately', 'Plan reorder', 'Monitor closely'])
        self.assertEqual(actions[0]['quantity'], 50)
        self.assertEqual(actions[1]['quantity'], 25)

    def test_no_action_items_when_healthy(self):
        insights = {'forecast': {'next_month': 10}, 'anomalies': {'has_anomaly': False}}
        self.assertEqual(action_items(self.product(stock_qty=40), insights), [])


class MockAIForecastTests(SimpleTestCase):
    """Test the statistical stand-in for the AI forecast"""

    def test_no_records(self):
        result = mock_ai_forecast([])
        self.assertEqual(result['anomalies'], 'insufficient_data')
        self.assertEqual(result['next_month'], 0)

    def test_stable(self):
        result = mock_ai_forecast(daily_records([1] * 90), rng=random.Random(0))
        self.assertEqual(result['trend'], 'stable')
        self.assertEqual(result['next_month'], 30)
        self.assertEqual(result['next_quarter'], 90)
        self.assertEqual(result['confidence'], 0.95)
        self.assertEqual(result['anomalies'], 'none_detected')
        self.assertEqual(result['source'], 'gemini-ai')
        self.assertIn(result['reasoning'], MOCK_REASONS)

    def test_increasing(self):
        result = mock_ai_forecast(daily_records([9] * 10))
        self.assertEqual(result['trend'], 'increasing')
        self.assertEqual(result['next_month'], 270)
        self.assertEqual(result['next_quarter'], 810)
        self.assertEqual(result['confidence'], 0.8)
        self.assertEqual(result['anomalies'], 'trend_shift_detected')

    def test_decreasing_uses_floor_factor(self):
        result = mock_ai_forecast(daily_records([2] * 83 + [1] * 7))
        self.assertEqual(result['trend'], 'decreasing')
        self.assertEqual(result['next_month'], 46)
        self.assertEqual(result['next_quarter'], 138)


class GeminiForecasterTests(SimpleTestCase):
    """Test the Gemini REST client"""

    def setUp(self):
        self.records = daily_records([3] * 12)
        self.reply = (
            '```json\n{"nextMonth": 40, "nextQuarter": 120, "trend": "increasing", '
            '"confidence": 0.9, "anomalies": "none", "reasoning": "steady growth"}\n```'
        )

    def forecaster(self, session, **kwargs):
        kwargs.setdefault('api_key', 'test-key')
        kwargs.setdefault('models', ['model-a', 'model-b'])
        kwargs.setdefault('enabled', True)
        return GeminiForecaster(session=session, api_url='https://gemini.test/models', timeout=5, **kwargs)

    def test_successful_reply(self):
        session = mock.Mock()
        session.post.return_value = gemini_response(self.reply)
        result = self.forecaster(session).forecast(self.records)

        self.assertEqual(result['next_month'], 40)
        self.assertEqual(result['next_quarter'], 120)
        self.assertEqual(result['reasoning'], 'steady growth')
        self.assertEqual(result['source'], 'gemini-ai')
        self.assertEqual(result['data_points'], 12)

        session.post.assert_called_once()
        args, kwargs = session.post.call_args
        self.assertEqual(args[0], 'https://gemini.test/models/model-a:generateContent')
        self.assertEqual(kwargs['params'], {'key': 'test-key'})
        self.assertEqual(kwargs['timeout'], 5)
        self.assertIn('"qty": 3', kwargs['json']['contents'][0]['parts'][0]['text'])

    def test_falls_through_to_next_model(self):
        session = mock.Mock()
        session.post.side_effect = [requests.ConnectionError('down'), gemini_response(self.reply)]
        result = self.forecaster(session).forecast(self.records)
        self.assertEqual(result['next_month'], 40)
        self.assertEqual(session.post.call_count, 2)
        self.assertEqual(session.post.call_args[0][0], 'https://gemini.test/models/model-b:generateContent')

    def test_unparseable_reply_uses_mock(self):
        session = mock.Mock()
        session.post.return_value = gemini_response('I cannot answer that')
        result = self.forecaster(session).forecast(self.records)
        self.assertEqual(session.post.call_count, 2)
        self.assertIn('note', result)
        self.assertEqual(result['source'], 'gemini-ai')

    def test_non_numeric_values_use_mock(self):
        session = mock.Mock()
        session.post.return_value = gemini_response(
            '{"nextMonth": "about 120", "nextQuarter": "360", "trend": "up", "confidence": "high"}'
        )
        result = self.forecaster(session).forecast(self.records)
        self.assertEqual(session.post.call_count, 2)
        self.assertIn(result['reasoning'], MOCK_REASONS)
        self.assertIsInstance(result['next_month'], int)

    def test_numeric_strings_are_coerced(self):
        parsed = GeminiForecaster.parse_reply(
            '{"nextMonth": "120.4", "nextQuarter": 360.5, "confidence": "0.85", "trend": "stable"}'
        )
        self.assertEqual(parsed['next_month'], 120)
        self.assertEqual(parsed['next_quarter'], 361)
        self.assertEqual(parsed['confidence'], 0.85)

    def test_missing_or_non_finite_values_rejected(self):
        for text in (
            '{"nextMonth": 10, "confidence": 0.9}',
            '{"nextMonth": 10, "nextQuarter": 30, "confidence": true}',
            '{"nextMonth": "NaN", "nextQuarter": 30, "confidence": 0.9}',
        ):
            with self.assertRaises(ValueError):
                GeminiForecaster.parse_reply(text)

    def test_disabled_never_calls_api(self):
        session = mock.Mock()
        result = self.forecaster(session, enabled=False).forecast(self.records)
        session.post.assert_not_called()
        self.assertIn(result['reasoning'], MOCK_REASONS)

    def test_missing_key_never_calls_api(self):
        session = mock.Mock()
        self.forecaster(session, api_key='').forecast(self.records)
        session.post.assert_not_called()

    def test_no_records(self):
        session = mock.Mock()
        result = self.forecaster(session).forecast([])
        session.post.assert_not_called()
        self.assertEqual(result['message'], 'Not enough sales data for AI forecast')


@override_settings(GEMINI_REGION_AVAILABLE=False)
class ForecastServiceTests(TestCase):
    """Test loading history and the service-level fallbacks"""

    def setUp(self):
        self.supplier = TestDataFactory.create_supplier()
        self.product = TestDataFactory.create_product(supplier=self.supplier, stock_qty=50)

    def test_load_demand_records_window(self):
        TestDataFactory.create_movement(self.product, 4, days_ago=2)
        TestDataFactory.create_movement(self.product, 6, days_ago=1)
        TestDataFactory.create_movement(self.product, 50, days_ago=45)
        TestDataFactory.create_movement(self.product, 9, movement_type=StockMovement.TYPE_IN, days_ago=1)

        records = services.load_demand_records(self.product, 30)
        self.assertEqual([r.quantity for r in records], [4, 6])

    def test_statistical_forecast_from_history(self):
        for days_ago in range(30):
            TestDataFactory.create_movement(self.product, 2, days_ago=days_ago)
        forecast = services.statistical_forecast(self.product)
        self.assertEqual(forecast['daily_average'], 2)
        self.assertEqual(forecast['next_month'], 60)
        self.assertEqual(forecast['trend'], 'stable')

    def test_ai_forecast_error_falls_back_to_statistics(self):
        TestDataFactory.create_movement(self.product, 3, days_ago=1)
        broken = mock.Mock()
        broken.forecast.side_effect = RuntimeError('boom')
        forecast = services.ai_forecast(self.product, forecaster=broken)
        self.assertEqual(forecast['source'], 'statistical-method')
        self.assertEqual(forecast['anomalies'], 'forecast_error')
        self.assertEqual(forecast['data_points'], 1)

    def test_statistical_failure_returns_default(self):
        with mock.patch('backend.forecasting.services.load_demand_records', side_effect=RuntimeError('db down')):
            forecast = services.statistical_forecast(self.product)
            anomalies = services.anomaly_report(self.product)
        self.assertEqual(forecast['trend'], 'unknown')
        self.assertEqual(forecast['confidence'], 0.5)
        self.assertEqual(anomalies['description'], 'Error in anomaly detection')

    def test_product_insights(self):
        for days_ago in range(9, 0, -1):
            TestDataFactory.create_movement(self.product, 10, days_ago=days_ago)
        TestDataFactory.create_movement(self.product, 100, days_ago=0)

        insights = services.product_insights(self.product)
        self.assertTrue(insights['anomalies']['has_anomaly'])
        self.assertEqual(insights['anomalies']['type'], 'spike')
        self.assertEqual(insights['insights']['reorder_urgency'], 'high')
        self.assertEqual(insights['forecast']['source'], 'gemini-ai')
        self.assertIsNotNone(insights['comparison'])

    def test_product_insights_survive_malformed_ai_reply(self):
        TestDataFactory.create_movement(self.product, 3, days_ago=1)
        session = mock.Mock()
        session.post.return_value = gemini_response('{"nextMonth": "about 120", "confidence": "high"}')
        forecaster = GeminiForecaster(api_key='k', models=['model-a'], enabled=True, session=session)

        insights = services.product_insights(self.product, forecaster=forecaster)
        services.save_product_forecast(self.product, insights['forecast'])
        self.product.refresh_from_db()
        self.assertEqual(self.product.forecast_next_month, insights['forecast']['next_month'])
        self.assertIn(insights['insights']['risk_level'], ('low', 'medium', 'high'))

    def test_product_insights_without_ai(self):
        insights = services.product_insights(self.product, use_ai=False)
        self.assertIsNone(insights['ai_forecast'])
        self.assertIsNone(insights['comparison'])
        self.assertEqual(insights['forecast']['source'], 'statistical-method')

    def test_save_product_forecast(self):
        services.save_product_forecast(self.product, {
            'next_month': 40, 'next_quarter': 120, 'confidence': 0.9, 'trend': 'upward',
        })
        self.product.refresh_from_db()
        self.assertEqual(self.product.forecast_next_month, 40)
        self.assertEqual(self.product.forecast_next_quarter, 120)
        self.assertEqual(self.product.forecast_confidence, 0.9)
        self.assertEqual(self.product.forecast_trend, 'stable')
        self.assertIsNotNone(self.product.forecast_updated_at)

    def test_sales_trends_zero_filled(self):
        TestDataFactory.create_movement(self.product, 7, days_ago=0)
        data = services.sales_trends()
        self.assertEqual(len(data), 6)
        now = timezone.localtime()
        self.assertEqual(data[-1], {'month': f'{now.year}-{now.month:02d}', 'sales': 7})
        self.assertTrue(all(row['sales'] == 0 for row in data[:-1]))

    def test_global_demand_forecast_fallback_base(self):
        forecasts = services.global_demand_forecast()
        self.assertEqual([f['forecast'] for f in forecasts], [105, 110, 115])

    def test_global_demand_forecast_from_last_month(self):
        this_month = timezone.localtime().replace(day=1, hour=12, minute=0, second=0, microsecond=0)
        TestDataFactory.create_movement(self.product, 200, moved_at=this_month - timedelta(days=1))
        forecasts = services.global_demand_forecast()
        self.assertEqual([f['forecast'] for f in forecasts], [210, 220, 230])


@override_settings(GEMINI_REGION_AVAILABLE=False)
class AIAnalyticsAPITests(TestCase):
    """Test ai-analytics endpoints"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(role='staff')
        self.client.authenticate_user(self.user)
        self.supplier = TestDataFactory.create_supplier(name='Acme')
        self.product = TestDataFactory.create_product(
            supplier=self.supplier, stock_qty=5, min_threshold=10, category='Tools',
        )
        for days_ago in range(20):
            TestDataFactory.create_movement(self.product, 3, days_ago=days_ago)

    def test_demand_forecast_persists_forecast(self):
        response = self.client.get(f'/api/v1/ai-analytics/demand-forecast/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['product']['supplier']['name'], 'Acme')
        self.assertTrue(response.data['recommendations']['should_reorder'])
        self.assertEqual(response.data['recommendations']['urgency'], 'high')

        self.product.refresh_from_db()
        self.assertEqual(self.product.forecast_next_month, response.data['forecast']['next_month'])
        self.assertIsNotNone(self.product.forecast_updated_at)

    def test_unknown_product_404(self):
        response = self.client.get('/api/v1/ai-analytics/demand-forecast/99999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_gemini_forecast(self):
        response = self.client.get(f'/api/v1/ai-analytics/gemini-forecast/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['forecast']['data_points'], 20)

    def test_anomalies(self):
        response = self.client.get(f'/api/v1/ai-analytics/anomalies/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(response.data['anomalies']['has_anomaly'])
        self.assertEqual(response.data['risk_assessment']['level'], 'low')
        self.assertEqual(response.data['risk_assessment']['recommended_action'], 'Continue normal operations')

    def test_insights(self):
        response = self.client.get(f'/api/v1/ai-analytics/insights/{self.product.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIn('statistical_forecast', response.data['insights'])
        self.assertEqual(response.data['action_items'][0]['action'], 'Reorder immediately')

    def test_inventory_dashboard(self):
        TestDataFactory.create_product(stock_qty=500, is_active=False)
        response = self.client.get('/api/v1/ai-analytics/inventory-dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_products'], 1)
        self.assertEqual(response.data['products'][0]['stock']['status'], 'low')

    def test_demand_trends_grouped_by_category(self):
        TestDataFactory.create_product(category='Parts')
        response = self.client.get('/api/v1/ai-analytics/demand-trends/')
        self.assertEqual(set(response.data['trends']), {'Tools', 'Parts'})

        response = self.client.get('/api/v1/ai-analytics/demand-trends/', {'category': 'Tools', 'period': '14'})
        self.assertEqual(list(response.data['trends']), ['Tools'])

    def test_sales_trends_and_global_forecast(self):
        response = self.client.get('/api/v1/ai-analytics/sales-trends/')
        self.assertEqual(len(response.data), 6)
        response = self.client.get('/api/v1/ai-analytics/demand-forecast/')
        self.assertEqual(len(response.data), 3)

    def test_batch_forecast(self):
        response = self.client.post('/api/v1/ai-analytics/batch-forecast/', {
            'product_ids': [self.product.id, 99999],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['summary']['total_products'], 1)
        self.assertEqual(response.data['missing'], [99999])

    def test_batch_forecast_validation(self):
        response = self.client.post('/api/v1/ai-analytics/batch-forecast/', {'product_ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/ai-analytics/batch-forecast/', {'product_ids': ['x']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_refresh_forecasts_command(self):
        out = StringIO()
        call_command('refresh_forecasts', '--statistical', stdout=out)
        self.product.refresh_from_db()
        # 2/day over the window, last week at 3/day
        self.assertEqual(self.product.forecast_next_month, 90)
        self.assertEqual(self.product.forecast_trend, 'increasing')
        self.assertIn('Updated 1 product forecasts', out.getvalue())
