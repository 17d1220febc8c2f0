"""
Gemini-backed demand forecast client.
Calls the Generative Language REST API (generateContent) and falls back to a
statistical mock when the API is disabled, unconfigured or every model fails.
"""
import json
import logging
import math
import re
from typing import Any, Dict, Sequence

import requests
from django.conf import settings

from .heuristics import DemandRecord, SOURCE_AI, insufficient_ai_forecast, mock_ai_forecast, round_half_up

logger = logging.getLogger(__name__)

CODE_FENCE_RE = re.compile(r'```(?:json)?', re.IGNORECASE)

# Gemini tends to answer in camelCase even when asked otherwise
REPLY_KEY_MAP = {
    'nextMonth': 'next_month',
    'nextQuarter': 'next_quarter',
}

NUMERIC_FIELDS = ('next_month', 'next_quarter', 'confidence')

PROMPT_TEMPLATE = """
You are an AI demand forecasting assistant.
Based on this product sales history (daily):
{sales_data}

Please provide a JSON response only:
{{
  "next_month": number,
  "next_quarter": number,
  "trend": string,
  "confidence": number,
  "anomalies": string,
  "reasoning": string
}}
"""


class GeminiForecaster:
    """Forecast demand from a product's outbound movement history"""

    def __init__(self, api_key=None, models=None, enabled=None, api_url=None, timeout=None, session=None):
        self.api_key = api_key if api_key is not None else getattr(settings, 'GEMINI_API_KEY', '')
        self.models = list(models if models is not None else getattr(settings, 'GEMINI_MODELS', []))
        self.enabled = enabled if enabled is not None else getattr(settings, 'GEMINI_REGION_AVAILABLE', False)
        self.api_url = (api_url or getattr(
            settings, 'GEMINI_API_URL', 'https://generativelanguage.googleapis.com/v1beta/models'
        )).rstrip('/')
        self.timeout = timeout or getattr(settings, 'GEMINI_TIMEOUT', 20)
        self.session = session or requests

    @property
    def is_available(self):
        return bool(self.enabled and self.api_key and self.models)

    def build_prompt(self, records: Sequence[DemandRecord]) -> str:
        sales_data = [
            {'date': record.timestamp.date().isoformat(), 'qty': record.quantity}
            for record in records
        ]
        return PROMPT_TEMPLATE.format(sales_data=json.dumps(sales_data))

    def request_forecast(self, model: str, prompt: str) -> str:
        """Send one generateContent call and return the reply text"""
        response = self.session.post(
            f"{self.api_url}/{model}:generateContent",
            params={'key': self.api_key},
            json={'contents': [{'parts': [{'text': prompt}]}]},
            headers={'Content-Type': 'application/json'},
            timeout=self.timeout,
        )
        response.raise_for_status()
        payload = response.json()
        return payload['candidates'][0]['content']['parts'][0]['text']

    @staticmethod
    def parse_reply(text: str) -> Dict[str, Any]:
        """
        Parse the reply JSON. next_month/next_quarter become ints and
        confidence a float; ValueError when any of them is missing or not a
        finite number.
        """
        cleaned = CODE_FENCE_RE.sub('', text).strip()
        parsed = json.loads(cleaned)
        if not isinstance(parsed, dict):
            raise ValueError('Gemini reply is not a JSON object')
        reply = {REPLY_KEY_MAP.get(key, key): value for key, value in parsed.items()}

        for field in NUMERIC_FIELDS:
            value = reply.get(field)
            if isinstance(value, bool):
                value = None
            try:
                number = float(value)
            except (TypeError, ValueError):
                number = math.nan
            if not math.isfinite(number):
                raise ValueError(f"Gemini reply has non-numeric {field}: {value!r}")
            reply[field] = number if field == 'confidence' else round_half_up(number)
        return reply

    def forecast(self, records: Sequence[DemandRecord], rng=None) -> Dict[str, Any]:
        if not records:
            return insufficient_ai_forecast()

        if self.is_available:
            prompt = self.build_prompt(records)
            for model in self.models:
                try:
                    parsed = self.parse_reply(self.request_forecast(model, prompt))
                except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as e:
                    logger.warning(f"Gemini model {model} failed, trying next: {str(e)}")
                    continue
                logger.info(f"Gemini forecast produced by {model} from {len(records)} records")
                return {**parsed, 'source': SOURCE_AI, 'data_points': len(records)}
            logger.warning("All Gemini models failed; using mock AI forecast")

        return mock_ai_forecast(records, rng=rng)
