"""
AI insight generation for the dashboard.

Sends a small business summary to an OpenAI-compatible chat completions
endpoint and returns the three narrative fields the dashboard shows.
"""
import os
import json
import logging
import requests
from typing import Dict, Any
from django.conf import settings

from backend.core.exceptions import IntegrationFailure
from backend.core.utils import sum_column
from backend.parties.models import Customer
from .services import high_risk_customers, low_stock_products

logger = logging.getLogger(__name__)

INSIGHT_KEYS = {
    'risk_analysis': 'riskAnalysis',
    'cash_flow_forecast': 'cashFlowForecast',
    'inventory_advice': 'inventoryAdvice',
}


def _setting(name, default=''):
    return getattr(settings, name, os.getenv(name, default))


def build_insight_summary() -> Dict[str, Any]:
    """Collect the figures the insight prompt is built from"""
    return {
        'total_debt': sum_column(Customer.objects.all(), 'total_debt'),
        'high_risk_customer_names': list(high_risk_customers().values_list('name', flat=True)),
        'low_stock_product_names': list(low_stock_products().values_list('name', flat=True)),
    }


def build_prompt(summary: Dict[str, Any]) -> str:
    high_risk = summary['high_risk_customer_names']
    return (
        "You are an AI analyst for a potato distribution business.\n"
        f"Analyze the following data and provide brief, actionable insights in "
        f"{_setting('AI_RESPONSE_LANGUAGE', 'Arabic')} (JSON format):\n\n"
        "Data:\n"
        f"- Total Market Debt: {summary['total_debt']} {_setting('AI_CURRENCY', 'SAR')}\n"
        f"- High Risk Customers: {len(high_risk)} (Names: {', '.join(high_risk)})\n"
        f"- Low Stock Products: {', '.join(summary['low_stock_product_names'])}\n\n"
        'Provide JSON response with keys: "risk_analysis", "cash_flow_forecast", "inventory_advice".'
    )


def _parse_insights(content: str) -> Dict[str, Any]:
    data = json.loads(content or '{}')
    if not isinstance(data, dict):
        raise ValueError('Insight content is not a JSON object')
    return {key: data.get(key, data.get(camel)) for key, camel in INSIGHT_KEYS.items()}


def generate_insights(summary: Dict[str, Any]) -> Dict[str, Any]:
    """
    Ask the configured model for insights on the given summary.

    Raises:
        IntegrationFailure: the endpoint is not configured, unreachable,
            returns a non-2xx status, or replies with content that is not
            a JSON object.
    """
    api_url = _setting('AI_API_URL')
    api_key = _setting('AI_API_KEY')
    if not api_url or not api_key:
        logger.error("AI insights requested but AI_API_URL/AI_API_KEY are not configured")
        raise IntegrationFailure()

    payload = {
        'model': _setting('AI_MODEL', 'gpt-4o-mini'),
        'messages': [{'role': 'user', 'content': build_prompt(summary)}],
        'response_format': {'type': 'json_object'},
    }

    try:
        response = requests.post(
            api_url,
            json=payload,
            headers={'Authorization': f'Bearer {api_key}'},
            timeout=int(_setting('AI_TIMEOUT_SECONDS', 30)),
        )
        response.raise_for_status()
        content = response.json()['choices'][0]['message']['content']
        return _parse_insights(content)
    except requests.exceptions.RequestException as e:
        logger.error(f"AI insight request failed: {e}")
        raise IntegrationFailure() from e
    except (KeyError, IndexError, TypeError, ValueError) as e:
        logger.error(f"AI insight response could not be parsed: {e}")
        raise IntegrationFailure() from e
