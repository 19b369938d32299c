"""
Test suite for Reports module
Tests: Dashboard aggregation, low stock detection, AI insights and the full posting cycle
"""
import json
from decimal import Decimal
from unittest.mock import patch
import requests
from django.test import TestCase, override_settings
from rest_framework import status
from backend.core.exceptions import IntegrationFailure
from backend.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from backend.ledger.services import post_debt_payment
from backend.purchasing.services import post_purchase
from backend.reports.insights import build_insight_summary, generate_insights
from backend.reports.services import dashboard_summary, high_risk_customers
from backend.sales.models import Sale
from backend.sales.services import post_sale

AI_SETTINGS = {
    'AI_API_URL': 'https://ai.example.test/v1/chat/completions',
    'AI_API_KEY': 'test-key',
    'AI_MODEL': 'test-model',
}


def sale_header(customer, total, paid, payment_status):
    return {
        'customer': customer,
        'total_amount': Decimal(total),
        'paid_amount': Decimal(paid),
        'payment_status': payment_status,
    }


def line(product, quantity, unit_price):
    return {'product': product, 'quantity': Decimal(quantity), 'unit_price': Decimal(unit_price)}


class DashboardTests(TestCase):
    """Test dashboard aggregates"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_empty_dashboard(self):
        response = self.client.get('/api/analytics/dashboard/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Decimal(response.data['total_revenue']), Decimal('0'))
        self.assertEqual(Decimal(response.data['total_profit']), Decimal('0'))
        self.assertEqual(Decimal(response.data['total_debt']), Decimal('0'))
        self.assertEqual(response.data['low_stock_products'], [])

    def test_aggregates_after_interleaved_postings(self):
        """Revenue is the sum of sale totals and debt the sum of customer balances"""
        product = TestDataFactory.create_product(current_stock=Decimal('500.00'), reorder_level=Decimal('10.00'))
        first = TestDataFactory.create_customer()
        second = TestDataFactory.create_customer(total_debt=Decimal('50.00'))

        post_purchase({'total_cost': Decimal('400.00')}, [line(product, '40.00', '10.00')])
        post_sale(sale_header(first, '300.00', '100.00', Sale.STATUS_PARTIAL), [line(product, '20.00', '15.00')])
        post_debt_payment(first, Decimal('50.00'))
        post_sale(sale_header(second, '150.00', '0.00', Sale.STATUS_CREDIT), [line(product, '10.00', '15.00')])
        post_purchase({'total_cost': Decimal('200.00')}, [line(product, '20.00', '10.00')])
        post_sale(sale_header(None, '90.00', '90.00', Sale.STATUS_PAID), [line(product, '6.00', '15.00')])

        summary = dashboard_summary()
        self.assertEqual(summary['total_revenue'], Decimal('540.00'))
        self.assertEqual(summary['total_profit'], Decimal('-60.00'))
        # first: 200 - 50, second: 50 + 150
        self.assertEqual(summary['total_debt'], Decimal('350.00'))

        response = self.client.get('/api/analytics/dashboard/')
        self.assertEqual(Decimal(response.data['total_revenue']), Decimal('540'))
        self.assertEqual(Decimal(response.data['total_debt']), Decimal('350'))

    def test_low_stock_detection(self):
        low = TestDataFactory.create_product(current_stock=Decimal('10.00'), reorder_level=Decimal('15.00'))
        TestDataFactory.create_product(current_stock=Decimal('20.00'), reorder_level=Decimal('15.00'))
        boundary = TestDataFactory.create_product(current_stock=Decimal('15.00'), reorder_level=Decimal('15.00'))

        response = self.client.get('/api/analytics/dashboard/')
        self.assertEqual([p['id'] for p in response.data['low_stock_products']], [low.id, boundary.id])
        self.assertTrue(response.data['low_stock_products'][0]['is_low_stock'])

    def test_high_risk_customers(self):
        flagged = TestDataFactory.create_customer(is_high_risk=True)
        over_limit = TestDataFactory.create_customer(credit_limit=Decimal('100.00'), total_debt=Decimal('150.00'))
        TestDataFactory.create_customer(credit_limit=Decimal('100.00'), total_debt=Decimal('100.00'))
        self.assertEqual(list(high_risk_customers()), [flagged, over_limit])


class EndToEndScenarioTests(TestCase):
    """Purchase, sale and debt payment over the HTTP API"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_full_cycle(self):
        product = self.client.post('/api/products/', {
            'name': 'Potatoes', 'unit': 'bag', 'current_stock': '50.00', 'reorder_level': '20.00',
        }).data
        customer = self.client.post('/api/customers/', {'name': 'Al Noor Restaurant', 'credit_limit': '1000.00'}).data
        supplier = self.client.post('/api/suppliers/', {'name': 'Hail Farms'}).data

        response = self.client.post('/api/purchases/', {
            'supplier': supplier['id'],
            'total_cost': '500.00',
            'items': [{'product': product['id'], 'quantity': '50.00', 'unit_price': '10.00'}],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        stock = self.client.get(f"/api/products/{product['id']}/").data['current_stock']
        self.assertEqual(Decimal(stock), Decimal('100'))

        response = self.client.post('/api/sales/', {
            'customer': customer['id'],
            'total_amount': '300.00',
            'paid_amount': '100.00',
            'payment_status': 'partial',
            'items': [{'product': product['id'], 'quantity': '30.00', 'unit_price': '10.00'}],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        stock = self.client.get(f"/api/products/{product['id']}/").data['current_stock']
        self.assertEqual(Decimal(stock), Decimal('70'))
        debt = self.client.get(f"/api/customers/{customer['id']}/").data['total_debt']
        self.assertEqual(Decimal(debt), Decimal('200'))

        response = self.client.post('/api/transactions/', {
            'type': 'payment_in', 'category': 'debt_payment', 'amount': '200.00', 'customer': customer['id'],
        })
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        debt = self.client.get(f"/api/customers/{customer['id']}/").data['total_debt']
        self.assertEqual(Decimal(debt), Decimal('0'))

        dashboard = self.client.get('/api/analytics/dashboard/').data
        self.assertEqual(Decimal(dashboard['total_revenue']), Decimal('300'))
        self.assertEqual(Decimal(dashboard['total_profit']), Decimal('-200'))
        self.assertEqual(dashboard['low_stock_products'], [])

        ledger = self.client.get('/api/transactions/').data
        self.assertEqual([(t['type'], t['category']) for t in ledger], [
            ('payment_in', 'debt_payment'),
            ('payment_in', 'sale'),
            ('expense', 'purchase'),
        ])


def completion(content):
    return {'choices': [{'message': {'role': 'assistant', 'content': content}}]}


@override_settings(**AI_SETTINGS)
class AIInsightsTests(TestCase):
    """Test AI insight generation with the HTTP call mocked out"""

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        TestDataFactory.create_customer(name='Risky Buffet', is_high_risk=True, total_debt=Decimal('900.00'))
        TestDataFactory.create_customer(name='Good Cafe', total_debt=Decimal('100.00'))
        TestDataFactory.create_product(name='Red Potatoes', current_stock=Decimal('5.00'), reorder_level=Decimal('50.00'))

    def test_build_insight_summary(self):
        summary = build_insight_summary()
        self.assertEqual(summary['total_debt'], Decimal('1000.00'))
        self.assertEqual(summary['high_risk_customer_names'], ['Risky Buffet'])
        self.assertEqual(summary['low_stock_product_names'], ['Red Potatoes'])

    @patch('backend.reports.insights.requests.post')
    def test_ai_insights_success(self, mock_post):
        mock_post.return_value.json.return_value = completion(json.dumps({
            'risk_analysis': 'Collect from Risky Buffet first.',
            'cash_flow_forecast': 'Stable.',
            'inventory_advice': 'Reorder Red Potatoes.',
        }))

        response = self.client.get('/api/analytics/ai-insights/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['inventory_advice'], 'Reorder Red Potatoes.')

        mock_post.assert_called_once()
        args, kwargs = mock_post.call_args
        self.assertEqual(args[0], AI_SETTINGS['AI_API_URL'])
        self.assertEqual(kwargs['headers']['Authorization'], 'Bearer test-key')
        self.assertEqual(kwargs['json']['model'], 'test-model')
        self.assertEqual(kwargs['json']['response_format'], {'type': 'json_object'})
        prompt = kwargs['json']['messages'][0]['content']
        self.assertIn('Risky Buffet', prompt)
        self.assertIn('Red Potatoes', prompt)

    @patch('backend.reports.insights.requests.post')
    def test_camel_case_keys_accepted(self, mock_post):
        mock_post.return_value.json.return_value = completion(json.dumps({
            'riskAnalysis': 'a', 'cashFlowForecast': 'b', 'inventoryAdvice': 'c',
        }))
        insights = generate_insights(build_insight_summary())
        self.assertEqual(insights, {'risk_analysis': 'a', 'cash_flow_forecast': 'b', 'inventory_advice': 'c'})

    @patch('backend.reports.insights.requests.post')
    def test_connection_error_is_500(self, mock_post):
        mock_post.side_effect = requests.exceptions.ConnectionError('unreachable')
        response = self.client.get('/api/analytics/ai-insights/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)
        self.assertEqual(response.data, {'message': 'Failed to generate insights'})

    @patch('backend.reports.insights.requests.post')
    def test_http_error_is_500(self, mock_post):
        mock_post.return_value.raise_for_status.side_effect = requests.exceptions.HTTPError('503')
        response = self.client.get('/api/analytics/ai-insights/')
        self.assertEqual(response.status_code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    @patch('backend.reports.insights.requests.post')
    def test_unparsable_content(self, mock_post):
        mock_post.return_value.json.return_value = completion('not json at all')
        with self.assertRaises(IntegrationFailure):
            generate_insights(build_insight_summary())

    @override_settings(AI_API_KEY='')
    @patch('backend.reports.insights.requests.post')
    def test_missing_configuration(self, mock_post):
        with self.assertRaises(IntegrationFailure):
            generate_insights(build_insight_summary())
        mock_post.assert_not_called()

    @patch('backend.reports.insights.requests.post')
    def test_failure_leaves_postings_alone(self, mock_post):
        mock_post.side_effect = requests.exceptions.Timeout('slow')
        product = TestDataFactory.create_product(current_stock=Decimal('30.00'))
        self.client.get('/api/analytics/ai-insights/')

        post_sale(sale_header(None, '50.00', '50.00', Sale.STATUS_PAID), [line(product, '5.00', '10.00')])
        product.refresh_from_db()
        self.assertEqual(product.current_stock, Decimal('25.00'))
