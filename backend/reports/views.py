import logging
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response
from rest_framework.permissions import IsAuthenticated

from backend.catalog.serializers import ProductSerializer
from .insights import build_insight_summary, generate_insights
from .services import dashboard_summary

logger = logging.getLogger('backend.reports')


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def dashboard(request):
    """Revenue, profit estimate, outstanding debt and low stock products"""
    summary = dashboard_summary()
    return Response({
        'total_revenue': str(summary['total_revenue']),
        'total_profit': str(summary['total_profit']),
        'total_debt': str(summary['total_debt']),
        'low_stock_products': ProductSerializer(summary['low_stock_products'], many=True).data,
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def ai_insights(request):
    """AI-generated risk, cash flow and inventory advice"""
    summary = build_insight_summary()
    logger.info(
        f"Generating AI insights: {len(summary['high_risk_customer_names'])} high risk customers, "
        f"{len(summary['low_stock_product_names'])} low stock products"
    )
    return Response(generate_insights(summary))
