"""Read-only dashboard aggregates, recomputed on every call"""
from django.db.models import F

from backend.catalog.models import Product
from backend.core.utils import sum_column
from backend.parties.models import Customer
from backend.parties.services import high_risk_q
from backend.purchasing.models import Purchase
from backend.sales.models import Sale


def low_stock_products():
    return Product.objects.filter(current_stock__lte=F('reorder_level')).order_by('id')


def high_risk_customers():
    """Customers flagged high risk or carrying more debt than their credit limit"""
    return Customer.objects.filter(high_risk_q()).order_by('id')


def dashboard_summary():
    """
    Business totals for the dashboard.

    Profit is a rough estimate: revenue minus purchase cost only.
    Transport, labor and other expenses are not netted.

    Returns:
        dict with total_revenue, total_profit, total_debt (Decimal) and
        low_stock_products (Product queryset)
    """
    total_revenue = sum_column(Sale.objects.all(), 'total_amount')
    total_purchase_cost = sum_column(Purchase.objects.all(), 'total_cost')
    total_debt = sum_column(Customer.objects.all(), 'total_debt')

    return {
        'total_revenue': total_revenue,
        'total_profit': total_revenue - total_purchase_cost,
        'total_debt': total_debt,
        'low_stock_products': low_stock_products(),
    }
