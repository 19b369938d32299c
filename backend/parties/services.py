"""Customer debt balance updates, applied as database-side deltas"""
import logging
from django.db.models import F, Q
from django.utils import timezone
from backend.core.exceptions import PostingFailure
from .models import Customer

logger = logging.getLogger(__name__)


def adjust_customer_debt(customer_id, delta, record_payment=False):
    """
    Add ``delta`` to a customer's total debt.

    Positive deltas come from unpaid sale remainders, negative ones from debt
    payments. When ``record_payment`` is set the customer's
    ``last_payment_date`` is stamped with the current time. No floor at zero.
    """
    values = {'total_debt': F('total_debt') + delta}
    if record_payment:
        values['last_payment_date'] = timezone.now()
    updated = Customer.objects.filter(pk=customer_id).update(**values)
    if not updated:
        raise PostingFailure(f'Customer {customer_id} does not exist')
    logger.debug(f"Debt of customer {customer_id} changed by {delta}")


def high_risk_q():
    """Customers flagged high risk or carrying more debt than their credit limit"""
    return Q(is_high_risk=True) | Q(total_debt__gt=F('credit_limit'))
