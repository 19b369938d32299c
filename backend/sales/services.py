"""
Sale posting.

Mirrors purchase posting: header, items and stock decrease, the customer's
debt increase for any unpaid remainder, and the ``payment_in``/``sale`` cash
transaction for the amount received, all inside one database transaction.
"""
import logging
from decimal import Decimal
from django.db import IntegrityError, transaction
from django.utils import timezone
from backend.catalog.services import adjust_stock, line_values
from backend.core.exceptions import PostingFailure
from backend.core.utils import create_audit_log
from backend.ledger.models import Transaction
from backend.ledger.services import record_transaction
from backend.parties.services import adjust_customer_debt
from .models import Sale, SaleItem

logger = logging.getLogger(__name__)


def post_sale(header, items, user=None):
    """
    Post a sale invoice.

    ``payment_status`` is taken as given by the caller; only
    ``total_amount - paid_amount`` drives the debt change. Stock is reduced
    without a floor, so overselling is recorded rather than rejected.

    Raises:
        PostingFailure: a referenced product is missing or a constraint
            failed; nothing from this call is persisted.
    """
    actor = user if user is not None and user.is_authenticated else None
    customer = header.get('customer')
    total_amount = Decimal(str(header['total_amount']))
    paid_amount = Decimal(str(header.get('paid_amount') or '0.00'))

    try:
        with transaction.atomic():
            sale = Sale.objects.create(
                customer=customer,
                date=header.get('date') or timezone.now(),
                total_amount=total_amount,
                paid_amount=paid_amount,
                payment_status=header['payment_status'],
                notes=header.get('notes', ''),
                created_by=actor,
            )

            for item in items:
                product_id, quantity, unit_price, total_price = line_values(item)
                SaleItem.objects.create(
                    sale=sale,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=total_price,
                )
                adjust_stock(product_id, -quantity)
                create_audit_log(
                    user=user,
                    action='stock_sale',
                    model_name='Product',
                    object_id=product_id,
                    changes={'sale_id': sale.id, 'quantity': str(quantity)},
                )

            remaining = total_amount - paid_amount
            if remaining > 0 and customer is not None:
                adjust_customer_debt(customer.pk, remaining)
                create_audit_log(
                    user=user,
                    action='debt_increase',
                    model_name='Customer',
                    object_id=customer.pk,
                    object_name=customer.name,
                    changes={'sale_id': sale.id, 'amount': str(remaining)},
                )

            if paid_amount > 0:
                record_transaction({
                    'type': Transaction.TYPE_PAYMENT_IN,
                    'category': Transaction.CATEGORY_SALE,
                    'amount': paid_amount,
                    'date': sale.date,
                    'description': f"Sale #{sale.id}",
                    'customer': customer,
                }, user=user)

            create_audit_log(
                user=user,
                action='sale_post',
                model_name='Sale',
                object_id=sale.id,
                object_name=str(sale),
                changes={
                    'customer_id': sale.customer_id,
                    'total_amount': str(total_amount),
                    'paid_amount': str(paid_amount),
                    'payment_status': sale.payment_status,
                },
            )
    except IntegrityError as e:
        logger.error(f"Sale posting rolled back: {e}")
        raise PostingFailure(f'Sale could not be posted: {e}') from e

    logger.info(f"Posted sale {sale.id} total={total_amount} paid={paid_amount} status={sale.payment_status}")
    return sale
