"""
Purchase posting.

A purchase is posted in a single database transaction: the header, every
line item with its stock increase, and the ``expense``/``purchase`` cash
transaction either all persist or none do.
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
from .models import Purchase, PurchaseItem

logger = logging.getLogger(__name__)


def post_purchase(header, items, user=None):
    """
    Post a purchase invoice.

    Args:
        header: dict with ``total_cost`` and optionally ``supplier``,
            ``transport_cost``, ``labor_cost``, ``date``, ``notes``
        items: iterable of dicts with ``product`` (or ``product_id``),
            ``quantity``, ``unit_price`` and optional ``total_price``
        user: acting user, recorded as ``created_by``

    Returns:
        The created Purchase.

    Raises:
        PostingFailure: a referenced product is missing or a constraint
            failed; nothing from this call is persisted.

    Only ``total_cost`` is booked as an expense. Transport and labour are
    kept on the header for reference.
    """
    actor = user if user is not None and user.is_authenticated else None
    try:
        with transaction.atomic():
            purchase = Purchase.objects.create(
                supplier=header.get('supplier'),
                date=header.get('date') or timezone.now(),
                total_cost=header['total_cost'],
                transport_cost=header.get('transport_cost') or Decimal('0.00'),
                labor_cost=header.get('labor_cost') or Decimal('0.00'),
                notes=header.get('notes', ''),
                created_by=actor,
            )

            for item in items:
                product_id, quantity, unit_price, total_price = line_values(item)
                PurchaseItem.objects.create(
                    purchase=purchase,
                    product_id=product_id,
                    quantity=quantity,
                    unit_price=unit_price,
                    total_price=total_price,
                )
                adjust_stock(product_id, quantity)
                create_audit_log(
                    user=user,
                    action='stock_purchase',
                    model_name='Product',
                    object_id=product_id,
                    changes={'purchase_id': purchase.id, 'quantity': str(quantity)},
                )

            record_transaction({
                'type': Transaction.TYPE_EXPENSE,
                'category': Transaction.CATEGORY_PURCHASE,
                'amount': purchase.total_cost,
                'date': purchase.date,
                'description': f"Purchase #{purchase.id}",
                'supplier': purchase.supplier,
            }, user=user)

            create_audit_log(
                user=user,
                action='purchase_post',
                model_name='Purchase',
                object_id=purchase.id,
                object_name=str(purchase),
                changes={
                    'supplier_id': purchase.supplier_id,
                    'total_cost': str(purchase.total_cost),
                    'transport_cost': str(purchase.transport_cost),
                    'labor_cost': str(purchase.labor_cost),
                },
            )
    except IntegrityError as e:
        logger.error(f"Purchase posting rolled back: {e}")
        raise PostingFailure(f'Purchase could not be posted: {e}') from e

    logger.info(f"Posted purchase {purchase.id} with {purchase.items.count()} item(s), total_cost={purchase.total_cost}")
    return purchase
