"""
Stock balance updates.

Stock is only ever moved by relative deltas executed in the database
(``current_stock = current_stock + delta``), so concurrent postings against the
same product cannot lose each other's updates.
"""
import logging
from decimal import Decimal
from django.db.models import F
from backend.core.exceptions import PostingFailure
from .models import Product

logger = logging.getLogger(__name__)

CENT = Decimal('0.01')


def line_values(item):
    """
    Normalise an invoice line into ``(product_id, quantity, unit_price, total_price)``.

    ``item`` is a validated serializer dict (``product`` is a Product) or a
    plain dict carrying ``product_id``. ``total_price`` defaults to
    quantity x unit price.
    """
    product = item.get('product')
    product_id = product.pk if isinstance(product, Product) else item.get('product_id', product)
    quantity = Decimal(str(item['quantity']))
    unit_price = Decimal(str(item['unit_price']))
    total_price = item.get('total_price')
    if total_price is None:
        total_price = (quantity * unit_price).quantize(CENT)
    else:
        total_price = Decimal(str(total_price))
    return product_id, quantity, unit_price, total_price


def adjust_stock(product_id, delta):
    """
    Apply a stock delta to one product.

    Args:
        product_id: Product primary key
        delta: Decimal quantity; positive for purchases, negative for sales

    Raises:
        PostingFailure: if the product does not exist. Callers run inside
        ``transaction.atomic()`` so the raise rolls back the whole posting.

    No floor at zero: overselling leaves a negative balance to be corrected
    later.
    """
    updated = Product.objects.filter(pk=product_id).update(current_stock=F('current_stock') + delta)
    if not updated:
        raise PostingFailure(f'Product {product_id} does not exist')
    logger.debug(f"Stock of product {product_id} changed by {delta}")
