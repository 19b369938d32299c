from django.db import models
from django.utils import timezone
from decimal import Decimal
from backend.catalog.models import Product
from backend.parties.models import Supplier
from backend.core.models import User


class Purchase(models.Model):
    """Purchase invoice from a supplier.

    Immutable once posted: header, items, stock increase and the expense
    transaction are all written by ``post_purchase`` in one unit of work.
    """
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='purchases')
    date = models.DateTimeField(default=timezone.now)
    total_cost = models.DecimalField(max_digits=12, decimal_places=2)
    transport_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    labor_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='purchases')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Purchase-{self.id}"

    def get_items_total(self):
        """Sum of line totals (may differ from the invoiced total_cost)"""
        return sum((item.total_price for item in self.items.all()), Decimal('0.00'))

    class Meta:
        db_table = 'purchases'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['-date', '-id'], name='idx_purchase_date'),
            models.Index(fields=['supplier'], name='idx_purchase_supplier'),
        ]


class PurchaseItem(models.Model):
    """Purchase line items"""
    purchase = models.ForeignKey(Purchase, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='purchase_items')
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'purchase_items'
        ordering = ['id']
        indexes = [
            models.Index(fields=['purchase', 'product'], name='idx_puritem_pur_product'),
        ]
