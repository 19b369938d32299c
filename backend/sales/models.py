from django.db import models
from django.utils import timezone
from decimal import Decimal
from backend.catalog.models import Product
from backend.parties.models import Customer
from backend.core.models import User


class Sale(models.Model):
    """Sale invoice to a customer (or a walk-in buyer when customer is empty)"""
    STATUS_PAID = 'paid'
    STATUS_PARTIAL = 'partial'
    STATUS_CREDIT = 'credit'
    PAYMENT_STATUS_CHOICES = [
        (STATUS_PAID, 'Paid'),
        (STATUS_PARTIAL, 'Partially Paid'),
        (STATUS_CREDIT, 'Credit'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, null=True, blank=True, related_name='sales')
    date = models.DateTimeField(default=timezone.now)
    total_amount = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    payment_status = models.CharField(max_length=20, choices=PAYMENT_STATUS_CHOICES)
    notes = models.TextField(blank=True, default='')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='sales')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Sale-{self.id}"

    @property
    def due_amount(self):
        return self.total_amount - self.paid_amount

    class Meta:
        db_table = 'sales'
        ordering = ['-date', '-id']
        indexes = [
            models.Index(fields=['-date', '-id'], name='idx_sale_date'),
            models.Index(fields=['customer', 'payment_status'], name='idx_sale_customer_status'),
        ]


class SaleItem(models.Model):
    """Sale line items"""
    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='sale_items')
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total_price = models.DecimalField(max_digits=12, decimal_places=2)

    class Meta:
        db_table = 'sale_items'
        ordering = ['id']
        indexes = [
            models.Index(fields=['sale', 'product'], name='idx_saleitem_sale_product'),
        ]
