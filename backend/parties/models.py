from django.db import models
from django.core.validators import MinValueValidator
from decimal import Decimal


class Supplier(models.Model):
    """Suppliers (farms selling potatoes to us)"""
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, default='')
    address = models.TextField(blank=True, default='')
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['id']


class Customer(models.Model):
    """Customers (restaurants, buffets) buying on cash or credit.

    ``total_debt`` is a running balance. It only changes through sale postings
    (unpaid remainder) and debt payments, always as a relative database-side
    update, never by writing an absolute value from the API.
    """
    name = models.CharField(max_length=200)
    phone = models.CharField(max_length=20, blank=True, default='')
    address = models.TextField(blank=True, default='')
    credit_limit = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal('0.00'),
        validators=[MinValueValidator(Decimal('0.00'))]
    )
    total_debt = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    is_high_risk = models.BooleanField(default=False)
    last_payment_date = models.DateTimeField(null=True, blank=True)
    notes = models.TextField(blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    @property
    def is_over_limit(self):
        return self.total_debt > self.credit_limit

    class Meta:
        db_table = 'customers'
        ordering = ['id']
