from django.db import models
from django.db.models import Q
from django.utils import timezone
from backend.core.models import User
from backend.parties.models import Customer, Supplier


class Transaction(models.Model):
    """Cash movements: expenses, money received and money paid out.

    The counterparty is a tagged subject: either a customer, a supplier, or
    nothing (e.g. diesel bought at a station). At most one side is set.
    """
    TYPE_EXPENSE = 'expense'
    TYPE_PAYMENT_IN = 'payment_in'
    TYPE_PAYMENT_OUT = 'payment_out'
    TYPE_CHOICES = [
        (TYPE_EXPENSE, 'Expense'),
        (TYPE_PAYMENT_IN, 'Payment In'),
        (TYPE_PAYMENT_OUT, 'Payment Out'),
    ]

    # Well-known categories; any other free-text category is accepted
    CATEGORY_PURCHASE = 'purchase'
    CATEGORY_SALE = 'sale'
    CATEGORY_DEBT_PAYMENT = 'debt_payment'

    SUBJECT_CUSTOMER = 'customer'
    SUBJECT_SUPPLIER = 'supplier'

    type = models.CharField(max_length=20, choices=TYPE_CHOICES)
    category = models.CharField(max_length=50)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    date = models.DateTimeField(default=timezone.now)
    description = models.TextField(blank=True, default='')
    customer = models.ForeignKey(Customer, on_delete=models.PROTECT, null=True, blank=True, related_name='transactions')
    supplier = models.ForeignKey(Supplier, on_delete=models.PROTECT, null=True, blank=True, related_name='transactions')
    created_by = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, blank=True, related_name='transactions')

    def __str__(self):
        return f"{self.type}/{self.category} {self.amount}"

    @property
    def subject(self):
        """('customer', id), ('supplier', id) or None"""
        if self.customer_id is not None:
            return (self.SUBJECT_CUSTOMER, self.customer_id)
        if self.supplier_id is not None:
            return (self.SUBJECT_SUPPLIER, self.supplier_id)
        return None

    @property
    def subject_type(self):
        subject = self.subject
        return subject[0] if subject else None

    @property
    def related_id(self):
        subject = self.subject
        return subject[1] if subject else None

    @property
    def is_debt_payment(self):
        return (
            self.type == self.TYPE_PAYMENT_IN
            and self.category == self.CATEGORY_DEBT_PAYMENT
            and self.customer_id is not None
        )

    class Meta:
        db_table = 'transactions'
        ordering = ['-date', '-id']
        constraints = [
            models.CheckConstraint(
                condition=Q(customer__isnull=True) | Q(supplier__isnull=True),
                name='transaction_single_subject',
            ),
        ]
        indexes = [
            models.Index(fields=['-date', '-id'], name='idx_transaction_date'),
            models.Index(fields=['type', 'category'], name='idx_transaction_type_cat'),
        ]
