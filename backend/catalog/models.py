from django.db import models
from decimal import Decimal


class Product(models.Model):
    """Product master (potato varieties, sold by unit such as a 25 kg sack)"""
    name = models.CharField(max_length=200, db_index=True)
    unit = models.CharField(max_length=50)
    current_stock = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    reorder_level = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('100.00'))
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.name} ({self.unit})"

    @property
    def is_low_stock(self):
        return self.current_stock <= self.reorder_level

    class Meta:
        db_table = 'products'
        ordering = ['id']
