from decimal import Decimal
from rest_framework import serializers
from .models import Customer, Supplier


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'name', 'phone', 'address', 'notes', 'created_at']


class CustomerSerializer(serializers.ModelSerializer):
    credit_limit = serializers.DecimalField(
        max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False
    )
    is_over_limit = serializers.BooleanField(read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'phone', 'address', 'credit_limit', 'total_debt',
            'is_high_risk', 'is_over_limit', 'last_payment_date', 'notes', 'created_at'
        ]
        # Balances move only through postings
        read_only_fields = ['total_debt', 'last_payment_date', 'created_at']


class CustomerBalanceSerializer(serializers.ModelSerializer):
    is_over_limit = serializers.BooleanField(read_only=True)

    class Meta:
        model = Customer
        fields = ['id', 'name', 'total_debt', 'credit_limit', 'is_over_limit', 'last_payment_date']
