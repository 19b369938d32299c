from decimal import Decimal
from rest_framework import serializers
from backend.parties.models import Customer, Supplier
from .models import Transaction


class TransactionSerializer(serializers.ModelSerializer):
    """
    Transactions name their counterparty with ``customer`` or ``supplier``.

    ``related_id`` is also accepted for older clients and resolved by type:
    money coming in is from a customer, expenses and payments out go to a
    supplier.
    """
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    related_id = serializers.IntegerField(required=False, allow_null=True)
    subject_type = serializers.CharField(read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = Transaction
        fields = [
            'id', 'type', 'category', 'amount', 'date', 'description',
            'customer', 'customer_name', 'supplier', 'supplier_name',
            'related_id', 'subject_type', 'created_by_username'
        ]
        extra_kwargs = {
            'date': {'required': False},
            'description': {'required': False},
        }

    def validate(self, attrs):
        related_id = attrs.pop('related_id', None)
        customer = attrs.get('customer')
        supplier = attrs.get('supplier')

        if customer is not None and supplier is not None:
            raise serializers.ValidationError(
                {'non_field_errors': ['A transaction can reference a customer or a supplier, not both.']}
            )

        subject = customer if customer is not None else supplier
        if related_id is not None and subject is not None:
            if subject.pk != related_id:
                raise serializers.ValidationError(
                    {'related_id': [f'related_id {related_id} does not match the given {subject._meta.model_name}.']}
                )
        elif related_id is not None:
            if attrs['type'] == Transaction.TYPE_PAYMENT_IN:
                customer = Customer.objects.filter(pk=related_id).first()
                if customer is None:
                    raise serializers.ValidationError({'related_id': [f'Customer {related_id} does not exist.']})
                attrs['customer'] = customer
            else:
                supplier = Supplier.objects.filter(pk=related_id).first()
                if supplier is None:
                    raise serializers.ValidationError({'related_id': [f'Supplier {related_id} does not exist.']})
                attrs['supplier'] = supplier

        return attrs


class DebtPaymentSerializer(serializers.Serializer):
    amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    description = serializers.CharField(required=False, allow_blank=True, default='')
    date = serializers.DateTimeField(required=False, allow_null=True, default=None)
