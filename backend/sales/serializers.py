from decimal import Decimal
from rest_framework import serializers
from backend.catalog.models import Product
from .models import Sale, SaleItem
from .services import post_sale


class SaleItemSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    product_name = serializers.CharField(source='product.name', read_only=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)

    class Meta:
        model = SaleItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'total_price']


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, allow_empty=False)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    total_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    paid_amount = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    due_amount = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Sale
        fields = [
            'id', 'customer', 'customer_name', 'date', 'total_amount', 'paid_amount',
            'due_amount', 'payment_status', 'notes', 'items', 'created_by', 'created_at'
        ]
        read_only_fields = ['created_by', 'created_at']
        extra_kwargs = {
            'date': {'required': False},
            'notes': {'required': False},
        }

    def create(self, validated_data):
        items_data = validated_data.pop('items')
        user = validated_data.pop('created_by', None)
        return post_sale(validated_data, items_data, user=user)
