from decimal import Decimal
from rest_framework import serializers
from backend.catalog.models import Product
from .models import Purchase, PurchaseItem
from .services import post_purchase


class PurchaseItemSerializer(serializers.ModelSerializer):
    product = serializers.PrimaryKeyRelatedField(queryset=Product.objects.all())
    product_name = serializers.CharField(source='product.name', read_only=True)
    quantity = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.01'))
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    total_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False)

    class Meta:
        model = PurchaseItem
        fields = ['id', 'product', 'product_name', 'quantity', 'unit_price', 'total_price']


class PurchaseSerializer(serializers.ModelSerializer):
    items = PurchaseItemSerializer(many=True, allow_empty=False)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    total_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'))
    transport_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)
    labor_cost = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal('0.00'), required=False)

    class Meta:
        model = Purchase
        fields = [
            'id', 'supplier', 'supplier_name', 'date', 'total_cost', 'transport_cost',
            'labor_cost', 'notes', 'items', 'created_by', 'created_at'
        ]
        read_only_fields = ['created_by', 'created_at']
        extra_kwargs = {
            'date': {'required': False},
            'notes': {'required': False},
        }

    def create(self, validated_data):
        items_data = validated_data.pop('items')
        user = validated_data.pop('created_by', None)
        return post_purchase(validated_data, items_data, user=user)
