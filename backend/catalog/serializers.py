from rest_framework import serializers
from .models import Product


class ProductSerializer(serializers.ModelSerializer):
    """Product create/read; ``current_stock`` is accepted here as opening stock only"""
    is_low_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = ['id', 'name', 'unit', 'current_stock', 'reorder_level', 'is_low_stock', 'created_at']
        read_only_fields = ['created_at']


class ProductUpdateSerializer(ProductSerializer):
    """After creation stock moves only through purchase and sale postings"""

    class Meta(ProductSerializer.Meta):
        read_only_fields = ['current_stock', 'created_at']
