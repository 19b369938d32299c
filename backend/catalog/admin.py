from django.contrib import admin
from .models import Product


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'unit', 'current_stock', 'reorder_level', 'is_low_stock', 'created_at']
    search_fields = ['name']
    ordering = ['name']
    readonly_fields = ['current_stock', 'created_at']

    @admin.display(boolean=True, description='Low stock')
    def is_low_stock(self, obj):
        return obj.is_low_stock
