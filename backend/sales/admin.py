from django.contrib import admin
from .models import Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    fields = ['product', 'quantity', 'unit_price', 'total_price']
    readonly_fields = ['product', 'quantity', 'unit_price', 'total_price']
    can_delete = False


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['id', 'customer', 'date', 'total_amount', 'paid_amount', 'payment_status', 'created_by']
    list_filter = ['payment_status', 'date']
    search_fields = ['notes', 'customer__name']
    ordering = ['-date', '-id']
    inlines = [SaleItemInline]
    readonly_fields = ['customer', 'date', 'total_amount', 'paid_amount', 'payment_status', 'created_by', 'created_at']

    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
