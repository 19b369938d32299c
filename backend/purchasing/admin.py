from django.contrib import admin
from .models import Purchase, PurchaseItem


class PurchaseItemInline(admin.TabularInline):
    model = PurchaseItem
    extra = 0
    fields = ['product', 'quantity', 'unit_price', 'total_price']
    readonly_fields = ['product', 'quantity', 'unit_price', 'total_price']
    can_delete = False


@admin.register(Purchase)
class PurchaseAdmin(admin.ModelAdmin):
    list_display = ['id', 'supplier', 'date', 'total_cost', 'transport_cost', 'labor_cost', 'created_by']
    list_filter = ['supplier', 'date']
    search_fields = ['notes', 'supplier__name']
    ordering = ['-date', '-id']
    inlines = [PurchaseItemInline]
    readonly_fields = ['supplier', 'date', 'total_cost', 'transport_cost', 'labor_cost', 'created_by', 'created_at']

    # Created only by post_purchase
    def has_add_permission(self, request):
        return False

    def has_delete_permission(self, request, obj=None):
        return False
