from django.contrib import admin
from .models import Transaction


@admin.register(Transaction)
class TransactionAdmin(admin.ModelAdmin):
    list_display = ['id', 'type', 'category', 'amount', 'customer', 'supplier', 'description', 'created_by', 'date']
    list_filter = ['type', 'category', 'date']
    search_fields = ['description', 'customer__name', 'supplier__name']
    ordering = ['-date', '-id']
    date_hierarchy = 'date'
    # Rows are written only by the ledger services
    readonly_fields = ['type', 'category', 'amount', 'customer', 'supplier', 'created_by', 'date']

    def has_add_permission(self, request):
        return False
