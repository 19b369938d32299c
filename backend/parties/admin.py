from django.contrib import admin
from .models import Customer, Supplier


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'credit_limit', 'total_debt', 'is_high_risk', 'last_payment_date', 'created_at']
    list_filter = ['is_high_risk', 'created_at']
    search_fields = ['name', 'phone']
    ordering = ['name']
    readonly_fields = ['total_debt', 'last_payment_date', 'created_at']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'address', 'created_at']
    list_filter = ['created_at']
    search_fields = ['name', 'phone']
    ordering = ['name']
