import django_filters
from django.db.models import Q
from backend.catalog.filters import is_truthy
from .models import Customer, Supplier
from .services import high_risk_q


class SupplierFilter(django_filters.FilterSet):
    search = django_filters.CharFilter(method='filter_search', label='Search')

    class Meta:
        model = Supplier
        fields = ['search']

    def filter_search(self, queryset, name, value):
        """Match on name or phone"""
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(Q(name__icontains=value) | Q(phone__icontains=value))


class CustomerFilter(SupplierFilter):
    high_risk = django_filters.CharFilter(method='filter_high_risk', label='High Risk')

    class Meta:
        model = Customer
        fields = ['search', 'high_risk']

    def filter_high_risk(self, queryset, name, value):
        if is_truthy(value):
            return queryset.filter(high_risk_q())
        return queryset
