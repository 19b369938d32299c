import django_filters
from .models import Purchase


class PurchaseFilter(django_filters.FilterSet):
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='date__lte')

    class Meta:
        model = Purchase
        fields = ['supplier', 'date_from', 'date_to']
