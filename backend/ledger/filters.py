import django_filters
from .models import Transaction


class TransactionFilter(django_filters.FilterSet):
    type = django_filters.ChoiceFilter(choices=Transaction.TYPE_CHOICES)
    category = django_filters.CharFilter(field_name='category', lookup_expr='exact')
    customer = django_filters.NumberFilter(field_name='customer_id', lookup_expr='exact')
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='date__lte')

    class Meta:
        model = Transaction
        fields = ['type', 'category', 'customer', 'supplier', 'date_from', 'date_to']
