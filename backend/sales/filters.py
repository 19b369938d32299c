import django_filters
from .models import Sale


class SaleFilter(django_filters.FilterSet):
    customer = django_filters.NumberFilter(field_name='customer_id', lookup_expr='exact')
    payment_status = django_filters.ChoiceFilter(choices=Sale.PAYMENT_STATUS_CHOICES)
    date_from = django_filters.DateFilter(field_name='date', lookup_expr='date__gte')
    date_to = django_filters.DateFilter(field_name='date', lookup_expr='date__lte')

    class Meta:
        model = Sale
        fields = ['customer', 'payment_status', 'date_from', 'date_to']
