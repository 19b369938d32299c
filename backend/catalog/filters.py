import django_filters
from django.db.models import F
from .models import Product


def is_truthy(value):
    if isinstance(value, str):
        return value.lower() in ('1', 'true', 'yes')
    return bool(value)


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    search = django_filters.CharFilter(field_name='name', lookup_expr='icontains', label='Search')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')

    class Meta:
        model = Product
        fields = ['search', 'low_stock']

    def filter_low_stock(self, queryset, name, value):
        """Products at or below their reorder level"""
        if value is None or value == '':
            return queryset
        if is_truthy(value):
            return queryset.filter(current_stock__lte=F('reorder_level'))
        return queryset
