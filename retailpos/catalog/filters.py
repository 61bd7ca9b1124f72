import django_filters
from django.db.models import Q, F
from .models import Product


class ProductFilter(django_filters.FilterSet):
    """Product list filters using django-filter"""

    search = django_filters.CharFilter(method='filter_search', label='Search')
    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    supplier = django_filters.NumberFilter(field_name='supplier_id', lookup_expr='exact')
    tracking_type = django_filters.ChoiceFilter(choices=Product.TRACKING_TYPE_CHOICES)
    active = django_filters.BooleanFilter(field_name='is_active')
    archived = django_filters.BooleanFilter(field_name='is_archived')
    low_stock = django_filters.BooleanFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.BooleanFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'supplier', 'tracking_type', 'active', 'archived',
                  'low_stock', 'out_of_stock']

    def filter_search(self, queryset, name, value):
        """Match every word against name, brand, SKU or either barcode"""
        words = [w for w in (value or '').split() if w]
        for word in words:
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(brand__icontains=word) |
                Q(sku__iexact=word) |
                Q(barcode__iexact=word) |
                Q(internal_barcode__iexact=word)
            )
        return queryset

    def filter_low_stock(self, queryset, name, value):
        if value is None:
            return queryset
        condition = Q(tracking_type='quantity', stock__lte=F('min_stock'))
        return queryset.filter(condition) if value else queryset.exclude(condition)

    def filter_out_of_stock(self, queryset, name, value):
        if value is None:
            return queryset
        condition = Q(tracking_type='quantity', stock__lte=0) | Q(tracking_type='ml', total_ml__lte=0)
        return queryset.filter(condition) if value else queryset.exclude(condition)
