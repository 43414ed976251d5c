import django_filters
from django.db.models import F, Q
from .models import Product


def is_truthy(value):
    """Query string flags arrive as 'true'/'false' strings"""
    if isinstance(value, str):
        return value.lower() in ('true', '1', 'yes')
    return bool(value)


class ProductFilter(django_filters.FilterSet):
    """Filter for Product model using django-filter"""

    # Basic search - name, SKU, barcode, description, category
    search = django_filters.CharFilter(method='filter_search', label='Search')

    category = django_filters.NumberFilter(field_name='category_id', lookup_expr='exact')
    product_type = django_filters.CharFilter(field_name='product_type', lookup_expr='exact')
    active = django_filters.CharFilter(method='filter_active', label='Active')

    # Stock status filters
    in_stock = django_filters.CharFilter(method='filter_in_stock', label='In Stock')
    low_stock = django_filters.CharFilter(method='filter_low_stock', label='Low Stock')
    out_of_stock = django_filters.CharFilter(method='filter_out_of_stock', label='Out of Stock')

    class Meta:
        model = Product
        fields = ['search', 'category', 'product_type', 'active', 'in_stock', 'low_stock', 'out_of_stock']

    def filter_search(self, queryset, name, value):
        """Every word must appear in the name, SKU, barcode, description or category"""
        words = (value or '').split()
        for word in words:
            queryset = queryset.filter(
                Q(name__icontains=word) |
                Q(sku__icontains=word) |
                Q(barcode__icontains=word) |
                Q(description__icontains=word) |
                Q(category__name__icontains=word) |
                Q(variants__sku__icontains=word) |
                Q(variants__barcode__icontains=word)
            )
        return queryset.distinct() if words else queryset

    def filter_active(self, queryset, name, value):
        if value is None or value == '':
            return queryset
        return queryset.filter(is_active=is_truthy(value))

    def filter_in_stock(self, queryset, name, value):
        """Untracked products are always in stock"""
        if not value or not is_truthy(value):
            return queryset
        return queryset.filter(Q(track_inventory=False) | Q(quantity__gt=0))

    def filter_low_stock(self, queryset, name, value):
        if not value or not is_truthy(value):
            return queryset
        return queryset.filter(
            track_inventory=True,
            quantity__gt=0,
            quantity__lte=F('low_stock_threshold'),
        )

    def filter_out_of_stock(self, queryset, name, value):
        if not value or not is_truthy(value):
            return queryset
        return queryset.filter(track_inventory=True, quantity__lte=0)
