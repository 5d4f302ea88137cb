import django_filters

from modules.orders.constants import TERMINAL_STATES, OrderScope
from modules.orders.models import Order


class OrderFilter(django_filters.FilterSet):
    scope = django_filters.ChoiceFilter(choices=OrderScope.choices, method="filter_scope")
    status = django_filters.CharFilter(field_name="status", lookup_expr="iexact")
    delivery_option = django_filters.CharFilter(
        field_name="delivery_option", lookup_expr="iexact"
    )
    buyer = django_filters.UUIDFilter(field_name="buyer_id")
    start_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__gte")
    end_date = django_filters.DateFilter(field_name="created_at", lookup_expr="date__lte")
    min_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="gte")
    max_total = django_filters.NumberFilter(field_name="total_price", lookup_expr="lte")

    class Meta:
        model = Order
        fields = [
            "scope",
            "status",
            "delivery_option",
            "buyer",
            "start_date",
            "end_date",
            "min_total",
            "max_total",
        ]

    def filter_scope(self, queryset, name, value):
        if value == OrderScope.HISTORY:
            return queryset.filter(status__in=TERMINAL_STATES)
        return queryset.exclude(status__in=TERMINAL_STATES)
