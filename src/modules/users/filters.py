import django_filters
from django.contrib.auth import get_user_model


class UserFilter(django_filters.FilterSet):
    username = django_filters.CharFilter(field_name="username", lookup_expr="icontains")
    mobile_number = django_filters.CharFilter(field_name="mobile_number", lookup_expr="exact")
    is_staff = django_filters.BooleanFilter(field_name="is_staff")

    class Meta:
        model = get_user_model()
        fields = ["username", "mobile_number", "is_staff"]
