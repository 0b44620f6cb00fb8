import django_filters
from django.db.models import Q

from .models import License, LicenseType, LicenseStatus

ALL = 'ALL'


class LicenseFilter(django_filters.FilterSet):
    """
    Filters for the license-management table.

    ``vendor``, ``type`` and ``status`` accept ``ALL`` (or nothing) to mean
    "no filter".
    """
    search = django_filters.CharFilter(method='filter_search')
    vendor = django_filters.CharFilter(method='filter_exact')
    type = django_filters.ChoiceFilter(choices=[(ALL, ALL)] + LicenseType.choices, method='filter_exact')
    status = django_filters.ChoiceFilter(choices=[(ALL, ALL)] + LicenseStatus.choices, method='filter_exact')

    class Meta:
        model = License
        fields = ['search', 'vendor', 'type', 'status']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(vendor__icontains=value) |
            Q(description__icontains=value)
        )

    def filter_exact(self, queryset, name, value):
        if not value or value == ALL:
            return queryset
        return queryset.filter(**{name: value})
