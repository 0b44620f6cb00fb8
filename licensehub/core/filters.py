import django_filters
from django.db.models import Q

from .models import User, Role, Department


class UserFilter(django_filters.FilterSet):
    """
    Filters for the user-management table.

    ``search`` is a case-insensitive substring match over name, email and
    position, OR-combined; ``role`` and ``department`` are exact matches.
    """
    search = django_filters.CharFilter(method='filter_search')
    role = django_filters.ChoiceFilter(choices=Role.choices)
    department = django_filters.ChoiceFilter(choices=Department.choices)

    class Meta:
        model = User
        fields = ['search', 'role', 'department']

    def filter_search(self, queryset, name, value):
        value = value.strip()
        if not value:
            return queryset
        return queryset.filter(
            Q(name__icontains=value) |
            Q(email__icontains=value) |
            Q(position__icontains=value)
        )
