import math

from django.conf import settings
from rest_framework import serializers


def default_page_limit():
    return settings.LICENSEHUB['DEFAULT_PAGE_LIMIT']


def max_page_limit():
    return settings.LICENSEHUB['MAX_PAGE_LIMIT']


class PageQuerySerializer(serializers.Serializer):
    """Validates ``page``/``limit`` query parameters"""
    page = serializers.IntegerField(required=False, min_value=1, default=1)
    limit = serializers.IntegerField(required=False, min_value=1)

    def validate_limit(self, value):
        if value > max_page_limit():
            raise serializers.ValidationError(f"Limit cannot exceed {max_page_limit()}")
        return value

    def validate(self, attrs):
        attrs.setdefault('limit', default_page_limit())
        return attrs


def paginate(queryset, page, limit):
    """
    Slice ``queryset`` for ``page`` (1-based) of ``limit`` rows.

    Pages past the end come back empty rather than clamped to the last page.
    Returns ``(rows, meta)``.
    """
    total = queryset.count()
    offset = (page - 1) * limit
    rows = list(queryset[offset:offset + limit])
    meta = {
        'total': total,
        'page': page,
        'limit': limit,
        'total_pages': math.ceil(total / limit) if limit else 0,
    }
    return rows, meta
