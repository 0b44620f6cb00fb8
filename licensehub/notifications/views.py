import logging

from django.conf import settings
from django.core.cache import cache
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from . import services
from .serializers import NotificationSerializer
from licensehub.core.cache_utils import make_cache_key, notifications_tag
from licensehub.core.permissions import get_identity

logger = logging.getLogger(__name__)


def _notification_feed(identity):
    cache_key = make_cache_key(notifications_tag(identity.user_id), 'feed')
    data = cache.get(cache_key)
    if data is None:
        data = NotificationSerializer(services.get_notifications(identity), many=True).data
        cache.set(cache_key, data, settings.LICENSEHUB['CACHE_TTL'])
    return data


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def notification_list(request):
    """Caller's notifications, newest first"""
    identity = get_identity(request)
    notifications = _notification_feed(identity)
    unread = sum(1 for notification in notifications if not notification['read'])
    return Response({'data': notifications, 'meta': {'unread': unread}})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def notification_mark_read(request, pk):
    notification = services.mark_notification_read(get_identity(request), pk, request=request)
    return Response({'success': True, 'data': NotificationSerializer(notification).data})
