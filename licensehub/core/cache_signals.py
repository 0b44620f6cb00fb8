"""
Cache invalidation signals
Revalidate cache tags automatically when rows change, after the
surrounding transaction commits
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging
import threading
from contextlib import contextmanager

from .cache_utils import (
    revalidate_tags_on_commit,
    USER_MANAGEMENT_TAG, MANAGERS_TAG,
    LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG,
    notifications_tag,
)

logger = logging.getLogger(__name__)

# Thread-local storage to track signal suspension
_thread_locals = threading.local()


@contextmanager
def suspend_cache_signals():
    """
    Temporarily suspend tag revalidation from signals.
    Used by bulk writes; the caller revalidates once after the block.
    """
    previous = is_suspended()
    try:
        _thread_locals.suspended = True
        yield
    finally:
        _thread_locals.suspended = previous


def is_suspended():
    return getattr(_thread_locals, 'suspended', False)


@receiver([post_save, post_delete], sender='core.User')
def user_changed(sender, instance, **kwargs):
    if is_suspended():
        return
    revalidate_tags_on_commit(USER_MANAGEMENT_TAG, MANAGERS_TAG)


@receiver([post_save, post_delete], sender='licenses.License')
def license_changed(sender, instance, **kwargs):
    if is_suspended():
        return
    revalidate_tags_on_commit(LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG)


@receiver([post_save, post_delete], sender='licenses.LicenseKey')
def license_key_changed(sender, instance, **kwargs):
    if is_suspended():
        return
    revalidate_tags_on_commit(LICENSE_MANAGEMENT_TAG, LICENSE_DROPDOWNS_TAG)


@receiver([post_save, post_delete], sender='notifications.Notification')
def notification_changed(sender, instance, **kwargs):
    if is_suspended():
        return
    revalidate_tags_on_commit(notifications_tag(instance.user_id))
