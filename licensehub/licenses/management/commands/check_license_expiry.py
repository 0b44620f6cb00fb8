"""
Notify ITSG license admins about licenses that expired or expire soon.

Meant to be run from cron, e.g. once a day:

    0 7 * * * /path/to/venv/bin/python manage.py check_license_expiry
"""
import logging

from django.conf import settings
from django.core.management.base import BaseCommand
from django.utils import timezone

from licensehub.core.models import Department
from licensehub.licenses import services
from licensehub.notifications.models import NotificationType
from licensehub.notifications.services import notify_users, users_with

cron_logger = logging.getLogger('licensehub.license_cron')


def format_date(value):
    """``Jan 5, 2026`` style, in the project time zone"""
    value = timezone.localtime(value)
    return f"{value:%b} {value.day}, {value.year}"


class Command(BaseCommand):
    help = 'Send LICENSE_EXPIRED notifications for expired licenses and licenses expiring soon'

    def add_arguments(self, parser):
        parser.add_argument(
            '--days',
            type=int,
            default=None,
            help='Warn about licenses expiring within this many days (default: LICENSE_EXPIRY_WARNING_DAYS)',
        )

    def handle(self, *args, **options):
        days = options['days']
        if days is None:
            days = settings.LICENSEHUB['LICENSE_EXPIRY_WARNING_DAYS']

        cron_logger.info('Checking licenses nearing expiry...')
        licenses = services.expiring_licenses(days)
        if not licenses:
            cron_logger.info('No expiring or expired licenses today')
            self.stdout.write(self.style.SUCCESS('No expiring or expired licenses today'))
            return

        marked = services.mark_expired(licenses)
        recipients = users_with(services.LICENSE_ADMIN_ROLES, [Department.ITSG])

        for license in licenses:
            notify_users(
                recipients,
                NotificationType.LICENSE_EXPIRED,
                payload={
                    'name': license.name,
                    'vendor': license.vendor,
                    'expired_at': format_date(license.expiry_date),
                },
                url=f"/license-management/{license.pk}",
            )
            state = 'expired' if license.is_expired else 'expiring soon'
            cron_logger.info(f"Sent {state} alert for {license.name} ({license.vendor})")

        self.stdout.write(self.style.SUCCESS(
            f'Checked {len(licenses)} licenses: {len(marked)} marked expired, '
            f'{len(recipients)} recipients notified'
        ))
