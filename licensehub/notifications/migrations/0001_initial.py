# Generated manually for the notifications table

import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('message', models.TextField()),
                ('type', models.CharField(choices=[('LICENSE_CREATED', 'License Created'), ('LICENSE_ASSIGNED', 'License Assigned'), ('LICENSE_EXPIRED', 'License Expired'), ('LICENSE_REQUESTED', 'License Requested'), ('PROCUREMENT_REQUEST', 'Procurement Request'), ('USER_ADDED', 'User Added'), ('GENERAL', 'General')], default='GENERAL', max_length=30)),
                ('url', models.CharField(blank=True, max_length=500, null=True)),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['user', '-created_at'], name='idx_notification_user'),
                    models.Index(fields=['user', 'read'], name='idx_notification_unread'),
                ],
            },
        ),
    ]
