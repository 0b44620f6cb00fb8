# Generated manually for the license and license key tables

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
            name='License',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('vendor', models.CharField(blank=True, default='', max_length=50)),
                ('owner', models.CharField(blank=True, max_length=100, null=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('type', models.CharField(choices=[('SEAT_BASED', 'Seat Based'), ('KEY_BASED', 'Key Based')], default='SEAT_BASED', max_length=20)),
                ('total_seats', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(choices=[('AVAILABLE', 'Available'), ('FULL', 'Full'), ('EXPIRED', 'Expired')], default='AVAILABLE', max_length=20)),
                ('cost', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('expiry_date', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('added_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='added_licenses', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'licenses',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['vendor'], name='idx_license_vendor'),
                    models.Index(fields=['status'], name='idx_license_status'),
                    models.Index(fields=['expiry_date'], name='idx_license_expiry'),
                ],
            },
        ),
        migrations.CreateModel(
            name='LicenseKey',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('key', models.CharField(blank=True, max_length=255, null=True)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('INACTIVE', 'Inactive'), ('ASSIGNED', 'Assigned'), ('REVOKED', 'Revoked')], default='ACTIVE', max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('added_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='added_license_keys', to=settings.AUTH_USER_MODEL)),
                ('assigned_to', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_license_keys', to=settings.AUTH_USER_MODEL)),
                ('license', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='keys', to='licenses.license')),
            ],
            options={
                'db_table': 'license_keys',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['license', 'status'], name='idx_license_key_status'),
                ],
                'constraints': [
                    models.UniqueConstraint(fields=('license', 'key'), name='uniq_license_key'),
                ],
            },
        ),
    ]
