# Generated manually for the PropDesk work order store

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Location',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Opaque, stable identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('is_deleted', models.BooleanField(db_index=True, default=False, help_text='Soft delete flag')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='Timestamp when record was soft-deleted', null=True)),
                ('name', models.CharField(max_length=200)),
                ('address', models.CharField(blank=True, max_length=500)),
            ],
            options={
                'db_table': 'locations',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Asset',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Opaque, stable identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('is_deleted', models.BooleanField(db_index=True, default=False, help_text='Soft delete flag')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='Timestamp when record was soft-deleted', null=True)),
                ('name', models.CharField(max_length=200)),
                ('asset_tag', models.CharField(blank=True, db_index=True, help_text='Label printed on the asset', max_length=50)),
                ('location', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='assets',
                    to='workorders.location',
                )),
            ],
            options={
                'db_table': 'assets',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='WorkOrder',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Opaque, stable identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('is_deleted', models.BooleanField(db_index=True, default=False, help_text='Soft delete flag')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='Timestamp when record was soft-deleted', null=True)),
                ('work_order_number', models.CharField(editable=False, help_text='Human-readable code (e.g. WO-2026-000042)', max_length=30, unique=True)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('work_type', models.CharField(
                    choices=[
                        ('preventive', 'Preventive'),
                        ('complaint', 'Complaint'),
                        ('job', 'Job'),
                        ('repair', 'Repair'),
                    ],
                    db_index=True,
                    max_length=20,
                )),
                ('status', models.CharField(
                    choices=[
                        ('active', 'Active'),
                        ('in_progress', 'In Progress'),
                        ('review', 'Review'),
                        ('done', 'Done'),
                    ],
                    db_index=True,
                    default='active',
                    max_length=20,
                )),
                ('priority', models.CharField(
                    choices=[('low', 'Low'), ('medium', 'Medium'), ('high', 'High')],
                    db_index=True,
                    default='medium',
                    max_length=10,
                )),
                ('due_date', models.DateField()),
                ('details', models.JSONField(blank=True, default=dict, help_text='Fields specific to the work type')),
                ('asset', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='work_orders',
                    to='workorders.asset',
                )),
                ('location', models.ForeignKey(
                    blank=True,
                    help_text='Copied from the asset at assignment time',
                    null=True,
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='work_orders',
                    to='workorders.location',
                )),
                ('assigned_to', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='assigned_work_orders',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('requested_by', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='requested_work_orders',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Work Order',
                'verbose_name_plural': 'Work Orders',
                'db_table': 'work_orders',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='WorkOrderPhoto',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Opaque, stable identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('is_deleted', models.BooleanField(db_index=True, default=False, help_text='Soft delete flag')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='Timestamp when record was soft-deleted', null=True)),
                ('url', models.URLField(max_length=1000)),
                ('uploaded_by', models.ForeignKey(
                    blank=True,
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='work_order_photos',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('work_order', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='photos',
                    to='workorders.workorder',
                )),
            ],
            options={
                'db_table': 'work_order_photos',
                'ordering': ['created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='workorder',
            index=models.Index(fields=['status', 'priority'], name='wo_status_priority_idx'),
        ),
        migrations.AddIndex(
            model_name='workorder',
            index=models.Index(fields=['work_type', 'status'], name='wo_type_status_idx'),
        ),
        migrations.AddIndex(
            model_name='workorder',
            index=models.Index(fields=['assigned_to', 'status'], name='wo_assignee_status_idx'),
        ),
    ]
