# Generated manually for the PropDesk notification system

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
            name='Notification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, help_text='Opaque, stable identifier', primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, help_text='Timestamp when record was created')),
                ('updated_at', models.DateTimeField(auto_now=True, help_text='Timestamp when record was last updated')),
                ('is_deleted', models.BooleanField(db_index=True, default=False, help_text='Soft delete flag')),
                ('deleted_at', models.DateTimeField(blank=True, help_text='Timestamp when record was soft-deleted', null=True)),
                ('module', models.CharField(db_index=True, default='Work Orders', help_text='Publishing subsystem', max_length=50)),
                ('action', models.CharField(
                    choices=[
                        ('created', 'Created'),
                        ('updated', 'Updated'),
                        ('deleted', 'Deleted'),
                        ('status_changed', 'Status Changed'),
                    ],
                    db_index=True,
                    max_length=30,
                )),
                ('entity_id', models.CharField(blank=True, db_index=True, help_text='ID of the affected record', max_length=36)),
                ('message', models.TextField(help_text='Notification message body')),
                ('is_read', models.BooleanField(db_index=True, default=False, help_text='Whether the notification has been read')),
                ('read_at', models.DateTimeField(blank=True, help_text='When the notification was read', null=True)),
                ('actor', models.ForeignKey(
                    blank=True,
                    help_text='User whose action produced this notification',
                    null=True,
                    on_delete=django.db.models.deletion.SET_NULL,
                    related_name='sent_notifications',
                    to=settings.AUTH_USER_MODEL,
                )),
                ('recipients', models.ManyToManyField(
                    help_text='Users who should see this notification',
                    related_name='received_notifications',
                    to=settings.AUTH_USER_MODEL,
                )),
            ],
            options={
                'verbose_name': 'Notification',
                'verbose_name_plural': 'Notifications',
                'db_table': 'notifications',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='notification',
            index=models.Index(fields=['module', 'entity_id'], name='notif_module_entity_idx'),
        ),
        migrations.AddIndex(
            model_name='notification',
            index=models.Index(fields=['is_read', '-created_at'], name='notif_read_created_idx'),
        ),
    ]
