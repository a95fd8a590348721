# Generated manually for the append-only work order history

from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('workorders', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='WorkOrderHistory',
            fields=[
                ('id', models.BigAutoField(primary_key=True, serialize=False)),
                ('action', models.CharField(db_index=True, help_text='Created, Updated, Deleted or the target status label', max_length=50)),
                ('description', models.TextField(blank=True)),
                ('performed_by', models.CharField(blank=True, db_index=True, help_text='ID of the acting user', max_length=36)),
                ('performed_at', models.DateTimeField(db_index=True, default=django.utils.timezone.now)),
                ('work_order', models.ForeignKey(
                    on_delete=django.db.models.deletion.PROTECT,
                    related_name='history_entries',
                    to='workorders.workorder',
                )),
            ],
            options={
                'verbose_name': 'Work Order History Entry',
                'verbose_name_plural': 'Work Order History',
                'db_table': 'work_order_history',
                'ordering': ['-performed_at', '-id'],
            },
        ),
        migrations.AddIndex(
            model_name='workorderhistory',
            index=models.Index(fields=['work_order', 'performed_at'], name='woh_order_time_idx'),
        ),
    ]
