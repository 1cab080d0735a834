import django.db.models.deletion
import django.utils.timezone
import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('motorcycles', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='PartMapping',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('product_id', models.CharField(db_index=True, max_length=64)),
                ('compatible', models.BooleanField(default=True)),
                ('expected_sku', models.CharField(blank=True, max_length=100, null=True)),
                ('product_title', models.CharField(blank=True, max_length=255, null=True)),
                ('last_synced', models.DateTimeField(default=django.utils.timezone.now)),
                ('status', models.CharField(choices=[('active', 'Active'), ('stale', 'Stale'), ('healing', 'Healing')], default='active', max_length=20)),
                ('motorcycle', models.ForeignKey(db_column='motorcycle_recid', on_delete=django.db.models.deletion.CASCADE, related_name='part_mappings', to='motorcycles.motorcycle')),
            ],
            options={
                'db_table': 'part_mappings',
                'ordering': ['motorcycle_id', 'product_id'],
                'indexes': [models.Index(fields=['expected_sku'], name='part_mappings_sku_idx')],
            },
        ),
    ]
