import uuid
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='ImportHistory',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('motorcycles', 'Motorcycles'), ('mappings', 'Mappings'), ('parts', 'Parts'), ('combined', 'Combined')], max_length=20)),
                ('filename', models.CharField(max_length=255)),
                ('records_count', models.IntegerField(default=0)),
                ('status', models.CharField(choices=[('success', 'Success'), ('error', 'Error')], max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'import_history',
                'ordering': ['-created_at'],
            },
        ),
    ]
