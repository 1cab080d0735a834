from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='PartSection',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('section_key', models.CharField(max_length=100, unique=True)),
                ('section_label', models.CharField(max_length=255)),
                ('sort_order', models.IntegerField(default=0)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'part_sections',
                'ordering': ['sort_order', 'section_key'],
            },
        ),
        migrations.CreateModel(
            name='PartCategoryTag',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category_value', models.CharField(max_length=100, unique=True)),
                ('category_label', models.CharField(max_length=255)),
                ('product_tags', models.JSONField(blank=True, default=list)),
                ('display_mode', models.CharField(choices=[('products', 'Products'), ('variants', 'Variants')], default='products', max_length=20)),
                ('assigned_section', models.CharField(blank=True, max_length=100, null=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'part_category_tags',
                'ordering': ['sort_order', 'category_value'],
            },
        ),
    ]
