from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Motorcycle',
            fields=[
                ('recid', models.IntegerField(primary_key=True, serialize=False)),
                ('bike_category', models.CharField(blank=True, max_length=100, null=True)),
                ('bike_subcategory', models.CharField(blank=True, max_length=100, null=True)),
                ('bikemake', models.CharField(db_index=True, max_length=100)),
                ('bikemodel', models.CharField(max_length=255)),
                ('firstyear', models.IntegerField()),
                ('lastyear', models.IntegerField()),
                ('capacity', models.IntegerField(blank=True, null=True)),
                ('biketype', models.IntegerField(blank=True, null=True)),
                ('enginetype', models.CharField(blank=True, max_length=50, null=True)),
                ('oe_handlebar', models.CharField(blank=True, max_length=100, null=True)),
                ('oe_fcw', models.CharField(blank=True, max_length=100, null=True)),
                ('oe_rcw', models.CharField(blank=True, max_length=100, null=True)),
                ('front_brakepads', models.CharField(blank=True, max_length=100, null=True)),
                ('rear_brakepads', models.CharField(blank=True, max_length=100, null=True)),
                ('handlebars_78', models.CharField(blank=True, db_column='78_handlebars', max_length=100, null=True)),
                ('twinwall', models.CharField(blank=True, max_length=100, null=True)),
                ('fatbar', models.CharField(blank=True, max_length=100, null=True)),
                ('fatbar36', models.CharField(blank=True, max_length=100, null=True)),
                ('grips', models.CharField(blank=True, max_length=100, null=True)),
                ('cam', models.CharField(blank=True, max_length=100, null=True)),
                ('oe_barmount', models.CharField(blank=True, max_length=100, null=True)),
                ('barmount28', models.CharField(blank=True, max_length=100, null=True)),
                ('barmount36', models.CharField(blank=True, max_length=100, null=True)),
                ('fcwgroup', models.CharField(blank=True, max_length=100, null=True)),
                ('fcwgroup_range', models.CharField(blank=True, max_length=100, null=True)),
                ('fcwconv', models.CharField(blank=True, max_length=100, null=True)),
                ('rcwconv', models.CharField(blank=True, max_length=100, null=True)),
                ('rcwgroup', models.CharField(blank=True, max_length=100, null=True)),
                ('rcwgroup_range', models.CharField(blank=True, max_length=100, null=True)),
                ('twinring', models.CharField(blank=True, max_length=100, null=True)),
                ('oe_chain', models.CharField(blank=True, max_length=100, null=True)),
                ('chainconv', models.CharField(blank=True, max_length=100, null=True)),
                ('r1_chain', models.CharField(blank=True, max_length=100, null=True)),
                ('r3_chain', models.CharField(blank=True, max_length=100, null=True)),
                ('r4_chain', models.CharField(blank=True, max_length=100, null=True)),
                ('rr4_chain', models.CharField(blank=True, max_length=100, null=True)),
                ('clipon', models.CharField(blank=True, max_length=100, null=True)),
                ('rcwcarrier', models.CharField(blank=True, max_length=100, null=True)),
                ('active_handlecompare', models.CharField(blank=True, max_length=100, null=True)),
                ('other_fcw', models.CharField(blank=True, max_length=100, null=True)),
                ('custom_parts', models.JSONField(blank=True, default=dict)),
            ],
            options={
                'db_table': 'motorcycles',
                'ordering': ['bikemake', 'bikemodel', 'firstyear'],
                'indexes': [models.Index(fields=['bikemake', 'bikemodel'], name='motorcycles_make_model_idx'), models.Index(fields=['firstyear', 'lastyear'], name='motorcycles_years_idx')],
            },
        ),
        migrations.CreateModel(
            name='MotorcycleCategoryConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(max_length=100)),
                ('subcategory', models.CharField(blank=True, max_length=100, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('sort_order', models.IntegerField(default=0)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'motorcycle_category_config',
                'ordering': ['sort_order', 'category', 'subcategory'],
            },
        ),
        migrations.CreateModel(
            name='SearchAnalytics',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('search_query', models.CharField(max_length=255)),
                ('results_count', models.IntegerField(default=0)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'search_analytics',
                'ordering': ['-created_at'],
                'indexes': [models.Index(fields=['search_query'], name='search_analytics_query_idx'), models.Index(fields=['-created_at'], name='search_analytics_created_idx')],
            },
        ),
    ]
