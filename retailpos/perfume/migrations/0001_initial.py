# Generated manually

from decimal import Decimal
import django.db.models.deletion
import retailpos.perfume.models
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Scent',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(db_index=True, max_length=200)),
                ('description', models.TextField(blank=True, null=True)),
                ('stock_ml', models.DecimalField(decimal_places=1, default=Decimal('0.0'), max_digits=10)),
                ('empty_bottle_weight_g', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('current_weight_g', models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True)),
                ('density', models.DecimalField(decimal_places=3, default=Decimal('0.900'), max_digits=5)),
                ('last_weighed_at', models.DateTimeField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='scents', to='departments.department')),
            ],
            options={
                'db_table': 'perfume_scents',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='PerfumePricingConfig',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('retail_price_per_ml', models.DecimalField(decimal_places=2, default=Decimal('800.00'), max_digits=10)),
                ('wholesale_price_per_ml', models.DecimalField(decimal_places=2, default=Decimal('400.00'), max_digits=10)),
                ('retail_bottle_pricing', models.JSONField(blank=True, default=retailpos.perfume.models.default_retail_bottle_pricing)),
                ('wholesale_bottle_pricing', models.JSONField(blank=True, default=dict)),
                ('bottle_cost_config', models.JSONField(blank=True, default=retailpos.perfume.models.default_bottle_cost_config)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='perfume_pricing', to='departments.department')),
            ],
            options={
                'db_table': 'perfume_pricing_config',
            },
        ),
        migrations.CreateModel(
            name='CustomerPreference',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('preferred_scents', models.JSONField(blank=True, default=list)),
                ('preferred_bottle_sizes', models.JSONField(blank=True, default=list)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('customer', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='scent_preferences', to='parties.customer')),
                ('department', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='customer_preferences', to='departments.department')),
            ],
            options={
                'db_table': 'customer_preferences',
            },
        ),
        migrations.AddConstraint(
            model_name='customerpreference',
            constraint=models.UniqueConstraint(fields=('customer', 'department'), name='unique_customer_preference_per_department'),
        ),
    ]
