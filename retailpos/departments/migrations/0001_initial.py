# Generated manually

from decimal import Decimal
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Department',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255, unique=True)),
                ('description', models.TextField(blank=True, null=True)),
                ('is_active', models.BooleanField(default=True)),
                ('is_perfume_department', models.BooleanField(default=False)),
                ('is_mobile_money', models.BooleanField(default=False)),
                ('settings', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'departments',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='BusinessSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('business_name', models.CharField(default='My Business', max_length=255)),
                ('business_address', models.TextField(blank=True, null=True)),
                ('business_phone', models.CharField(blank=True, max_length=50, null=True)),
                ('business_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('website', models.CharField(blank=True, max_length=255, null=True)),
                ('whatsapp_number', models.CharField(blank=True, max_length=30, null=True)),
                ('logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('receipt_logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('receipt_footer', models.TextField(blank=True, null=True)),
                ('seasonal_remark', models.CharField(blank=True, max_length=255, null=True)),
                ('show_back_page', models.BooleanField(default=False)),
                ('currency', models.CharField(default='UGX', max_length=10)),
                ('tax_rate', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=5)),
                ('admin_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('admin_report_email', models.EmailField(blank=True, max_length=254, null=True)),
                ('report_email_enabled', models.BooleanField(default=False)),
                ('report_email_frequency', models.CharField(choices=[('daily', 'Daily'), ('weekly', 'Weekly'), ('monthly', 'Monthly')], default='daily', max_length=10)),
                ('report_email_time', models.TimeField(blank=True, null=True)),
                ('settings_json', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='business_settings', to='departments.department')),
            ],
            options={
                'db_table': 'business_settings',
                'verbose_name_plural': 'business settings',
            },
        ),
    ]
