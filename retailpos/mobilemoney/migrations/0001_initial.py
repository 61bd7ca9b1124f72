# Generated manually

from decimal import Decimal
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models
import retailpos.mobilemoney.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('departments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ServiceRegistration',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('service_type', models.CharField(choices=[('sim_registration', 'SIM Registration'), ('account_opening', 'Account Opening'), ('kyc_verification', 'KYC Verification'), ('other', 'Other')], default='sim_registration', max_length=30)),
                ('customer_name', models.CharField(db_index=True, max_length=200)),
                ('customer_phone', models.CharField(db_index=True, max_length=20)),
                ('customer_id_type', models.CharField(choices=[('national_id', 'National ID'), ('passport', 'Passport'), ('driving_license', 'Driving License'), ('voter_id', 'Voter ID')], default='national_id', max_length=30)),
                ('customer_id_number', models.CharField(blank=True, max_length=100, null=True)),
                ('customer_address', models.TextField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='service_registrations', to='departments.department')),
                ('registered_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='service_registrations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'service_registrations',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='DataPackage',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('data_amount', models.DecimalField(decimal_places=2, max_digits=10)),
                ('data_unit', models.CharField(choices=[('MB', 'MB'), ('GB', 'GB')], default='GB', max_length=5)),
                ('price', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12)),
                ('validity_period', models.CharField(blank=True, help_text='e.g. 24 hours, 7 days, 30 days', max_length=50)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='data_packages', to='departments.department')),
            ],
            options={
                'db_table': 'data_packages',
                'ordering': ['price'],
            },
        ),
        migrations.CreateModel(
            name='SimCardSettings',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('logo_url', models.URLField(blank=True, max_length=500, null=True)),
                ('help_codes', models.JSONField(blank=True, default=retailpos.mobilemoney.models.default_help_codes)),
                ('internet_settings', models.JSONField(blank=True, default=retailpos.mobilemoney.models.default_internet_settings)),
                ('sim_warnings', models.JSONField(blank=True, default=retailpos.mobilemoney.models.default_sim_warnings)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('department', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='sim_card_settings', to='departments.department')),
            ],
            options={
                'db_table': 'sim_card_settings',
                'verbose_name_plural': 'SIM card settings',
            },
        ),
    ]
