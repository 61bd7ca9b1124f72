from django.conf import settings
from django.db import models
from decimal import Decimal


def default_help_codes():
    return {
        'check_balance': 'Dial *165# or *131#',
        'mobile_money': 'Dial *165# (MTN) or *185# (Airtel)',
        'customer_care': 'Dial 100 (MTN) or 175 (Airtel)',
        'check_number': 'Dial *135# or *131*1#',
        'data_balance': 'Dial *131*4# or *165*4#',
    }


def default_internet_settings():
    return {
        'automatic': 'Dial *165*4# and follow prompts',
        'sms': 'Send "Internet" to 165 via SMS',
        'manual': 'Go to Settings > Mobile Networks > Access Point Names',
        'apn': 'internet / wap.airtel.com',
    }


def default_sim_warnings():
    return [
        'Keep your SIM card PIN secure and never share it',
        'Register your number with mobile money for financial transactions',
        'Contact customer care immediately if you lose your SIM card',
        'Update your personal information regularly with the network provider',
        'Beware of fraudulent calls asking for personal information',
        'Use official channels for all mobile money transactions',
    ]


class ServiceRegistration(models.Model):
    """SIM registration and account opening done at the mobile money counter"""
    SERVICE_TYPE_CHOICES = [
        ('sim_registration', 'SIM Registration'),
        ('account_opening', 'Account Opening'),
        ('kyc_verification', 'KYC Verification'),
        ('other', 'Other'),
    ]

    ID_TYPE_CHOICES = [
        ('national_id', 'National ID'),
        ('passport', 'Passport'),
        ('driving_license', 'Driving License'),
        ('voter_id', 'Voter ID'),
    ]

    service_type = models.CharField(max_length=30, choices=SERVICE_TYPE_CHOICES, default='sim_registration')
    customer_name = models.CharField(max_length=200, db_index=True)
    customer_phone = models.CharField(max_length=20, db_index=True)
    customer_id_type = models.CharField(max_length=30, choices=ID_TYPE_CHOICES, default='national_id')
    customer_id_number = models.CharField(max_length=100, blank=True, null=True)
    customer_address = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, related_name='service_registrations'
    )
    registered_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='service_registrations'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.customer_name} ({self.get_service_type_display()})"

    class Meta:
        db_table = 'service_registrations'
        ordering = ['-created_at']

    @property
    def service_type_label(self):
        """'sim_registration' -> 'SIM REGISTRATION' as printed on cards"""
        return self.service_type.replace('_', ' ').upper()


class DataPackage(models.Model):
    """Data bundles offered at the counter"""
    UNIT_CHOICES = [
        ('MB', 'MB'),
        ('GB', 'GB'),
    ]

    name = models.CharField(max_length=200)
    data_amount = models.DecimalField(max_digits=10, decimal_places=2)
    data_unit = models.CharField(max_length=5, choices=UNIT_CHOICES, default='GB')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    validity_period = models.CharField(max_length=50, blank=True, help_text='e.g. 24 hours, 7 days, 30 days')
    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='data_packages')
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} - {self.data_amount}{self.data_unit}"

    class Meta:
        db_table = 'data_packages'
        ordering = ['price']


class SimCardSettings(models.Model):
    """What gets printed on the customer SIM card, per department"""
    department = models.OneToOneField(
        'departments.Department', on_delete=models.CASCADE, related_name='sim_card_settings'
    )
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    help_codes = models.JSONField(default=default_help_codes, blank=True)
    internet_settings = models.JSONField(default=default_internet_settings, blank=True)
    sim_warnings = models.JSONField(default=default_sim_warnings, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'sim_card_settings'
        verbose_name_plural = 'SIM card settings'

    def __str__(self):
        return f"SIM card settings ({self.department})"
