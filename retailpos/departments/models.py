from decimal import Decimal

from django.db import models


class Department(models.Model):
    """A trading department (shop section) with its own stock, sales and staff"""
    name = models.CharField(max_length=255, unique=True)
    description = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    is_perfume_department = models.BooleanField(default=False)
    is_mobile_money = models.BooleanField(default=False)
    settings = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'departments'
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def kind(self):
        if self.is_perfume_department:
            return 'Perfume'
        if self.is_mobile_money:
            return 'Mobile Money'
        return 'Regular'


class BusinessSettings(models.Model):
    """
    Business identity, receipt and reporting settings.

    The row without a department holds the global settings; a department
    row overrides them for that department.
    """
    FREQUENCY_CHOICES = [
        ('daily', 'Daily'),
        ('weekly', 'Weekly'),
        ('monthly', 'Monthly'),
    ]

    department = models.OneToOneField(
        Department, on_delete=models.CASCADE, null=True, blank=True, related_name='business_settings'
    )
    business_name = models.CharField(max_length=255, default='My Business')
    business_address = models.TextField(blank=True, null=True)
    business_phone = models.CharField(max_length=50, blank=True, null=True)
    business_email = models.EmailField(blank=True, null=True)
    website = models.CharField(max_length=255, blank=True, null=True)
    whatsapp_number = models.CharField(max_length=30, blank=True, null=True)
    logo_url = models.URLField(max_length=500, blank=True, null=True)
    receipt_logo_url = models.URLField(max_length=500, blank=True, null=True)
    receipt_footer = models.TextField(blank=True, null=True)
    seasonal_remark = models.CharField(max_length=255, blank=True, null=True)
    show_back_page = models.BooleanField(default=False)
    currency = models.CharField(max_length=10, default='UGX')
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal('0.00'))
    admin_email = models.EmailField(blank=True, null=True)
    admin_report_email = models.EmailField(blank=True, null=True)
    report_email_enabled = models.BooleanField(default=False)
    report_email_frequency = models.CharField(max_length=10, choices=FREQUENCY_CHOICES, default='daily')
    report_email_time = models.TimeField(null=True, blank=True)
    settings_json = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'business_settings'
        verbose_name_plural = 'business settings'

    def __str__(self):
        scope = self.department.name if self.department_id else 'Global'
        return f"{self.business_name} ({scope})"

    @classmethod
    def get_global(cls):
        return cls.objects.filter(department__isnull=True).first()

    @classmethod
    def for_department(cls, department_id=None):
        """Department settings if present, else global, else unsaved defaults"""
        if department_id:
            own = cls.objects.filter(department_id=department_id).first()
            if own:
                return own
        return cls.get_global() or cls()

    @property
    def report_recipient(self):
        return self.admin_report_email or self.admin_email
