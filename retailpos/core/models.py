from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Staff account with a role and a home department"""
    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('manager', 'Manager'),
        ('cashier', 'Cashier'),
        ('staff', 'Staff'),
    ]

    phone = models.CharField(max_length=20, blank=True, null=True)
    role = models.CharField(max_length=20, choices=ROLE_CHOICES, default='cashier')
    department = models.ForeignKey(
        'departments.Department', on_delete=models.SET_NULL, null=True, blank=True, related_name='users'
    )
    nav_permissions = models.JSONField(default=list, blank=True, help_text="Page keys this user may open")
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def is_admin(self):
        return self.is_superuser or self.role == 'admin'

    @property
    def is_manager_or_admin(self):
        return self.is_admin or self.role == 'manager'

    @property
    def display_name(self):
        full_name = self.get_full_name()
        return full_name or self.username


class AuditLog(models.Model):
    """Audit log for critical operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('sale_create', 'Sale Created'),
        ('sale_update', 'Sale Updated'),
        ('sale_void', 'Sale Voided'),
        ('stock_adjust', 'Stock Adjustment'),
        ('stock_usage', 'Internal Stock Usage'),
        ('scent_weigh', 'Scent Weighed'),
        ('price_change', 'Price Change'),
        ('payment_add', 'Payment Added'),
        ('credit_status', 'Credit Status Changed'),
        ('expense_status', 'Expense Status Changed'),
        ('reconciliation', 'Cash Reconciliation'),
        ('drawer_open', 'Cash Drawer Opened'),
        ('drawer_close', 'Cash Drawer Closed'),
        ('report_sent', 'Report Sent'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object (e.g., product name, receipt number)")
    object_reference = models.CharField(max_length=255, blank=True, null=True, help_text="Reference identifier (e.g., receipt number, sale number)")
    department_id = models.BigIntegerField(null=True, blank=True)
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_idx'),
            models.Index(fields=['action'], name='audit_logs_action_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_idx'),
            models.Index(fields=['object_reference'], name='audit_logs_objref_idx'),
        ]

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"
