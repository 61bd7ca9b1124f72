from django.conf import settings
from django.db import models
from decimal import Decimal


class Expense(models.Model):
    """Money spent out of a department's takings; counted once approved"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='expenses')
    description = models.CharField(max_length=255)
    category = models.CharField(max_length=100, blank=True, null=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    expense_date = models.DateField()
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='expenses')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_expenses')
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'expenses'
        ordering = ['-expense_date', '-created_at']

    def __str__(self):
        return f"{self.description} ({self.amount})"


class Reconciliation(models.Model):
    """End of day cash count compared with recorded cash sales"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('completed', 'Completed'),
        ('discrepancy', 'Discrepancy'),
    ]

    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='reconciliations')
    cashier_name = models.CharField(max_length=255)
    date = models.DateField()
    system_cash = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    reported_cash = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discrepancy = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='reconciliations')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'reconciliations'
        ordering = ['-date', '-created_at']


class SuspendedRevenue(models.Model):
    """Unexplained cash held aside until investigated"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('investigating', 'Investigating'),
        ('resolved', 'Resolved'),
        ('written_off', 'Written Off'),
    ]

    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='suspended_revenue')
    reconciliation = models.ForeignKey(
        Reconciliation, on_delete=models.SET_NULL, null=True, blank=True, related_name='suspended_revenue'
    )
    cashier_name = models.CharField(max_length=255)
    date = models.DateField()
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    investigation_notes = models.TextField(blank=True, null=True)
    resolved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='resolved_revenue')
    resolved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'suspended_revenue'
        ordering = ['-date', '-created_at']


class Credit(models.Model):
    """Money lent between departments or to/from outside parties"""
    TRANSACTION_TYPE_CHOICES = [
        ('interdepartmental', 'Interdepartmental'),
        ('external_in', 'External In'),
        ('external_out', 'External Out'),
    ]

    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('partial', 'Partial'),
        ('settled', 'Settled'),
        ('rejected', 'Rejected'),
    ]

    SETTLEMENT_CHOICES = [
        ('pending', 'Pending'),
        ('settled', 'Settled'),
    ]

    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES, default='interdepartmental')
    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='credits')
    from_department = models.ForeignKey(
        'departments.Department', on_delete=models.SET_NULL, null=True, blank=True, related_name='credits_given'
    )
    to_department = models.ForeignKey(
        'departments.Department', on_delete=models.SET_NULL, null=True, blank=True, related_name='credits_received'
    )
    customer = models.ForeignKey('parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='credits')
    sale = models.ForeignKey('pos.Sale', on_delete=models.SET_NULL, null=True, blank=True, related_name='credits')
    from_person = models.CharField(max_length=255, blank=True, null=True)
    to_person = models.CharField(max_length=255, blank=True, null=True)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    paid_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    purpose = models.CharField(max_length=255)
    notes = models.TextField(blank=True, null=True)
    due_date = models.DateField(null=True, blank=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending', db_index=True)
    settlement_status = models.CharField(max_length=20, choices=SETTLEMENT_CHOICES, default='pending')
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='credits_created')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='credits_approved')
    approved_at = models.DateTimeField(null=True, blank=True)
    settled_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'credits'
        ordering = ['-created_at']

    @property
    def notify_department_id(self):
        """Interdepartmental credits notify the receiving side, external ones the lender"""
        if self.transaction_type == 'interdepartmental':
            return self.to_department_id
        return self.from_department_id


class InboxMessage(models.Model):
    """Message between departments, usually about a credit"""
    from_department = models.ForeignKey(
        'departments.Department', on_delete=models.SET_NULL, null=True, blank=True, related_name='sent_messages'
    )
    to_department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, null=True, blank=True, related_name='inbox_messages'
    )
    credit = models.ForeignKey(Credit, on_delete=models.SET_NULL, null=True, blank=True, related_name='messages')
    subject = models.CharField(max_length=255)
    message = models.TextField()
    is_read = models.BooleanField(default=False)
    sent_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='sent_messages')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'interdepartmental_inbox'
        ordering = ['-created_at']


class CashDrawerShift(models.Model):
    STATUS_CHOICES = [
        ('open', 'Open'),
        ('closed', 'Closed'),
    ]

    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='cash_drawer_shifts')
    opened_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='opened_shifts')
    closed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='closed_shifts')
    opening_float = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    closing_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    expected_cash = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    discrepancy = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default='open')
    notes = models.TextField(blank=True, null=True)
    opened_at = models.DateTimeField(auto_now_add=True)
    closed_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = 'cash_drawer_shifts'
        ordering = ['-opened_at']
        constraints = [
            models.UniqueConstraint(
                fields=['department'], condition=models.Q(status='open'), name='one_open_shift_per_department'
            ),
        ]


class CurrencyCashCount(models.Model):
    """Cash counted in one currency when a drawer closes"""
    shift = models.ForeignKey(CashDrawerShift, on_delete=models.CASCADE, related_name='currency_counts')
    currency = models.CharField(max_length=10)
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    exchange_rate = models.DecimalField(max_digits=12, decimal_places=4, default=Decimal('1'))
    amount_in_base = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    count_type = models.CharField(max_length=10, default='closing')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'currency_cash_counts'


class ClosingChecklist(models.Model):
    shift = models.OneToOneField(CashDrawerShift, on_delete=models.CASCADE, related_name='checklist')
    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='closing_checklists')
    completed_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='closing_checklists')
    cash_counted = models.BooleanField(default=False)
    cash_verified = models.BooleanField(default=False)
    discrepancy_explained = models.BooleanField(default=False)
    notes = models.TextField(blank=True, null=True)
    completed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'closing_checklists'
