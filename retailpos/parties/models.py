from django.conf import settings
from django.db import models
from decimal import Decimal


class Customer(models.Model):
    """Customers, scoped to the department that serves them"""
    name = models.CharField(max_length=200, db_index=True)
    phone = models.CharField(max_length=20, blank=True, null=True, db_index=True)
    email = models.EmailField(blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    department = models.ForeignKey(
        'departments.Department', on_delete=models.SET_NULL, null=True, blank=True, related_name='customers'
    )
    credit_limit = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    outstanding_balance = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True, null=True)
    payment_reminder_count = models.PositiveIntegerField(default=0)
    last_payment_reminder_sent = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    @property
    def available_credit(self):
        return max(Decimal('0.00'), self.credit_limit - self.outstanding_balance)

    class Meta:
        db_table = 'customers'
        ordering = ['name']


class Supplier(models.Model):
    """Suppliers"""
    name = models.CharField(max_length=200)
    contact_person = models.CharField(max_length=200, blank=True)
    phone = models.CharField(max_length=20, blank=True)
    email = models.EmailField(blank=True)
    address = models.TextField(blank=True)
    notes = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'suppliers'
        ordering = ['name']


class CustomerCreditTransaction(models.Model):
    """Customer credit ledger: charges raise the outstanding balance, payments lower it"""
    TRANSACTION_TYPE_CHOICES = [
        ('charge', 'Credit Sale'),
        ('payment', 'Payment'),
        ('adjustment', 'Adjustment'),
    ]

    customer = models.ForeignKey(Customer, on_delete=models.CASCADE, related_name='credit_transactions')
    department = models.ForeignKey(
        'departments.Department', on_delete=models.SET_NULL, null=True, blank=True, related_name='credit_transactions'
    )
    sale = models.ForeignKey(
        'pos.Sale', on_delete=models.SET_NULL, null=True, blank=True, related_name='credit_transactions'
    )
    transaction_type = models.CharField(max_length=20, choices=TRANSACTION_TYPE_CHOICES)
    amount = models.DecimalField(max_digits=12, decimal_places=2)
    balance_after = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    notes = models.TextField(blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='credit_transactions'
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.get_transaction_type_display()} {self.amount} - {self.customer.name}"

    class Meta:
        db_table = 'customer_credit_transactions'
        ordering = ['-created_at']
