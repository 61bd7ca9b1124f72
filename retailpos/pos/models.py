from django.conf import settings
from django.db import models
from decimal import Decimal


class DocumentSequence(models.Model):
    """Gapless counters for receipt and invoice numbers"""
    name = models.CharField(max_length=50, unique=True)
    last_value = models.PositiveIntegerField(default=0)

    class Meta:
        db_table = 'document_sequences'

    def __str__(self):
        return f"{self.name}: {self.last_value}"


class Sale(models.Model):
    """A completed (or voided) till transaction"""
    PAYMENT_METHOD_CHOICES = [
        ('cash', 'Cash'),
        ('card', 'Card'),
        ('mobile_money', 'Mobile Money'),
        ('credit', 'Credit'),
    ]

    STATUS_CHOICES = [
        ('completed', 'Completed'),
        ('voided', 'Voided'),
        ('pending', 'Pending'),
    ]

    sale_number = models.CharField(max_length=100, unique=True)
    receipt_number = models.CharField(max_length=50, unique=True)
    department = models.ForeignKey('departments.Department', on_delete=models.PROTECT, related_name='sales')
    customer = models.ForeignKey(
        'parties.Customer', on_delete=models.SET_NULL, null=True, blank=True, related_name='sales'
    )
    cashier = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='sales')
    cashier_name = models.CharField(max_length=200, blank=True)
    payment_method = models.CharField(max_length=20, choices=PAYMENT_METHOD_CHOICES, default='cash')
    subtotal = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    discount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    tax = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    total = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    amount_paid = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    change_amount = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='completed', db_index=True)
    is_invoice = models.BooleanField(default=False)
    invoice_number = models.CharField(max_length=50, blank=True, null=True)
    is_loan = models.BooleanField(default=False)
    notes = models.TextField(blank=True, null=True)
    remarks = models.TextField(blank=True, null=True)
    void_reason = models.TextField(blank=True, null=True)
    voided_at = models.DateTimeField(null=True, blank=True)
    voided_by = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='voided_sales'
    )
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.receipt_number

    class Meta:
        db_table = 'sales'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['department', 'created_at'], name='sales_dept_created_idx'),
            models.Index(fields=['status', 'payment_method'], name='sales_status_method_idx'),
        ]

    @property
    def displayed_discount(self):
        """Discount as printed on receipts: subtotal - total + tax"""
        return self.subtotal - self.total + self.tax

    @property
    def balance_due(self):
        return max(Decimal('0.00'), self.total - self.amount_paid)


class SaleItem(models.Model):
    """Sale line. Product, variant and service are kept nullable so history survives deletes."""
    ITEM_TYPE_CHOICES = [
        ('product', 'Product'),
        ('service', 'Service'),
        ('perfume_refill', 'Perfume Refill'),
        ('custom', 'Custom'),
    ]

    CUSTOMER_TYPE_CHOICES = [
        ('retail', 'Retail'),
        ('wholesale', 'Wholesale'),
    ]

    sale = models.ForeignKey(Sale, on_delete=models.CASCADE, related_name='items')
    item_type = models.CharField(max_length=20, choices=ITEM_TYPE_CHOICES, default='product')
    product = models.ForeignKey(
        'catalog.Product', on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items'
    )
    variant = models.ForeignKey(
        'catalog.ProductVariant', on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items'
    )
    service = models.ForeignKey(
        'catalog.Service', on_delete=models.SET_NULL, null=True, blank=True, related_name='sale_items'
    )
    name = models.CharField(max_length=255)
    quantity = models.PositiveIntegerField(default=1)
    unit_price = models.DecimalField(max_digits=12, decimal_places=2)
    total = models.DecimalField(max_digits=12, decimal_places=2)
    customer_type = models.CharField(max_length=20, choices=CUSTOMER_TYPE_CHOICES, blank=True, null=True)
    scent_mixture = models.CharField(max_length=500, blank=True, null=True)
    ml_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    price_per_ml = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    bottle_cost = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    selected_scents = models.JSONField(default=list, blank=True)

    def __str__(self):
        return f"{self.name} x{self.quantity}"

    class Meta:
        db_table = 'sale_items'
        ordering = ['id']
