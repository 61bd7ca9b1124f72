from django.conf import settings
from django.db import models
from decimal import Decimal


class StockAdjustment(models.Model):
    """Manual stock corrections (in/out). Quantity is units, or ml for ml-tracked products."""
    ADJUSTMENT_TYPE_CHOICES = [
        ('in', 'Stock In'),
        ('out', 'Stock Out'),
    ]

    REASON_CHOICES = [
        ('restock', 'Restock'),
        ('damaged', 'Damaged'),
        ('expired', 'Expired'),
        ('found', 'Found'),
        ('theft', 'Theft'),
        ('correction', 'Correction'),
        ('other', 'Other'),
    ]

    adjustment_type = models.CharField(max_length=10, choices=ADJUSTMENT_TYPE_CHOICES)
    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='adjustments')
    variant = models.ForeignKey('catalog.ProductVariant', on_delete=models.CASCADE, related_name='adjustments', null=True, blank=True)
    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='stock_adjustments')
    quantity = models.DecimalField(max_digits=12, decimal_places=2)
    reason = models.CharField(max_length=50, choices=REASON_CHOICES)
    notes = models.TextField(blank=True)
    stock_after = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    created_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='stock_adjustments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'stock_adjustments'
        ordering = ['-created_at']


class InternalStockUsage(models.Model):
    """Stock consumed by the shop itself (testers, samples, breakage); deducted on approval"""
    STATUS_CHOICES = [
        ('pending', 'Pending'),
        ('approved', 'Approved'),
        ('rejected', 'Rejected'),
    ]

    product = models.ForeignKey('catalog.Product', on_delete=models.CASCADE, related_name='internal_usage')
    variant = models.ForeignKey('catalog.ProductVariant', on_delete=models.SET_NULL, null=True, blank=True, related_name='internal_usage')
    department = models.ForeignKey('departments.Department', on_delete=models.CASCADE, related_name='internal_usage')
    quantity = models.PositiveIntegerField(default=0)
    ml_quantity = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    reason = models.CharField(max_length=255)
    notes = models.TextField(blank=True, null=True)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='pending')
    requested_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, related_name='usage_requests')
    approved_by = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='usage_approvals')
    approved_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} x{self.ml_quantity or self.quantity} ({self.status})"

    class Meta:
        db_table = 'internal_stock_usage'
        ordering = ['-created_at']
