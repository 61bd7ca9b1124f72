from decimal import Decimal

from django.db import models


def default_retail_bottle_pricing():
    from .pricing import DEFAULT_RETAIL_BOTTLE_PRICES
    return {'sizes': [{'ml': ml, 'price': price} for ml, price in DEFAULT_RETAIL_BOTTLE_PRICES.items()]}


def default_bottle_cost_config():
    from .pricing import DEFAULT_BOTTLE_COST_RANGES
    return {'ranges': [dict(r) for r in DEFAULT_BOTTLE_COST_RANGES]}


class Scent(models.Model):
    """
    A perfume oil held in bulk and dispensed into refill bottles.

    Stock is measured by weighing the container: ``stock_ml`` is derived
    from the net weight and the oil density. A scent without a department
    is shared by every perfume department.
    """
    name = models.CharField(max_length=200, db_index=True)
    description = models.TextField(blank=True, null=True)
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, null=True, blank=True, related_name='scents'
    )
    stock_ml = models.DecimalField(max_digits=10, decimal_places=1, default=Decimal('0.0'))
    empty_bottle_weight_g = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    current_weight_g = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    density = models.DecimalField(max_digits=5, decimal_places=3, default=Decimal('0.900'))
    last_weighed_at = models.DateTimeField(null=True, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'perfume_scents'
        ordering = ['name']


class PerfumePricingConfig(models.Model):
    """Per-department refill pricing"""
    department = models.OneToOneField(
        'departments.Department', on_delete=models.CASCADE, related_name='perfume_pricing'
    )
    retail_price_per_ml = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('800.00'))
    wholesale_price_per_ml = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal('400.00'))
    retail_bottle_pricing = models.JSONField(default=default_retail_bottle_pricing, blank=True)
    wholesale_bottle_pricing = models.JSONField(default=dict, blank=True)
    bottle_cost_config = models.JSONField(default=default_bottle_cost_config, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Perfume pricing - {self.department}"

    class Meta:
        db_table = 'perfume_pricing_config'


class CustomerPreference(models.Model):
    """Scent memory: what a customer usually buys"""
    customer = models.ForeignKey('parties.Customer', on_delete=models.CASCADE, related_name='scent_preferences')
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, null=True, blank=True, related_name='customer_preferences'
    )
    preferred_scents = models.JSONField(default=list, blank=True)
    preferred_bottle_sizes = models.JSONField(default=list, blank=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Preferences - {self.customer}"

    class Meta:
        db_table = 'customer_preferences'
        constraints = [
            models.UniqueConstraint(fields=['customer', 'department'], name='unique_customer_preference_per_department'),
        ]
