from django.contrib import admin
from .models import Scent, PerfumePricingConfig, CustomerPreference


@admin.register(Scent)
class ScentAdmin(admin.ModelAdmin):
    list_display = ['name', 'department', 'stock_ml', 'density', 'last_weighed_at', 'is_active']
    list_filter = ['department', 'is_active']
    search_fields = ['name']
    readonly_fields = ['stock_ml', 'last_weighed_at']


@admin.register(PerfumePricingConfig)
class PerfumePricingConfigAdmin(admin.ModelAdmin):
    list_display = ['department', 'retail_price_per_ml', 'wholesale_price_per_ml', 'updated_at']


@admin.register(CustomerPreference)
class CustomerPreferenceAdmin(admin.ModelAdmin):
    list_display = ['customer', 'department', 'updated_at']
    search_fields = ['customer__name']
