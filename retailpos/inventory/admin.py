from django.contrib import admin
from .models import StockAdjustment, InternalStockUsage


@admin.register(StockAdjustment)
class StockAdjustmentAdmin(admin.ModelAdmin):
    list_display = ['product', 'adjustment_type', 'quantity', 'reason', 'stock_after', 'created_by', 'created_at']
    list_filter = ['adjustment_type', 'reason', 'department']
    search_fields = ['product__name', 'notes']


@admin.register(InternalStockUsage)
class InternalStockUsageAdmin(admin.ModelAdmin):
    list_display = ['product', 'quantity', 'ml_quantity', 'status', 'requested_by', 'approved_by', 'created_at']
    list_filter = ['status', 'department']
    search_fields = ['product__name', 'reason']
