from django.contrib import admin
from .models import DocumentSequence, Sale, SaleItem


class SaleItemInline(admin.TabularInline):
    model = SaleItem
    extra = 0
    readonly_fields = ['item_type', 'product', 'variant', 'service', 'name', 'quantity', 'unit_price', 'total',
                       'customer_type', 'scent_mixture', 'ml_amount', 'price_per_ml', 'bottle_cost']


@admin.register(Sale)
class SaleAdmin(admin.ModelAdmin):
    list_display = ['receipt_number', 'department', 'customer', 'cashier_name', 'payment_method', 'total',
                    'status', 'created_at']
    list_filter = ['status', 'payment_method', 'department', 'is_invoice']
    search_fields = ['receipt_number', 'sale_number', 'invoice_number', 'customer__name']
    readonly_fields = ['sale_number', 'receipt_number', 'created_at', 'updated_at', 'voided_at']
    inlines = [SaleItemInline]


@admin.register(DocumentSequence)
class DocumentSequenceAdmin(admin.ModelAdmin):
    list_display = ['name', 'last_value']
