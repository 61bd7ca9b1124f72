from django.contrib import admin
from .models import Customer, Supplier, CustomerCreditTransaction


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'phone', 'department', 'credit_limit', 'outstanding_balance', 'is_active']
    list_filter = ['department', 'is_active']
    search_fields = ['name', 'phone', 'email']


@admin.register(Supplier)
class SupplierAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'phone', 'email', 'is_active']
    search_fields = ['name', 'contact_person', 'phone']


@admin.register(CustomerCreditTransaction)
class CustomerCreditTransactionAdmin(admin.ModelAdmin):
    list_display = ['customer', 'transaction_type', 'amount', 'balance_after', 'created_at']
    list_filter = ['transaction_type', 'department']
    search_fields = ['customer__name', 'notes']
    readonly_fields = ['balance_after', 'created_at']
