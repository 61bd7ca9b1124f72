from django.contrib import admin
from .models import (
    Expense, Reconciliation, SuspendedRevenue, Credit, InboxMessage,
    CashDrawerShift, CurrencyCashCount, ClosingChecklist
)


@admin.register(Expense)
class ExpenseAdmin(admin.ModelAdmin):
    list_display = ['description', 'category', 'amount', 'expense_date', 'status', 'department', 'created_by']
    list_filter = ['status', 'category', 'department']
    search_fields = ['description']


@admin.register(Reconciliation)
class ReconciliationAdmin(admin.ModelAdmin):
    list_display = ['date', 'cashier_name', 'system_cash', 'reported_cash', 'discrepancy', 'status', 'department']
    list_filter = ['status', 'department']


@admin.register(SuspendedRevenue)
class SuspendedRevenueAdmin(admin.ModelAdmin):
    list_display = ['date', 'cashier_name', 'amount', 'status', 'department', 'resolved_at']
    list_filter = ['status', 'department']


@admin.register(Credit)
class CreditAdmin(admin.ModelAdmin):
    list_display = ['purpose', 'transaction_type', 'amount', 'status', 'settlement_status', 'from_department', 'to_department']
    list_filter = ['status', 'transaction_type', 'settlement_status']
    search_fields = ['purpose', 'from_person', 'to_person']


@admin.register(InboxMessage)
class InboxMessageAdmin(admin.ModelAdmin):
    list_display = ['subject', 'from_department', 'to_department', 'is_read', 'created_at']
    list_filter = ['is_read']


class CurrencyCashCountInline(admin.TabularInline):
    model = CurrencyCashCount
    extra = 0


@admin.register(CashDrawerShift)
class CashDrawerShiftAdmin(admin.ModelAdmin):
    list_display = ['department', 'status', 'opening_float', 'closing_cash', 'expected_cash', 'discrepancy', 'opened_at', 'closed_at']
    list_filter = ['status', 'department']
    inlines = [CurrencyCashCountInline]


admin.site.register(ClosingChecklist)
