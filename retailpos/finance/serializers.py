from rest_framework import serializers
from .models import (
    Expense, Reconciliation, SuspendedRevenue, Credit, InboxMessage,
    CashDrawerShift, CurrencyCashCount, ClosingChecklist
)


class ExpenseSerializer(serializers.ModelSerializer):
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.username', read_only=True, default=None)

    class Meta:
        model = Expense
        fields = ['id', 'department', 'description', 'category', 'amount', 'expense_date', 'status',
                  'created_by', 'created_by_name', 'approved_by', 'approved_by_name', 'approved_at',
                  'created_at', 'updated_at']
        read_only_fields = ['department', 'status', 'created_by', 'approved_by', 'approved_at',
                            'created_at', 'updated_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value


class ReconciliationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Reconciliation
        fields = ['id', 'department', 'cashier_name', 'date', 'system_cash', 'reported_cash',
                  'discrepancy', 'status', 'notes', 'created_by', 'created_at']
        read_only_fields = fields


class ReconciliationCreateSerializer(serializers.Serializer):
    cashier_name = serializers.CharField(max_length=255)
    date = serializers.DateField()
    reported_cash = serializers.DecimalField(max_digits=12, decimal_places=2, min_value=0)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class SuspendedRevenueSerializer(serializers.ModelSerializer):
    resolved_by_name = serializers.CharField(source='resolved_by.username', read_only=True, default=None)

    class Meta:
        model = SuspendedRevenue
        fields = ['id', 'department', 'reconciliation', 'cashier_name', 'date', 'amount', 'reason',
                  'status', 'investigation_notes', 'resolved_by', 'resolved_by_name', 'resolved_at',
                  'created_at']
        read_only_fields = ['department', 'reconciliation', 'resolved_by', 'resolved_at', 'created_at']

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value


class CreditSerializer(serializers.ModelSerializer):
    from_department_name = serializers.CharField(source='from_department.name', read_only=True, default=None)
    to_department_name = serializers.CharField(source='to_department.name', read_only=True, default=None)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    balance = serializers.SerializerMethodField()

    class Meta:
        model = Credit
        fields = ['id', 'transaction_type', 'department', 'from_department', 'from_department_name',
                  'to_department', 'to_department_name', 'customer', 'customer_name', 'sale',
                  'from_person', 'to_person', 'amount', 'paid_amount', 'balance', 'purpose', 'notes',
                  'due_date', 'status', 'settlement_status', 'created_by', 'approved_by', 'approved_at',
                  'settled_at', 'created_at', 'updated_at']
        read_only_fields = ['department', 'paid_amount', 'status', 'settlement_status', 'created_by',
                            'approved_by', 'approved_at', 'settled_at', 'created_at', 'updated_at']

    def get_balance(self, obj):
        return obj.amount - obj.paid_amount

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError('Amount must be greater than zero')
        return value

    def validate(self, attrs):
        transaction_type = attrs.get('transaction_type', getattr(self.instance, 'transaction_type', 'interdepartmental'))
        if transaction_type == 'interdepartmental':
            from_department = attrs.get('from_department', getattr(self.instance, 'from_department', None))
            to_department = attrs.get('to_department', getattr(self.instance, 'to_department', None))
            if from_department is None or to_department is None:
                raise serializers.ValidationError('Interdepartmental credits need both departments')
            if from_department == to_department:
                raise serializers.ValidationError('A department cannot lend to itself')
        return attrs


class InboxMessageSerializer(serializers.ModelSerializer):
    from_department_name = serializers.CharField(source='from_department.name', read_only=True, default=None)

    class Meta:
        model = InboxMessage
        fields = ['id', 'from_department', 'from_department_name', 'to_department', 'credit',
                  'subject', 'message', 'is_read', 'sent_by', 'created_at']
        read_only_fields = fields


class CurrencyCashCountSerializer(serializers.ModelSerializer):
    class Meta:
        model = CurrencyCashCount
        fields = ['currency', 'amount', 'exchange_rate', 'amount_in_base', 'count_type']


class ClosingChecklistSerializer(serializers.ModelSerializer):
    class Meta:
        model = ClosingChecklist
        fields = ['cash_counted', 'cash_verified', 'discrepancy_explained', 'notes', 'completed_by', 'completed_at']


class CashDrawerShiftSerializer(serializers.ModelSerializer):
    opened_by_name = serializers.CharField(source='opened_by.username', read_only=True, default=None)
    closed_by_name = serializers.CharField(source='closed_by.username', read_only=True, default=None)
    currency_counts = CurrencyCashCountSerializer(many=True, read_only=True)
    checklist = ClosingChecklistSerializer(read_only=True, default=None)

    class Meta:
        model = CashDrawerShift
        fields = ['id', 'department', 'opened_by', 'opened_by_name', 'closed_by', 'closed_by_name',
                  'opening_float', 'closing_cash', 'expected_cash', 'discrepancy', 'status', 'notes',
                  'opened_at', 'closed_at', 'currency_counts', 'checklist']
        read_only_fields = fields


class ShiftCloseSerializer(serializers.Serializer):
    closing_cash = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True)
    currency_counts = serializers.DictField(
        child=serializers.DecimalField(max_digits=14, decimal_places=2), required=False
    )
    cash_counted = serializers.BooleanField(default=False)
    cash_verified = serializers.BooleanField(default=False)
    discrepancy_explained = serializers.BooleanField(default=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
