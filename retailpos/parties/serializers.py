from rest_framework import serializers
from .models import Customer, Supplier, CustomerCreditTransaction


class CustomerSerializer(serializers.ModelSerializer):
    department_name = serializers.CharField(source='department.name', read_only=True, default=None)
    available_credit = serializers.DecimalField(max_digits=12, decimal_places=2, read_only=True)

    class Meta:
        model = Customer
        fields = [
            'id', 'name', 'phone', 'email', 'address', 'department', 'department_name',
            'credit_limit', 'balance', 'outstanding_balance', 'available_credit', 'notes',
            'payment_reminder_count', 'last_payment_reminder_sent', 'is_active',
            'created_at', 'updated_at'
        ]
        read_only_fields = ['department', 'outstanding_balance', 'payment_reminder_count',
                            'last_payment_reminder_sent', 'created_at', 'updated_at']


class SupplierSerializer(serializers.ModelSerializer):
    class Meta:
        model = Supplier
        fields = ['id', 'name', 'contact_person', 'phone', 'email', 'address', 'notes',
                  'is_active', 'created_at', 'updated_at']


class CustomerCreditTransactionSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)
    receipt_number = serializers.CharField(source='sale.receipt_number', read_only=True, default=None)
    created_by_username = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = CustomerCreditTransaction
        fields = [
            'id', 'customer', 'customer_name', 'department', 'sale', 'receipt_number',
            'transaction_type', 'amount', 'balance_after', 'notes',
            'created_by', 'created_by_username', 'created_at'
        ]
        read_only_fields = ['balance_after', 'created_by', 'created_at']
