from rest_framework import serializers
from .checkout import INVOICE_PREFIX, next_document_number
from .models import Sale, SaleItem


class SaleItemSerializer(serializers.ModelSerializer):
    product_sku = serializers.CharField(source='product.sku', read_only=True, default=None)

    class Meta:
        model = SaleItem
        fields = ['id', 'item_type', 'product', 'product_sku', 'variant', 'service', 'name', 'quantity',
                  'unit_price', 'total', 'customer_type', 'scent_mixture', 'ml_amount',
                  'price_per_ml', 'bottle_cost', 'selected_scents']


class SaleSerializer(serializers.ModelSerializer):
    items = SaleItemSerializer(many=True, read_only=True)
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    customer_phone = serializers.CharField(source='customer.phone', read_only=True, default=None)
    department_name = serializers.CharField(source='department.name', read_only=True)
    voided_by_name = serializers.CharField(source='voided_by.username', read_only=True, default=None)

    class Meta:
        model = Sale
        fields = [
            'id', 'sale_number', 'receipt_number', 'department', 'department_name',
            'customer', 'customer_name', 'customer_phone', 'cashier', 'cashier_name',
            'payment_method', 'subtotal', 'discount', 'tax', 'total', 'amount_paid', 'change_amount',
            'status', 'is_invoice', 'invoice_number', 'is_loan', 'notes', 'remarks',
            'void_reason', 'voided_at', 'voided_by', 'voided_by_name', 'items',
            'created_at', 'updated_at'
        ]
        read_only_fields = fields


class SaleListSerializer(serializers.ModelSerializer):
    """Lighter row for the sales history table"""
    customer_name = serializers.CharField(source='customer.name', read_only=True, default=None)
    item_count = serializers.IntegerField(source='items.count', read_only=True)

    class Meta:
        model = Sale
        fields = ['id', 'sale_number', 'receipt_number', 'department', 'customer', 'customer_name',
                  'cashier_name', 'payment_method', 'total', 'status', 'is_invoice', 'item_count',
                  'created_at']


class SaleMetadataSerializer(serializers.ModelSerializer):
    """Fields a cashier may correct on a receipt after the sale"""
    class Meta:
        model = Sale
        fields = ['notes', 'remarks', 'cashier_name', 'customer', 'is_invoice', 'invoice_number']
        read_only_fields = ['invoice_number']

    def update(self, instance, validated_data):
        # Invoice numbers only ever come from the sequence
        if validated_data.get('is_invoice') and not instance.invoice_number:
            validated_data['invoice_number'] = next_document_number('invoice', INVOICE_PREFIX)
        return super().update(instance, validated_data)


class CheckoutItemSerializer(serializers.Serializer):
    type = serializers.ChoiceField(
        choices=['product', 'service', 'perfume_refill', 'custom'], required=False, default='product'
    )
    product_id = serializers.IntegerField(required=False, allow_null=True)
    variant_id = serializers.IntegerField(required=False, allow_null=True)
    service_id = serializers.IntegerField(required=False, allow_null=True)
    name = serializers.CharField(required=False, allow_blank=True, max_length=255)
    quantity = serializers.IntegerField(min_value=1, default=1)
    unit_price = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True,
                                          min_value=0)
    customer_type = serializers.ChoiceField(choices=['retail', 'wholesale'], required=False, allow_null=True)
    ml_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, allow_null=True,
                                         min_value=0)
    selected_scents = serializers.ListField(child=serializers.DictField(), required=False)


class CheckoutSerializer(serializers.Serializer):
    items = CheckoutItemSerializer(many=True, allow_empty=False)
    payment_method = serializers.ChoiceField(choices=[c[0] for c in Sale.PAYMENT_METHOD_CHOICES], default='cash')
    customer = serializers.IntegerField(required=False, allow_null=True)
    discount = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0, default=0)
    tax = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, min_value=0, default=0)
    amount_paid = serializers.DecimalField(max_digits=12, decimal_places=2, required=False, allow_null=True,
                                           min_value=0)
    is_invoice = serializers.BooleanField(required=False, default=False)
    is_loan = serializers.BooleanField(required=False, default=False)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class VoidSerializer(serializers.Serializer):
    reason = serializers.CharField()
