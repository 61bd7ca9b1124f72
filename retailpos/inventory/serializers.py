from rest_framework import serializers
from .models import StockAdjustment, InternalStockUsage


class StockAdjustmentSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    variant_name = serializers.CharField(source='variant.name', read_only=True, default=None)
    created_by_name = serializers.CharField(source='created_by.username', read_only=True, default=None)

    class Meta:
        model = StockAdjustment
        fields = ['id', 'adjustment_type', 'product', 'product_name', 'variant', 'variant_name',
                  'department', 'quantity', 'reason', 'notes', 'stock_after',
                  'created_by', 'created_by_name', 'created_at']
        read_only_fields = ['department', 'stock_after', 'created_by', 'created_at']

    def validate_quantity(self, value):
        if value <= 0:
            raise serializers.ValidationError('Quantity must be greater than zero')
        return value

    def validate(self, attrs):
        variant = attrs.get('variant')
        if variant is not None and variant.product_id != attrs['product'].id:
            raise serializers.ValidationError({'variant': 'Variant does not belong to this product'})
        return attrs


class InternalStockUsageSerializer(serializers.ModelSerializer):
    product_name = serializers.CharField(source='product.name', read_only=True)
    requested_by_name = serializers.CharField(source='requested_by.username', read_only=True, default=None)
    approved_by_name = serializers.CharField(source='approved_by.username', read_only=True, default=None)

    class Meta:
        model = InternalStockUsage
        fields = ['id', 'product', 'product_name', 'variant', 'department', 'quantity', 'ml_quantity',
                  'reason', 'notes', 'status', 'requested_by', 'requested_by_name',
                  'approved_by', 'approved_by_name', 'approved_at', 'created_at', 'updated_at']
        read_only_fields = ['department', 'status', 'requested_by', 'approved_by', 'approved_at',
                            'created_at', 'updated_at']

    def validate(self, attrs):
        product = attrs.get('product') or getattr(self.instance, 'product', None)
        if product is not None and product.is_ml_tracked:
            if not attrs.get('ml_quantity') or attrs['ml_quantity'] <= 0:
                raise serializers.ValidationError({'ml_quantity': 'Enter the ml used'})
        elif not attrs.get('quantity'):
            raise serializers.ValidationError({'quantity': 'Quantity must be greater than zero'})
        variant = attrs.get('variant')
        if variant is not None and product is not None and variant.product_id != product.id:
            raise serializers.ValidationError({'variant': 'Variant does not belong to this product'})
        return attrs
