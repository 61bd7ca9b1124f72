from rest_framework import serializers
from .models import Category, Product, ProductVariant, Service


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ['id', 'name', 'type', 'department', 'description', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['department', 'created_at', 'updated_at']


class ProductVariantSerializer(serializers.ModelSerializer):
    class Meta:
        model = ProductVariant
        fields = ['id', 'product', 'name', 'variant_name', 'sku', 'barcode', 'color', 'size',
                  'ml_size', 'price', 'stock', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['product', 'created_at', 'updated_at']

    def validate_stock(self, value):
        if value < 0:
            raise serializers.ValidationError('Stock cannot be negative')
        return value


class ProductSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)
    supplier_name = serializers.CharField(source='supplier.name', read_only=True, default=None)
    department_name = serializers.CharField(source='department.name', read_only=True)
    variants = ProductVariantSerializer(many=True, read_only=True)
    is_low_stock = serializers.SerializerMethodField()

    class Meta:
        model = Product
        fields = [
            'id', 'name', 'sku', 'barcode', 'internal_barcode', 'brand', 'description', 'image_url',
            'department', 'department_name', 'category', 'category_name', 'supplier', 'supplier_name',
            'tracking_type', 'unit', 'cost_price', 'price', 'selling_price', 'wholesale_price',
            'min_price', 'max_price', 'allow_custom_price', 'pricing_tiers',
            'stock', 'min_stock', 'total_ml', 'bottle_size_ml', 'retail_price_per_ml',
            'wholesale_price_per_ml', 'imei', 'serial_number', 'is_bundle', 'is_active',
            'is_archived', 'is_low_stock', 'variants', 'created_at', 'updated_at'
        ]
        read_only_fields = ['department', 'internal_barcode', 'created_at', 'updated_at']

    def get_is_low_stock(self, obj):
        if obj.is_ml_tracked:
            return False
        return obj.stock <= obj.low_stock_threshold

    def validate(self, attrs):
        min_price = attrs.get('min_price', getattr(self.instance, 'min_price', None))
        max_price = attrs.get('max_price', getattr(self.instance, 'max_price', None))
        if min_price is not None and max_price is not None and min_price > max_price:
            raise serializers.ValidationError({'min_price': 'Minimum price cannot exceed maximum price'})
        for field in ('stock', 'total_ml'):
            if field in attrs and attrs[field] < 0:
                raise serializers.ValidationError({field: 'Cannot be negative'})
        return attrs


class ServiceSerializer(serializers.ModelSerializer):
    category_name = serializers.CharField(source='category.name', read_only=True, default=None)

    class Meta:
        model = Service
        fields = ['id', 'name', 'description', 'department', 'category', 'category_name', 'price',
                  'base_price', 'material_cost', 'duration_minutes', 'is_negotiable', 'is_active',
                  'created_at', 'updated_at']
        read_only_fields = ['department', 'created_at', 'updated_at']
