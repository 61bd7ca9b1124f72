from rest_framework import serializers
from .models import Scent, PerfumePricingConfig, CustomerPreference
from .pricing import stock_status, BOTTLE_SIZES


class ScentSerializer(serializers.ModelSerializer):
    is_global = serializers.SerializerMethodField()
    stock_status = serializers.SerializerMethodField()
    gauge_percent = serializers.SerializerMethodField()

    class Meta:
        model = Scent
        fields = ['id', 'name', 'description', 'department', 'is_global', 'stock_ml',
                  'empty_bottle_weight_g', 'current_weight_g', 'density', 'last_weighed_at',
                  'stock_status', 'gauge_percent', 'is_active', 'created_at', 'updated_at']
        read_only_fields = ['department', 'stock_ml', 'empty_bottle_weight_g', 'current_weight_g',
                            'last_weighed_at', 'created_at', 'updated_at']

    def get_is_global(self, obj):
        return obj.department_id is None

    def get_stock_status(self, obj):
        return stock_status(obj.stock_ml)[0]

    def get_gauge_percent(self, obj):
        return stock_status(obj.stock_ml)[1]

    def validate_density(self, value):
        if value <= 0:
            raise serializers.ValidationError('Density must be greater than zero')
        return value


class ScentWeighSerializer(serializers.Serializer):
    empty_bottle_weight_g = serializers.DecimalField(max_digits=10, decimal_places=2)
    current_weight_g = serializers.DecimalField(max_digits=10, decimal_places=2)
    density = serializers.DecimalField(max_digits=5, decimal_places=3, required=False)


class RefillScentSerializer(serializers.Serializer):
    scent_id = serializers.IntegerField(required=False, allow_null=True)
    scent = serializers.CharField(required=False, allow_blank=True)

    def validate(self, attrs):
        if not attrs.get('scent_id') and not attrs.get('scent'):
            raise serializers.ValidationError('Each scent needs a scent_id or a name')
        return attrs


class RefillQuoteRequestSerializer(serializers.Serializer):
    scents = RefillScentSerializer(many=True)
    bottle_size_ml = serializers.IntegerField(min_value=1)
    customer_type = serializers.ChoiceField(choices=['retail', 'wholesale'], default='retail')


class PerfumePricingConfigSerializer(serializers.ModelSerializer):
    bottle_sizes = serializers.SerializerMethodField()

    class Meta:
        model = PerfumePricingConfig
        fields = ['id', 'department', 'retail_price_per_ml', 'wholesale_price_per_ml',
                  'retail_bottle_pricing', 'wholesale_bottle_pricing', 'bottle_cost_config',
                  'bottle_sizes', 'updated_at']
        read_only_fields = ['department', 'updated_at']

    def get_bottle_sizes(self, obj):
        return BOTTLE_SIZES

    def validate_bottle_cost_config(self, value):
        ranges = (value or {}).get('ranges', [])
        for r in ranges:
            if not {'min', 'max', 'cost'} <= set(r):
                raise serializers.ValidationError('Each range needs min, max and cost')
            if r['min'] > r['max']:
                raise serializers.ValidationError('Range min cannot exceed max')
        return value

    def validate_retail_bottle_pricing(self, value):
        for size in (value or {}).get('sizes', []):
            if not {'ml', 'price'} <= set(size):
                raise serializers.ValidationError('Each size needs ml and price')
        return value


class CustomerPreferenceSerializer(serializers.ModelSerializer):
    customer_name = serializers.CharField(source='customer.name', read_only=True)

    class Meta:
        model = CustomerPreference
        fields = ['id', 'customer', 'customer_name', 'department', 'preferred_scents',
                  'preferred_bottle_sizes', 'notes', 'updated_at']
        read_only_fields = ['customer', 'department', 'updated_at']
