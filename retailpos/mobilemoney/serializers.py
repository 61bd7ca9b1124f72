from rest_framework import serializers
from .models import ServiceRegistration, DataPackage, SimCardSettings


class ServiceRegistrationSerializer(serializers.ModelSerializer):
    registered_by_name = serializers.CharField(source='registered_by.username', read_only=True, default=None)
    service_type_label = serializers.CharField(read_only=True)

    class Meta:
        model = ServiceRegistration
        fields = ['id', 'service_type', 'service_type_label', 'customer_name', 'customer_phone',
                  'customer_id_type', 'customer_id_number', 'customer_address', 'notes',
                  'department', 'registered_by', 'registered_by_name', 'created_at', 'updated_at']
        read_only_fields = ['department', 'registered_by', 'created_at', 'updated_at']

    def validate_customer_phone(self, value):
        digits = ''.join(ch for ch in value if ch.isdigit())
        if len(digits) < 9:
            raise serializers.ValidationError('Enter a valid phone number')
        return value.strip()


class DataPackageSerializer(serializers.ModelSerializer):
    class Meta:
        model = DataPackage
        fields = ['id', 'name', 'data_amount', 'data_unit', 'price', 'validity_period', 'department',
                  'is_active', 'created_at', 'updated_at']
        read_only_fields = ['department', 'created_at', 'updated_at']

    def validate(self, attrs):
        for field in ('data_amount', 'price'):
            if field in attrs and attrs[field] < 0:
                raise serializers.ValidationError({field: 'Cannot be negative'})
        return attrs


class SimCardSettingsSerializer(serializers.ModelSerializer):
    class Meta:
        model = SimCardSettings
        fields = ['id', 'department', 'logo_url', 'help_codes', 'internet_settings', 'sim_warnings', 'updated_at']
        read_only_fields = ['department', 'updated_at']

    def validate_help_codes(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('help_codes must be an object')
        return value

    def validate_internet_settings(self, value):
        if not isinstance(value, dict):
            raise serializers.ValidationError('internet_settings must be an object')
        return value

    def validate_sim_warnings(self, value):
        if not isinstance(value, list) or not all(isinstance(w, str) for w in value):
            raise serializers.ValidationError('sim_warnings must be a list of strings')
        return value
