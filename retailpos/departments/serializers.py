from rest_framework import serializers
from .models import Department, BusinessSettings


class DepartmentSerializer(serializers.ModelSerializer):
    kind = serializers.CharField(read_only=True)

    class Meta:
        model = Department
        fields = ['id', 'name', 'description', 'is_active', 'is_perfume_department',
                  'is_mobile_money', 'kind', 'settings', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate(self, attrs):
        is_perfume = attrs.get('is_perfume_department', getattr(self.instance, 'is_perfume_department', False))
        is_mobile = attrs.get('is_mobile_money', getattr(self.instance, 'is_mobile_money', False))
        if is_perfume and is_mobile:
            raise serializers.ValidationError('A department cannot be both a perfume and a mobile money department')
        return attrs


class BusinessSettingsSerializer(serializers.ModelSerializer):
    scope = serializers.SerializerMethodField()

    class Meta:
        model = BusinessSettings
        fields = ['id', 'department', 'scope', 'business_name', 'business_address', 'business_phone',
                  'business_email', 'website', 'whatsapp_number', 'logo_url', 'receipt_logo_url',
                  'receipt_footer', 'seasonal_remark', 'show_back_page', 'currency', 'tax_rate',
                  'admin_email', 'admin_report_email', 'report_email_enabled',
                  'report_email_frequency', 'report_email_time', 'settings_json', 'updated_at']
        read_only_fields = ['department', 'updated_at']

    def get_scope(self, obj):
        if obj.pk is None:
            return 'default'
        return 'department' if obj.department_id else 'global'
