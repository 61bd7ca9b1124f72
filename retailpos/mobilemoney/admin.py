from django.contrib import admin
from .models import ServiceRegistration, DataPackage, SimCardSettings


@admin.register(ServiceRegistration)
class ServiceRegistrationAdmin(admin.ModelAdmin):
    list_display = ['customer_name', 'customer_phone', 'service_type', 'customer_id_type', 'department', 'created_at']
    list_filter = ['service_type', 'customer_id_type', 'department']
    search_fields = ['customer_name', 'customer_phone', 'customer_id_number']


@admin.register(DataPackage)
class DataPackageAdmin(admin.ModelAdmin):
    list_display = ['name', 'data_amount', 'data_unit', 'price', 'validity_period', 'department', 'is_active']
    list_filter = ['department', 'is_active']


admin.site.register(SimCardSettings)
