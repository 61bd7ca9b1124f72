from django.contrib import admin
from .models import Department, BusinessSettings


@admin.register(Department)
class DepartmentAdmin(admin.ModelAdmin):
    list_display = ['name', 'is_active', 'is_perfume_department', 'is_mobile_money', 'created_at']
    list_filter = ['is_active', 'is_perfume_department', 'is_mobile_money']
    search_fields = ['name', 'description']


@admin.register(BusinessSettings)
class BusinessSettingsAdmin(admin.ModelAdmin):
    list_display = ['business_name', 'department', 'currency', 'report_email_enabled', 'updated_at']
    list_filter = ['report_email_enabled', 'report_email_frequency']
