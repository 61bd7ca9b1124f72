from django.contrib import admin
from .models import Category, Product, ProductVariant, Service


@admin.register(Category)
class CategoryAdmin(admin.ModelAdmin):
    list_display = ['name', 'type', 'department', 'is_active']
    list_filter = ['type', 'department', 'is_active']
    search_fields = ['name']


class ProductVariantInline(admin.TabularInline):
    model = ProductVariant
    extra = 0


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ['name', 'sku', 'department', 'tracking_type', 'price', 'stock', 'total_ml', 'is_active', 'is_archived']
    list_filter = ['department', 'tracking_type', 'is_active', 'is_archived', 'category']
    search_fields = ['name', 'sku', 'barcode', 'internal_barcode', 'brand']
    readonly_fields = ['internal_barcode', 'created_at', 'updated_at']
    inlines = [ProductVariantInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = ['name', 'department', 'price', 'is_negotiable', 'is_active']
    list_filter = ['department', 'is_active']
    search_fields = ['name']
