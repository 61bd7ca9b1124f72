import uuid

from django.db import models
from decimal import Decimal


class Category(models.Model):
    """Product and service categories, per department"""
    TYPE_CHOICES = [
        ('product', 'Product'),
        ('service', 'Service'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    type = models.CharField(max_length=20, choices=TYPE_CHOICES, default='product')
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, null=True, blank=True, related_name='categories'
    )
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'categories'
        verbose_name_plural = 'categories'
        ordering = ['name']


class Product(models.Model):
    """
    Sellable stock item.

    Quantity-tracked products count units in ``stock``; ml-tracked products
    (bulk perfume oils and the like) track a volume in ``total_ml``.
    """
    TRACKING_TYPE_CHOICES = [
        ('quantity', 'Quantity'),
        ('ml', 'Millilitres'),
    ]

    name = models.CharField(max_length=200, db_index=True)
    sku = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    barcode = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    internal_barcode = models.CharField(max_length=100, unique=True, blank=True, null=True)
    brand = models.CharField(max_length=200, blank=True, null=True)
    description = models.TextField(blank=True)
    image_url = models.URLField(max_length=500, blank=True, null=True)
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, related_name='products'
    )
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='products')
    supplier = models.ForeignKey(
        'parties.Supplier', on_delete=models.SET_NULL, null=True, blank=True, related_name='products'
    )
    tracking_type = models.CharField(max_length=20, choices=TRACKING_TYPE_CHOICES, default='quantity')
    unit = models.CharField(max_length=50, default='piece')

    cost_price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    selling_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    wholesale_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    min_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    max_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    allow_custom_price = models.BooleanField(default=False)
    pricing_tiers = models.JSONField(default=list, blank=True)

    stock = models.IntegerField(default=0)
    min_stock = models.IntegerField(default=5)
    total_ml = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    bottle_size_ml = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    retail_price_per_ml = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    wholesale_price_per_ml = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)

    imei = models.CharField(max_length=50, blank=True, null=True)
    serial_number = models.CharField(max_length=100, blank=True, null=True)
    is_bundle = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True, db_index=True)
    is_archived = models.BooleanField(default=False, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} ({self.sku or 'NO-SKU'})"

    class Meta:
        db_table = 'products'
        ordering = ['name']

    def save(self, *args, **kwargs):
        if not self.internal_barcode:
            self.internal_barcode = f"INT{uuid.uuid4().hex[:10].upper()}"
        super().save(*args, **kwargs)

    @property
    def is_ml_tracked(self):
        return self.tracking_type == 'ml'

    @property
    def effective_price(self):
        return self.selling_price if self.selling_price else self.price

    @property
    def low_stock_threshold(self):
        return self.min_stock or 5

    @property
    def unit_cost(self):
        """Cost used for stock valuation: cost price, else 60% of the selling price"""
        if self.cost_price:
            return self.cost_price
        return (self.price or Decimal('0.00')) * Decimal('0.6')


class ProductVariant(models.Model):
    """Product variants (size, colour, bottle size)"""
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='variants')
    name = models.CharField(max_length=200)
    variant_name = models.CharField(max_length=200, blank=True, null=True)
    sku = models.CharField(max_length=100, blank=True, null=True)
    barcode = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    color = models.CharField(max_length=50, blank=True, null=True)
    size = models.CharField(max_length=50, blank=True, null=True)
    ml_size = models.DecimalField(max_digits=8, decimal_places=2, null=True, blank=True)
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    stock = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.product.name} - {self.variant_name or self.name}"

    class Meta:
        db_table = 'product_variants'
        ordering = ['product_id', 'name']


class Service(models.Model):
    """Non-stock services sold at the till (repairs, installations, fees)"""
    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    department = models.ForeignKey(
        'departments.Department', on_delete=models.CASCADE, related_name='services'
    )
    category = models.ForeignKey(Category, on_delete=models.SET_NULL, null=True, blank=True, related_name='services')
    price = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    base_price = models.DecimalField(max_digits=12, decimal_places=2, null=True, blank=True)
    material_cost = models.DecimalField(max_digits=12, decimal_places=2, default=Decimal('0.00'))
    duration_minutes = models.PositiveIntegerField(null=True, blank=True)
    is_negotiable = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'services'
        ordering = ['name']
