from django.urls import path
from . import views

urlpatterns = [
    path('categories/', views.category_list_create, name='category-list-create'),
    path('categories/<int:pk>/', views.category_detail, name='category-detail'),

    path('products/', views.product_list_create, name='product-list-create'),
    path('products/<int:pk>/', views.product_detail, name='product-detail'),
    path('products/<int:pk>/archive/', views.product_archive, name='product-archive'),
    path('products/<int:pk>/unarchive/', views.product_unarchive, name='product-unarchive'),
    path('products/<int:pk>/label/', views.product_label, name='product-label'),
    path('products/<int:pk>/variants/', views.product_variant_list_create, name='product-variant-list-create'),
    path('variants/<int:pk>/', views.variant_detail, name='variant-detail'),

    path('services/', views.service_list_create, name='service-list-create'),
    path('services/<int:pk>/', views.service_detail, name='service-detail'),
]
