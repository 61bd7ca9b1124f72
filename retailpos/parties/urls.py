from django.urls import path
from . import views

urlpatterns = [
    path('customers/', views.customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', views.customer_detail, name='customer-detail'),
    path('customers/<int:pk>/transactions/', views.customer_transactions, name='customer-transactions'),
    path('suppliers/', views.supplier_list_create, name='supplier-list-create'),
    path('suppliers/<int:pk>/', views.supplier_detail, name='supplier-detail'),
]
