from django.urls import path
from . import views

urlpatterns = [
    path('inventory/stock-check/', views.stock_check, name='stock-check'),
    path('inventory/low-stock/', views.low_stock, name='low-stock'),
    path('inventory/adjustments/', views.stock_adjustment_list_create, name='stock-adjustment-list-create'),
    path('inventory/internal-usage/', views.internal_usage_list_create, name='internal-usage-list-create'),
    path('inventory/internal-usage/<int:pk>/approve/', views.internal_usage_approve, name='internal-usage-approve'),
    path('inventory/internal-usage/<int:pk>/reject/', views.internal_usage_reject, name='internal-usage-reject'),
]
