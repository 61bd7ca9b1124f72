from django.urls import path
from . import views

urlpatterns = [
    path('sales/', views.sale_list_create, name='sale-list-create'),
    path('sales/<int:pk>/', views.sale_detail, name='sale-detail'),
    path('sales/<int:pk>/void/', views.sale_void, name='sale-void'),
    path('sales/<int:pk>/receipt/', views.sale_receipt, name='sale-receipt'),
    path('customers/<int:customer_id>/purchase-history/', views.customer_purchase_history,
         name='customer-purchase-history'),
]
