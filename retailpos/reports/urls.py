from django.urls import path
from . import views

urlpatterns = [
    path('reports/dashboard/', views.dashboard_kpis, name='dashboard-kpis'),
    path('reports/sales-summary/', views.sales_summary, name='sales-summary'),
    path('reports/payment-transactions/', views.payment_transactions, name='payment-transactions'),
    path('reports/perfume-revenue/', views.perfume_revenue, name='perfume-revenue'),
    path('reports/admin-report/', views.admin_report, name='admin-report'),
    path('reports/admin-report/preview/', views.admin_report_preview, name='admin-report-preview'),
    path('reports/admin-report/send/', views.admin_report_send, name='admin-report-send'),
]
