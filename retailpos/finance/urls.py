from django.urls import path
from . import views

urlpatterns = [
    # Expenses
    path('expenses/', views.expense_list_create, name='expense-list-create'),
    path('expenses/<int:pk>/', views.expense_detail, name='expense-detail'),
    path('expenses/<int:pk>/approve/', views.expense_approve, name='expense-approve'),
    path('expenses/<int:pk>/reject/', views.expense_reject, name='expense-reject'),

    # Reconciliation
    path('reconciliations/', views.reconciliation_list_create, name='reconciliation-list-create'),
    path('suspended-revenue/', views.suspended_revenue_list_create, name='suspended-revenue-list-create'),
    path('suspended-revenue/<int:pk>/', views.suspended_revenue_detail, name='suspended-revenue-detail'),

    # Credits and inbox
    path('credits/', views.credit_list_create, name='credit-list-create'),
    path('credits/<int:pk>/', views.credit_detail, name='credit-detail'),
    path('credits/<int:pk>/approve/', views.credit_approve, name='credit-approve'),
    path('credits/<int:pk>/reject/', views.credit_reject, name='credit-reject'),
    path('credits/<int:pk>/settle/', views.credit_settle, name='credit-settle'),
    path('credits/<int:pk>/notify/', views.credit_notify, name='credit-notify'),
    path('inbox/', views.inbox_list, name='inbox-list'),
    path('inbox/<int:pk>/read/', views.inbox_mark_read, name='inbox-mark-read'),

    # Cash drawer
    path('cash-drawer/open/', views.cash_drawer_open, name='cash-drawer-open'),
    path('cash-drawer/current/', views.cash_drawer_current, name='cash-drawer-current'),
    path('cash-drawer/close/', views.cash_drawer_close, name='cash-drawer-close'),
    path('cash-drawer/history/', views.cash_drawer_history, name='cash-drawer-history'),
]
