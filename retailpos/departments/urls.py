from django.urls import path
from . import views

urlpatterns = [
    path('departments/', views.department_list_create, name='department-list-create'),
    path('departments/<int:pk>/', views.department_detail, name='department-detail'),
    path('business-settings/', views.business_settings, name='business-settings'),
]
