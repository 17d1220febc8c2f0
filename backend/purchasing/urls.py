from django.urls import path
from . import views

urlpatterns = [
    path('purchase-orders/', views.purchase_order_list_create, name='purchase-order-list-create'),
    path('purchase-orders/<int:pk>/', views.purchase_order_detail, name='purchase-order-detail'),
    path('purchase-orders/<int:pk>/status/', views.purchase_order_status, name='purchase-order-status'),
    path('purchase-orders/<int:pk>/approve/<str:token>/', views.purchase_order_approve, name='purchase-order-approve'),
]
