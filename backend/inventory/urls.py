from django.urls import path
from . import views

urlpatterns = [
    path('stock-movements/', views.stock_movement_list_create, name='stock-movement-list-create'),
    path('stock-movements/<int:pk>/', views.stock_movement_detail, name='stock-movement-detail'),
    path('products/<int:product_id>/stock-movements/', views.product_stock_movements, name='product-stock-movements'),
]
