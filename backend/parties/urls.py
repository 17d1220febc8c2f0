from django.urls import path
from .views import (
    supplier_list_create, supplier_detail,
    supplier_performance, suppliers_performance,
)

urlpatterns = [
    # Supplier endpoints
    path('suppliers/', supplier_list_create, name='supplier-list-create'),
    path('suppliers/performance/', suppliers_performance, name='suppliers-performance'),
    path('suppliers/<int:pk>/', supplier_detail, name='supplier-detail'),
    path('suppliers/<int:pk>/performance/', supplier_performance, name='supplier-performance'),
]
