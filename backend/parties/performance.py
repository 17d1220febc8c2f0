"""
Supplier delivery performance.

Each purchase order is matched with the first IN movement of the same product
from the same supplier recorded on or after the order was raised; that
movement counts as the order's delivery.
"""
from backend.inventory.models import StockMovement
from backend.purchasing.models import PurchaseOrder


def performance_status(percentage):
    if percentage >= 90:
        return 'Excellent'
    if percentage >= 75:
        return 'Good'
    if percentage >= 50:
        return 'Average'
    return 'Poor'


def supplier_delivery_performance(supplier):
    """Delivery statistics for one supplier, or None when it has no orders"""
    orders = list(PurchaseOrder.objects.filter(supplier=supplier).order_by('created_at', 'id'))
    if not orders:
        return None

    deliveries = list(
        StockMovement.objects.filter(supplier=supplier, movement_type=StockMovement.TYPE_IN)
        .order_by('movement_date', 'id')
    )
    used = set()
    total_deliveries = 0
    on_time = 0
    delivery_days = []

    for order in orders:
        delivery = next(
            (
                movement for movement in deliveries
                if movement.id not in used
                and movement.product_id == order.product_id
                and movement.movement_date >= order.created_at
            ),
            None,
        )
        if delivery is None:
            continue
        used.add(delivery.id)
        total_deliveries += 1
        delivery_days.append((delivery.movement_date - order.created_at).total_seconds() / 86400)
        if order.expected_date and delivery.movement_date <= order.expected_date:
            on_time += 1

    percentage = (on_time / total_deliveries) * 100 if total_deliveries else 0
    avg_days = round(sum(delivery_days) / len(delivery_days), 1) if delivery_days else None

    return {
        'supplier_id': supplier.id,
        'supplier_name': supplier.name,
        'email': supplier.email,
        'total_orders': len(orders),
        'total_deliveries': total_deliveries,
        'on_time_deliveries': on_time,
        'avg_delivery_days': avg_days,
        'performance_percentage': round(percentage, 1),
        'performance_status': performance_status(percentage),
    }


def delivery_performance(suppliers):
    results = []
    for supplier in suppliers:
        stats = supplier_delivery_performance(supplier)
        if stats is not None:
            results.append(stats)
    return results
