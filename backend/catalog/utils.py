"""
Stock level helpers for products.
All functions are pure: they only read attributes of the product passed in.
"""


def check_threshold(product):
    """
    Compare a product's stock against its thresholds.

    Returns:
        dict with keys:
        - low_stock: True when stock is at or below the minimum threshold
        - alert: alert text (critical alert overrides the low-stock alert)
        - recommendation: reorder advice for the most severe level reached
    """
    result = {'low_stock': False, 'alert': None, 'recommendation': None}

    if product.stock_qty <= product.min_threshold:
        result['low_stock'] = True
        result['alert'] = f"LOW STOCK ALERT: {product.name} ({product.sku}) is below threshold!"
        result['recommendation'] = (
            f"Current stock: {product.stock_qty}, Threshold: {product.min_threshold}. Consider reordering."
        )

    reorder_point = product.reorder_point or (product.min_threshold + 5)
    if product.stock_qty <= reorder_point:
        result['recommendation'] = (
            f"REORDER SUGGESTION: {product.name} is at reorder point. "
            f"Suggested quantity: {product.reorder_quantity or 50} units."
        )

    if product.stock_qty <= product.min_threshold * 0.2:
        result['alert'] = f"CRITICAL STOCK ALERT: {product.name} is critically low! Immediate action required."
        result['recommendation'] = f"URGENT: Reorder {product.reorder_quantity or 100} units immediately."

    return result


def stock_level(product):
    """Classify stock relative to the minimum threshold"""
    if product.stock_qty <= product.min_threshold * 0.2:
        return 'critical'
    if product.stock_qty <= product.min_threshold:
        return 'low'
    if product.stock_qty <= product.min_threshold * 2:
        return 'medium'
    return 'good'


def stock_capacity_status(product):
    """Classify stock as a percentage of the maximum threshold"""
    percentage = (product.stock_qty / (product.max_threshold or 100)) * 100
    if percentage <= 10:
        return 'critical'
    if percentage <= 25:
        return 'low'
    if percentage <= 50:
        return 'medium'
    if percentage <= 75:
        return 'good'
    return 'excellent'
