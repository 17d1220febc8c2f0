"""
Stock movement recording and the low-stock auto-reorder trigger.
"""
import logging
from datetime import timedelta

from django.conf import settings
from django.db import transaction
from django.utils import timezone

from backend.catalog.models import Product
from backend.core.notifications import notify_admin, send_html_email
from backend.core.utils import create_audit_log
from backend.purchasing.approval import build_admin_po_html
from backend.purchasing.models import PurchaseOrder
from .models import StockMovement

logger = logging.getLogger(__name__)


class InsufficientStockError(Exception):
    """Raised when a stock-out asks for more units than are on hand"""

    def __init__(self, product, requested):
        self.product = product
        self.requested = requested
        super().__init__(
            f"Not enough stock available for {product.name}: requested {requested}, on hand {product.stock_qty}"
        )


def auto_reorder_quantity(product):
    return max(1, product.min_threshold * 2)


def trigger_auto_reorder(product, user=None):
    """
    Raise a Pending purchase order for a product that fell below its minimum
    threshold, then notify the administrator.

    Returns the created PurchaseOrder, or None when the product has no supplier.
    """
    if product.supplier_id is None:
        logger.warning(f"Auto-PO skipped for product {product.pk} ({product.sku}): no supplier linked")
        return None

    quantity = auto_reorder_quantity(product)
    logger.info(
        f"Auto-PO trigger: product={product.pk} supplier={product.supplier_id} "
        f"current={product.stock_qty} min={product.min_threshold} ordered={quantity}"
    )
    order = PurchaseOrder.objects.create(
        product=product,
        supplier=product.supplier,
        quantity=quantity,
        status=PurchaseOrder.STATUS_PENDING,
        created_by=user if user is not None and user.is_authenticated else None,
        expected_date=timezone.now() + timedelta(days=product.lead_time) if product.lead_time else None,
        notes=(
            f"Auto-created due to low stock after stock-out "
            f"(current {product.stock_qty}, min {product.min_threshold})"
        ),
        is_auto_generated=True,
    )
    create_audit_log(
        action='po_auto_create',
        model_name='PurchaseOrder',
        object_id=str(order.id),
        user=user,
        object_name=product.name,
        object_reference=f"PO-{order.id}",
        changes={'quantity': quantity, 'stock_qty': product.stock_qty, 'min_threshold': product.min_threshold},
    )

    notify_admin(
        'Auto Purchase Order Created',
        f"PO {order.pk} created for product {product.name}",
        {'product_id': product.pk, 'supplier_id': product.supplier_id, 'quantity': quantity},
    )

    admin_email = getattr(settings, 'ADMIN_EMAIL', '')
    if admin_email:
        sent = send_html_email(
            admin_email,
            f"Auto PO Created for {product.name}",
            build_admin_po_html(order),
            f"Auto PO {order.pk} created for {product.name} (qty {order.quantity}). Visit admin portal to approve.",
        )
        if not sent:
            logger.warning(f"Admin e-mail for auto PO {order.pk} failed to send")
    else:
        logger.warning("ADMIN_EMAIL not configured; skipping admin e-mail")

    return order


def record_stock_movement(product, movement_type, quantity, user=None, remarks='',
                          supplier=None, movement_date=None, reference='', request=None):
    """
    Apply a stock movement to a product and log it.

    IN adds to stock. OUT removes from stock and raises InsufficientStockError
    when stock is short; an OUT that leaves stock below min_threshold runs the
    auto-reorder trigger once the movement is committed.

    Returns:
        (StockMovement, PurchaseOrder or None)
    """
    if movement_type not in (StockMovement.TYPE_IN, StockMovement.TYPE_OUT):
        raise ValueError(f"Invalid movement type: {movement_type}")
    if quantity <= 0:
        raise ValueError("Quantity must be greater than zero")

    with transaction.atomic():
        locked = Product.objects.select_for_update().select_related('supplier').get(pk=product.pk)
        previous_stock = locked.stock_qty

        if movement_type == StockMovement.TYPE_IN:
            locked.stock_qty = previous_stock + quantity
        else:
            if previous_stock < quantity:
                raise InsufficientStockError(locked, quantity)
            locked.stock_qty = previous_stock - quantity

        locked.save(update_fields=['stock_qty', 'updated_at'])
        movement = StockMovement.objects.create(
            product=locked,
            movement_type=movement_type,
            quantity=quantity,
            remarks=remarks or '',
            supplier=supplier,
            previous_stock=previous_stock,
            new_stock=locked.stock_qty,
            reference=reference or '',
            movement_date=movement_date or timezone.now(),
            created_by=user if user is not None and user.is_authenticated else None,
        )

    create_audit_log(
        request=request,
        action='stock_in' if movement_type == StockMovement.TYPE_IN else 'stock_out',
        model_name='Product',
        object_id=str(locked.id),
        user=user,
        object_name=locked.name,
        object_reference=locked.sku,
        changes={
            'quantity': quantity,
            'previous_stock': previous_stock,
            'new_stock': locked.stock_qty,
            'movement_id': movement.id,
        },
    )

    # keep the caller's instance in step with the locked row
    product.stock_qty = locked.stock_qty

    purchase_order = None
    if movement_type == StockMovement.TYPE_OUT and locked.stock_qty < locked.min_threshold:
        try:
            with transaction.atomic():
                purchase_order = trigger_auto_reorder(locked, user)
        except Exception as e:
            logger.error(f"Failed to auto-create purchase order for product {locked.pk}: {str(e)}")
            purchase_order = None

    return movement, purchase_order
