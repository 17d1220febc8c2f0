"""
Notification helpers for inventory events.
Admin notices go to the log; e-mails go through Django's configured mail backend.
"""
import logging

from django.conf import settings
from django.core.mail import EmailMultiAlternatives, send_mail
from django.utils import timezone

logger = logging.getLogger(__name__)


def notify_admin(title, message, details=None):
    """Record a server-side notice for administrators"""
    payload = {
        'title': title,
        'message': message,
        'details': details or {},
        'at': timezone.now().isoformat(),
    }
    logger.info(f"ADMIN NOTICE: {title} - {message} {payload['details']}")
    return payload


def send_plain_email(to, subject, text):
    """Send a plain-text e-mail. Returns True when the backend accepted it."""
    if not to:
        logger.warning(f"E-mail '{subject}' skipped: no recipient")
        return False
    try:
        send_mail(subject, text, settings.DEFAULT_FROM_EMAIL, [to], fail_silently=False)
        return True
    except Exception as e:
        logger.error(f"Failed to send e-mail '{subject}' to {to}: {str(e)}")
        return False


def send_html_email(to, subject, html, text=''):
    """Send an HTML e-mail with a plain-text fallback"""
    if not to:
        logger.warning(f"E-mail '{subject}' skipped: no recipient")
        return False
    try:
        message = EmailMultiAlternatives(subject, text or subject, settings.DEFAULT_FROM_EMAIL, [to])
        message.attach_alternative(html, 'text/html')
        message.send(fail_silently=False)
        return True
    except Exception as e:
        logger.error(f"Failed to send HTML e-mail '{subject}' to {to}: {str(e)}")
        return False


def send_purchase_order_email(order):
    """E-mail the supplier of a purchase order with its current details"""
    supplier = order.supplier
    if supplier is None or not supplier.email:
        logger.warning(f"Purchase order {order.pk}: supplier has no e-mail, notification skipped")
        return False

    product_name = order.product.name if order.product_id else 'N/A'
    expected = order.expected_date.strftime('%a %b %d %Y') if order.expected_date else 'Not specified'
    text = (
        f"Dear {supplier.name},\n\n"
        f"A purchase order has been issued to you.\n\n"
        f"Product: {product_name}\n"
        f"Quantity: {order.quantity}\n"
        f"Status: {order.status}\n"
        f"Expected Delivery: {expected}\n"
        f"Notes: {order.notes or '-'}\n\n"
        f"Regards,\nStockAI Inventory Team"
    )
    return send_plain_email(supplier.email, f"New Purchase Order - {product_name}", text)
