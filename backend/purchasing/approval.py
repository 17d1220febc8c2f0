"""
Signed one-click approval links for purchase orders.

The token is the hex HMAC-SHA256 of the order id, keyed with APPROVAL_SECRET,
so a link stays valid for as long as the secret is unchanged.
"""
import hashlib
import hmac

from django.conf import settings
from django.template.loader import render_to_string
from django.urls import reverse


def generate_approval_token(order_id):
    secret = getattr(settings, 'APPROVAL_SECRET', 'dev-secret')
    return hmac.new(secret.encode(), str(order_id).encode(), hashlib.sha256).hexdigest()


def verify_approval_token(order_id, token):
    """Constant-time comparison of a presented token against the expected one"""
    if not token:
        return False
    return hmac.compare_digest(generate_approval_token(order_id), str(token))


def build_approval_url(order):
    base_url = getattr(settings, 'APP_BASE_URL', 'http://localhost:8000').rstrip('/')
    path = reverse('purchase-order-approve', kwargs={'pk': order.pk, 'token': generate_approval_token(order.pk)})
    return f"{base_url}{path}"


def build_admin_po_html(order):
    """HTML summary of an auto-created order with an approval button"""
    return render_to_string('purchasing/admin_po_email.html', {
        'order': order,
        'product': order.product,
        'approve_url': build_approval_url(order),
    })
