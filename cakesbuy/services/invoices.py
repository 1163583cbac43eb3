"""Invoice generation for orders."""

import logging
from datetime import datetime, timedelta
from cakesbuy.extensions import db
from cakesbuy.models import Invoice
from cakesbuy.utils.helpers import money

logger = logging.getLogger(__name__)


def invoice_lines(order):
    """One line per order item with addons folded in, plus delivery."""
    lines = []
    for item in order.items:
        description = item.name
        details = [d for d in (item.weight, item.flavor) if d]
        if details:
            description += f" ({', '.join(details)})"
        addons = item.addons or []
        if addons:
            description += ' + ' + ', '.join(
                f"{a['name']} x{a.get('quantity', 1)}" for a in addons
            )
        lines.append({
            'description': description,
            'quantity': item.quantity,
            'unit_price': money(item.subtotal / item.quantity) if item.quantity else money(item.unit_price),
            'total': money(item.subtotal),
        })
    if order.delivery_fee:
        lines.append({
            'description': 'Delivery charges',
            'quantity': 1,
            'unit_price': money(order.delivery_fee),
            'total': money(order.delivery_fee),
        })
    return lines


def create_invoice(order):
    """Create the order's invoice, or return the one it already has."""
    if order.invoice is not None:
        return order.invoice

    address = order.delivery_address or {}
    now = datetime.utcnow()
    invoice = Invoice(
        invoice_number=Invoice.generate_invoice_number(),
        order=order,
        user_id=order.user_id,
        customer_name=order.customer_name,
        customer_email=order.customer_email,
        customer_phone=order.customer_phone,
        billing_address={
            'address': address.get('address'),
            'city': address.get('city'),
            'pincode': address.get('pincode'),
            'landmark': address.get('landmark'),
        },
        items=invoice_lines(order),
        subtotal=money(order.subtotal),
        tax_amount=0.0,
        discount_amount=money(order.discount),
        delivery_fee=money(order.delivery_fee),
        total_amount=money(order.total),
        status='paid' if order.payment_status == 'paid' else 'sent',
        payment_status=order.payment_status,
        payment_method=order.payment_method,
        invoice_date=now,
        due_date=now + timedelta(days=7),
        paid_date=now if order.payment_status == 'paid' else None,
        notes=(f'Paid ₹{order.wallet_amount_used:.2f} from wallet'
               if order.wallet_amount_used else None),
    )
    db.session.add(invoice)
    logger.info('Invoice %s created for order %s', invoice.invoice_number, order.order_number)
    return invoice
