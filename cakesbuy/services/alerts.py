"""Admin alerts published to an AWS SNS topic."""

import logging
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

logger = logging.getLogger(__name__)


def send_admin_alert(subject, message):
    """Publish to SNS_TOPIC_ARN. Skipped when no topic is configured."""
    topic_arn = current_app.config.get('SNS_TOPIC_ARN')
    if not topic_arn:
        return False
    try:
        sns = boto3.client('sns', region_name=current_app.config['AWS_REGION'])
        sns.publish(
            TopicArn=topic_arn,
            Subject=subject[:100],
            Message=message
        )
    except (BotoCoreError, ClientError) as e:
        logger.error('Error sending admin alert: %s', e)
        return False
    return True


def new_order_alert(order):
    address = order.delivery_address or {}
    lines = [
        f'Order: {order.order_number}',
        f'Customer: {order.customer_name} ({order.customer_phone})',
        f'Total: ₹{order.total:.2f} via {order.payment_method}',
        f"Deliver to: {address.get('address', '')}, {address.get('city', '')} {address.get('pincode', '')}",
        f'Delivery: {order.delivery_date or "-"} {order.delivery_time or ""}',
    ]
    for item in order.items:
        lines.append(f' - {item.name} {item.weight or ""} x {item.quantity}')
    return send_admin_alert(f'New order #{order.order_number}', '\n'.join(lines))
