"""PhonePe payment routes."""

import logging
from flask import Blueprint, jsonify, request, redirect, current_app, url_for
from cakesbuy.extensions import db
from cakesbuy.models import Order, PhonePeTransaction
from cakesbuy.services import phonepe
from cakesbuy.services.phonepe import PaymentGatewayError
from cakesbuy.utils.helpers import money, timestamp_ms, json_body

payments_bp = Blueprint('payments', __name__)
logger = logging.getLogger(__name__)


@payments_bp.errorhandler(PaymentGatewayError)
def gateway_error(error):
    db.session.commit()
    return jsonify({'success': False, 'message': str(error)}), 502


def _transaction_or_404(merchant_transaction_id):
    return PhonePeTransaction.query.filter_by(
        merchant_transaction_id=merchant_transaction_id
    ).first_or_404()


def _refresh_status(transaction):
    """Ask PhonePe for the latest state of a transaction and store it."""
    data = phonepe.check_status(transaction.merchant_transaction_id)
    status = phonepe.apply_status(transaction, data)
    db.session.commit()
    logger.info('PhonePe transaction %s is %s', transaction.merchant_transaction_id, status)
    return data


@payments_bp.route('/api/payments/phonepe/initiate', methods=['POST'])
def initiate():
    """Start a PhonePe payment for an order."""
    data = json_body()
    order_id = data.get('order_id')
    if not order_id:
        return jsonify({'success': False, 'message': 'Order is required'}), 400

    order = Order.query.get(order_id)
    if not order:
        return jsonify({'success': False, 'message': 'Order not found'}), 404
    if order.payment_status == 'paid':
        return jsonify({'success': False, 'message': 'Order is already paid'}), 400

    # Wallet money taken at checkout is not charged again
    amount_due = money(order.total - (order.wallet_amount_used or 0))
    merchant_transaction_id = phonepe.generate_transaction_id()
    redirect_url = url_for('payments.phonepe_redirect', _external=True)
    callback_url = url_for('payments.callback', _external=True)
    transaction = PhonePeTransaction(
        order_id=order.id,
        merchant_transaction_id=merchant_transaction_id,
        amount=amount_due,
        status='pending',
        callback_url=callback_url
    )
    db.session.add(transaction)
    db.session.commit()

    if current_app.config['PHONEPE_DEMO_MODE']:
        transaction.redirect_url = (f"{current_app.config['FRONTEND_URL']}/payment/phonepe/demo"
                                    f'?merchantTransactionId={merchant_transaction_id}')
        transaction.status = 'initiated'
        db.session.commit()
        logger.info('Demo PhonePe payment %s for order %s', merchant_transaction_id, order.order_number)
        return jsonify({
            'success': True,
            'demo': True,
            'merchant_transaction_id': merchant_transaction_id,
            'redirect_url': transaction.redirect_url
        })

    payload = phonepe.build_pay_payload(
        merchant_transaction_id, amount_due, order.user_id,
        data.get('phone') or order.customer_phone, redirect_url, callback_url
    )
    try:
        transaction.redirect_url = phonepe.initiate_payment(payload)
    except PaymentGatewayError:
        transaction.status = 'failed'
        raise

    transaction.status = 'initiated'
    db.session.commit()
    logger.info('PhonePe payment %s initiated for order %s', merchant_transaction_id, order.order_number)
    return jsonify({
        'success': True,
        'merchant_transaction_id': merchant_transaction_id,
        'redirect_url': transaction.redirect_url
    })


@payments_bp.route('/api/payments/phonepe/status/<merchant_transaction_id>')
def status(merchant_transaction_id):
    transaction = _transaction_or_404(merchant_transaction_id)
    if current_app.config['PHONEPE_DEMO_MODE']:
        return jsonify({'success': True, 'transaction': transaction.to_dict()})

    data = _refresh_status(transaction)
    return jsonify({
        'success': bool(data.get('success')),
        'code': data.get('code'),
        'transaction': transaction.to_dict()
    })


@payments_bp.route('/api/payments/phonepe/callback', methods=['POST'])
def callback():
    """Server-to-server callback from PhonePe. The status is always re-checked."""
    data = json_body()
    merchant_transaction_id = data.get('merchant_transaction_id') or data.get('merchantTransactionId')
    if not merchant_transaction_id:
        return jsonify({'success': False, 'message': 'Missing merchant transaction id'}), 400

    transaction = _transaction_or_404(merchant_transaction_id)
    x_verify = request.headers.get('X-VERIFY')
    config = current_app.config
    if x_verify and not phonepe.verify_callback_checksum(merchant_transaction_id, x_verify,
                                                         config['PHONEPE_SALT_KEY'],
                                                         config['PHONEPE_KEY_INDEX']):
        logger.warning('PhonePe callback checksum mismatch for %s', merchant_transaction_id)

    if not config['PHONEPE_DEMO_MODE']:
        _refresh_status(transaction)
    return jsonify({'success': True, 'transaction': transaction.to_dict()})


@payments_bp.route('/api/payments/phonepe/demo-callback', methods=['POST'])
def demo_callback():
    """Settle a demo transaction as COMPLETED or FAILED."""
    if not current_app.config['PHONEPE_DEMO_MODE']:
        return jsonify({'success': False, 'message': 'Demo payments are disabled'}), 404

    data = json_body()
    merchant_transaction_id = data.get('merchant_transaction_id') or data.get('merchantTransactionId')
    transaction = _transaction_or_404(merchant_transaction_id)

    completed = data.get('status') == 'COMPLETED'
    phonepe.apply_status(transaction, {
        'success': completed,
        'code': 'PAYMENT_SUCCESS' if completed else 'PAYMENT_ERROR',
        'message': 'Demo payment',
        'data': {
            'state': 'COMPLETED' if completed else 'FAILED',
            'transactionId': f'DEMO_TXN_{timestamp_ms()}',
        },
    })
    db.session.commit()
    logger.info('Demo PhonePe transaction %s settled as %s', merchant_transaction_id, transaction.status)
    return jsonify({'success': True, 'status': data.get('status'), 'transaction': transaction.to_dict()})


@payments_bp.route('/payment/phonepe/callback')
def phonepe_redirect():
    """Browser redirect back from PhonePe, forwarded to the frontend result page."""
    frontend = current_app.config['FRONTEND_URL']
    merchant_transaction_id = request.args.get('merchantTransactionId')
    transaction = None
    if merchant_transaction_id:
        transaction = PhonePeTransaction.query.filter_by(
            merchant_transaction_id=merchant_transaction_id
        ).first()
    if transaction is None:
        return redirect(f'{frontend}/payment/failure?error=invalid_transaction')

    if transaction.status not in ('success', 'failed') and not current_app.config['PHONEPE_DEMO_MODE']:
        try:
            _refresh_status(transaction)
        except PaymentGatewayError:
            return redirect(f'{frontend}/payment/failure?transactionId={merchant_transaction_id}'
                            f'&error=callback_error')

    if transaction.status == 'success':
        return redirect(f'{frontend}/payment/success?transactionId={merchant_transaction_id}'
                        f'&orderId={transaction.order_id}')
    return redirect(f'{frontend}/payment/failure?transactionId={merchant_transaction_id}'
                    f'&error=payment_failed')
