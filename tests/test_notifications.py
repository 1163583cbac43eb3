import pytest
import requests

from cakesbuy.extensions import mail
from cakesbuy.models import Order, User
from cakesbuy.services import alerts, emails, whatsapp


@pytest.mark.parametrize('raw, formatted', [
    ('9876543210', '919876543210'),
    ('+91 98765 43210', '919876543210'),
    ('', ''),
    (None, ''),
])
def test_format_phone(raw, formatted):
    assert whatsapp.format_phone(raw) == formatted


def test_whatsapp_is_logged_without_credentials(app, monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError('the API should not be called')

    monkeypatch.setattr(whatsapp.requests, 'post', unexpected)
    assert whatsapp.send_message('9876543210', 'Hello') is True
    assert whatsapp.send_message('', 'Hello') is False


def test_whatsapp_posts_to_cloud_api(app, monkeypatch):
    app.config.update(WHATSAPP_TOKEN='token', WHATSAPP_PHONE_ID='12345')
    calls = []

    class Accepted:
        def raise_for_status(self):
            pass

    def fake_post(url, headers, json, timeout):
        calls.append((url, headers, json))
        return Accepted()

    monkeypatch.setattr(whatsapp.requests, 'post', fake_post)
    assert whatsapp.send_message('9876543210', 'Your cake is ready') is True
    url, headers, body = calls[0]
    assert url == 'https://graph.facebook.com/v18.0/12345/messages'
    assert headers['Authorization'] == 'Bearer token'
    assert body['to'] == '919876543210'
    assert body['text'] == {'body': 'Your cake is ready'}


def test_whatsapp_failure_returns_false(app, monkeypatch):
    app.config.update(WHATSAPP_TOKEN='token', WHATSAPP_PHONE_ID='12345')

    def broken(*args, **kwargs):
        raise requests.Timeout('slow')

    monkeypatch.setattr(whatsapp.requests, 'post', broken)
    assert whatsapp.send_message('9876543210', 'Hi') is False


def test_admin_alert_needs_topic(app, monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError('SNS should not be called')

    monkeypatch.setattr(alerts.boto3, 'client', unexpected)
    assert alerts.send_admin_alert('Subject', 'Body') is False


def test_admin_alert_publishes(app, monkeypatch):
    app.config['SNS_TOPIC_ARN'] = 'arn:aws:sns:ap-south-1:123456789012:cakesbuy-orders'
    published = []

    class FakeSNS:
        def publish(self, **kwargs):
            published.append(kwargs)

    monkeypatch.setattr(alerts.boto3, 'client', lambda service, region_name: FakeSNS())
    assert alerts.send_admin_alert('x' * 150, 'New order') is True
    assert published[0]['TopicArn'] == app.config['SNS_TOPIC_ARN']
    assert len(published[0]['Subject']) == 100


def test_new_order_alert_lists_items(app, place_order, monkeypatch):
    order = place_order()
    captured = {}
    monkeypatch.setattr(alerts, 'send_admin_alert',
                        lambda subject, message: captured.update(subject=subject, message=message))

    alerts.new_order_alert(Order.query.get(order['id']))
    assert captured['subject'] == f"New order #{order['order_number']}"
    assert 'Chocolate Truffle 1kg x 1' in captured['message']
    assert '560001' in captured['message']


def test_email_skips_missing_recipients(app):
    with mail.record_messages() as outbox:
        assert emails.send_email('Hello', [None, ''], 'email/welcome.txt') is False
    assert outbox == []


def test_welcome_email_mentions_bonus(app):
    user = User(name='Asha', email='asha@example.com', phone='9876500001')
    with mail.record_messages() as outbox:
        assert emails.send_welcome_email(user, 75) is True
        emails.send_welcome_email(user)
    assert outbox[0].recipients == ['asha@example.com']
    assert '₹75' in outbox[0].body
    assert 'welcome bonus' not in outbox[1].body
