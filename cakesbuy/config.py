import os
import tempfile
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # JSON API with bearer tokens, forms are validated without CSRF tokens
    WTF_CSRF_ENABLED = False

    # Database - Using SQLite for easy local development
    basedir = os.path.dirname(os.path.dirname(__file__))
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        f'sqlite:///{os.path.join(basedir, "instance", "cakesbuy.db")}'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # JWT
    JWT_SECRET_KEY = os.environ.get('JWT_SECRET_KEY') or SECRET_KEY
    JWT_ALGORITHM = 'HS256'
    JWT_EXPIRES_DAYS = int(os.environ.get('JWT_EXPIRES_DAYS', 7))

    # Upload Configuration
    UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER') or os.path.join(basedir, 'uploads')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 16MB max file size
    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    # Mail Configuration
    MAIL_SERVER = os.environ.get('MAIL_SERVER', 'smtp.gmail.com')
    MAIL_PORT = int(os.environ.get('MAIL_PORT', 587))
    MAIL_USE_TLS = os.environ.get('MAIL_USE_TLS', 'True').lower() == 'true'
    MAIL_USERNAME = os.environ.get('MAIL_USERNAME')
    MAIL_PASSWORD = os.environ.get('MAIL_PASSWORD')
    MAIL_DEFAULT_SENDER = os.environ.get('MAIL_DEFAULT_SENDER') or \
        os.environ.get('MAIL_USERNAME') or 'orders@cakesbuy.in'
    ADMIN_EMAIL = os.environ.get('ADMIN_EMAIL', 'admin@cakesbuy.in')

    # Pagination
    ITEMS_PER_PAGE = 12

    # Customer rewards
    WELCOME_BONUS = 50
    LOYALTY_RUPEES_PER_POINT = 10

    # OTP
    OTP_EXPIRY_MINUTES = 5
    OTP_ECHO = os.environ.get('OTP_ECHO', 'False').lower() == 'true'

    # PhonePe (sandbox credentials by default)
    PHONEPE_MERCHANT_ID = os.environ.get('PHONEPE_MERCHANT_ID', 'PGTESTPAYUAT')
    PHONEPE_SALT_KEY = os.environ.get('PHONEPE_SALT_KEY', '099eb0cd-02cf-4e2a-8aca-3e6c6aff0399')
    PHONEPE_KEY_INDEX = os.environ.get('PHONEPE_KEY_INDEX', '1')
    PHONEPE_BASE_URL = os.environ.get('PHONEPE_BASE_URL',
                                      'https://api-preprod.phonepe.com/apis/pg-sandbox')
    PHONEPE_DEMO_MODE = os.environ.get('PHONEPE_DEMO_MODE', 'False').lower() == 'true'
    PHONEPE_TIMEOUT = 15

    # WhatsApp Cloud API, unset means messages are only logged
    WHATSAPP_API_URL = os.environ.get('WHATSAPP_API_URL', 'https://graph.facebook.com/v18.0')
    WHATSAPP_TOKEN = os.environ.get('WHATSAPP_TOKEN')
    WHATSAPP_PHONE_ID = os.environ.get('WHATSAPP_PHONE_ID')

    # AWS SNS admin alerts
    AWS_REGION = os.environ.get('AWS_REGION', 'ap-south-1')
    SNS_TOPIC_ARN = os.environ.get('SNS_TOPIC_ARN')

    FRONTEND_URL = os.environ.get('FRONTEND_URL', 'http://localhost:5000')

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = False
    OTP_ECHO = True
    PHONEPE_DEMO_MODE = True


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    UPLOAD_FOLDER = os.path.join(tempfile.gettempdir(), 'cakesbuy-test-uploads')
    MAIL_SUPPRESS_SEND = True
    OTP_ECHO = True
    PHONEPE_DEMO_MODE = True
    SNS_TOPIC_ARN = None
    WHATSAPP_TOKEN = None
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
