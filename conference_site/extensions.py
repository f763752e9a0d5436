"""Flask extensions initialization (Mail, Limiter, JWT) and service wiring."""
from flask_mail import Mail
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_jwt_extended import JWTManager

from . import db

# Initialize Flask extensions
mail = Mail()
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=["200 per day", "50 per hour"],
    headers_enabled=True,
)
jwt = JWTManager()

SERVICES_KEY = 'conference'


def build_services(app) -> dict:
    """Construct the registration and export services from app config."""
    from .repositories import LoadedFilesRepository, ParticipantsRepository
    from .services.captcha import CaptchaVerifier
    from .services.email_validation_service import EmailValidationService
    from .services.export_service import ExportService
    from .services.notifications import Notifier
    from .services.registration_service import RegistrationService
    from .services.storage_service import create_storage

    cfg = app.config
    participants = ParticipantsRepository()
    email_service = EmailValidationService.from_config(cfg)
    registration = RegistrationService(
        participants=participants,
        files=LoadedFilesRepository(),
        captcha=CaptchaVerifier.from_config(cfg),
        email_checker=email_service.is_deliverable,
        notifier=Notifier(mail, sender=cfg.get('MAIL_DEFAULT_SENDER'), conference=cfg.get('CONFERENCE_NAME', '')),
        storage=create_storage(cfg),
        enforce_captcha=cfg.get('APP_ENV') == 'production',
        delivery_attempts=cfg.get('MAIL_DELIVERY_ATTEMPTS', 3),
        conference=cfg.get('CONFERENCE_NAME', ''),
    )
    if not registration.enforce_captcha:
        app.logger.info("Captcha verification disabled (APP_ENV=%s)", cfg.get('APP_ENV'))
    return {
        'registration': registration,
        'export': ExportService(participants),
    }


def get_services(app) -> dict:
    return app.extensions[SERVICES_KEY]


def init_extensions(app):
    """Initialize Flask extensions and the conference services.

    Args:
        app: Flask application instance
    """
    mail.init_app(app)
    limiter.init_app(app)
    jwt.init_app(app)

    db.init_app(app)

    app.extensions[SERVICES_KEY] = build_services(app)
