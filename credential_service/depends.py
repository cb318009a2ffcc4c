from sqlalchemy.ext.asyncio import async_sessionmaker

from config import ApplicationConfig
from credential_service.adapter.database import create_engine, create_session_factory
from credential_service.adapter.services.credential_store import SqlCredentialStore
from credential_service.adapter.services.notification_senders import (
    LoggingNotificationSender,
    SmtpNotificationSender,
)
from credential_service.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from credential_service.app.services.credential_hasher import CredentialHasher
from credential_service.app.services.notification_sender import INotificationSender
from credential_service.app.services.password_policy import PasswordPolicy
from credential_service.app.services.settings import CredentialSettings
from credential_service.app.services.token_generator import TokenGenerator
from credential_service.app.use_cases.auth import ResetFlowController, VerifyCredentialsUseCase

settings = CredentialSettings.from_config(ApplicationConfig)

engine = create_engine(ApplicationConfig.DB_URI)

AsyncSessionLocal = create_session_factory(engine)


def build_notification_sender(config) -> INotificationSender:
    """SMTP when a host is configured, log-only otherwise"""
    if config.SMTP_HOST:
        return SmtpNotificationSender(
            host=config.SMTP_HOST,
            port=config.SMTP_PORT,
            sender=config.SMTP_FROM,
            username=config.SMTP_USER,
            password=config.SMTP_PASSWORD,
            use_tls=config.SMTP_USE_TLS,
            timeout=config.NOTIFICATION_TIMEOUT_SECONDS,
        )
    return LoggingNotificationSender()


def build_store(
    session_factory: async_sessionmaker, settings: CredentialSettings
) -> SqlCredentialStore:
    return SqlCredentialStore(
        lambda: SqlAlchemyUnitOfWork(session_factory), settings.store
    )


def build_reset_flow_controller(
    session_factory: async_sessionmaker,
    settings: CredentialSettings,
    notification_sender: INotificationSender,
) -> ResetFlowController:
    return ResetFlowController(
        store=build_store(session_factory, settings),
        hasher=CredentialHasher(
            settings.hashing, min_length=settings.password_policy.min_length
        ),
        token_generator=TokenGenerator(settings.tokens),
        notification_sender=notification_sender,
        password_policy=PasswordPolicy(settings.password_policy),
        notification_settings=settings.notification,
    )


def build_verify_credentials_use_case(
    session_factory: async_sessionmaker, settings: CredentialSettings
) -> VerifyCredentialsUseCase:
    return VerifyCredentialsUseCase(
        store=build_store(session_factory, settings),
        hasher=CredentialHasher(
            settings.hashing, min_length=settings.password_policy.min_length
        ),
    )


_reset_flow_controller = build_reset_flow_controller(
    AsyncSessionLocal, settings, build_notification_sender(ApplicationConfig)
)


async def get_reset_flow_controller() -> ResetFlowController:
    return _reset_flow_controller
