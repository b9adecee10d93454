from dataclasses import dataclass
import os

from dotenv import load_dotenv


load_dotenv()


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _as_list(value: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in value.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    app_name: str
    database_url: str
    log_level: str
    email_enabled: bool
    smtp_host: str
    smtp_port: int
    smtp_username: str
    smtp_password: str
    smtp_use_tls: bool
    mail_from: str
    mail_to: tuple[str, ...]
    mail_subject: str
    max_send_retries: int
    retry_backoff_seconds: float


def get_settings() -> Settings:
    return Settings(
        app_name=os.getenv("APP_NAME", "dbsanitycheck"),
        database_url=os.getenv("DATABASE_URL", "sqlite:///./sanity.db"),
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        email_enabled=_as_bool(os.getenv("EMAIL_ENABLED", "false")),
        smtp_host=os.getenv("SMTP_HOST", "localhost"),
        smtp_port=int(os.getenv("SMTP_PORT", "25")),
        smtp_username=os.getenv("SMTP_USERNAME", ""),
        smtp_password=os.getenv("SMTP_PASSWORD", ""),
        smtp_use_tls=_as_bool(os.getenv("SMTP_USE_TLS", "false")),
        mail_from=os.getenv("MAIL_FROM", "dbsanitycheck@localhost"),
        mail_to=_as_list(os.getenv("MAIL_TO", "")),
        mail_subject=os.getenv("MAIL_SUBJECT", "Sanity check"),
        max_send_retries=int(os.getenv("MAX_SEND_RETRIES", "2")),
        retry_backoff_seconds=float(os.getenv("RETRY_BACKOFF_SECONDS", "1")),
    )
