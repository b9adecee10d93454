from collections.abc import Sequence
from email.message import EmailMessage
import logging
import smtplib
from typing import Protocol

from dbsanitycheck.config import Settings
from dbsanitycheck.report import render_report_text
from dbsanitycheck.retry import RetryExhaustedError, run_with_retries
from dbsanitycheck.schemas import ExecutionError, Report


logger = logging.getLogger(__name__)


class NotificationError(RuntimeError):
    pass


class Notifier(Protocol):
    def send(self, report: Report, errors: Sequence[ExecutionError]) -> None:
        ...


def build_subject(base_subject: str, report: Report, errors: Sequence[ExecutionError]) -> str:
    if report.has_anomalies:
        status = f"{report.finding_count} inconsistencies found"
    else:
        status = "no inconsistencies found"
    if errors:
        status += f", {len(errors)} queries failed"
    return f"{base_subject}: {status}"


class EmailNotifier:
    def __init__(self, settings: Settings, smtp_factory=smtplib.SMTP) -> None:
        self.settings = settings
        self.smtp_factory = smtp_factory

    def build_message(self, report: Report, errors: Sequence[ExecutionError]) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = build_subject(self.settings.mail_subject, report, errors)
        message["From"] = self.settings.mail_from
        message["To"] = ", ".join(self.settings.mail_to)
        message.set_content(render_report_text(report))
        return message

    def send(self, report: Report, errors: Sequence[ExecutionError]) -> None:
        if not self.settings.mail_to:
            raise NotificationError("no recipients configured (MAIL_TO is empty)")

        message = self.build_message(report, errors)
        try:
            run_with_retries(
                lambda: self._deliver(message),
                max_retries=self.settings.max_send_retries,
                backoff_seconds=self.settings.retry_backoff_seconds,
                retry_on=(smtplib.SMTPException, OSError),
                label="email delivery",
            )
        except RetryExhaustedError as exc:
            raise NotificationError(f"could not send report email: {exc.last_error}") from exc

        logger.info("report email sent", extra={"recipients": len(self.settings.mail_to)})

    def _deliver(self, message: EmailMessage) -> None:
        with self.smtp_factory(self.settings.smtp_host, self.settings.smtp_port) as smtp:
            if self.settings.smtp_use_tls:
                smtp.starttls()
            if self.settings.smtp_username:
                smtp.login(self.settings.smtp_username, self.settings.smtp_password)
            smtp.send_message(message)


class LogNotifier:
    """Writes the report body to the log instead of delivering it (dry runs)."""

    def send(self, report: Report, errors: Sequence[ExecutionError]) -> None:
        logger.info("report not delivered (dry run)\n%s", render_report_text(report), extra={"errors": len(errors)})


def build_notifier(settings: Settings) -> Notifier:
    if settings.email_enabled:
        return EmailNotifier(settings)
    return LogNotifier()
