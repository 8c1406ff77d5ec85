"""Build status e-mail notifications."""

import logging
import smtplib
from email.message import EmailMessage
from typing import List, Optional

from pipeline_cli.models import PipelineConfig, PipelineStatus

logger = logging.getLogger(__name__)


def build_subject(job_name: str, build_id: int, status: PipelineStatus) -> str:
    return f"{job_name} - Build {build_id} - {status.value.capitalize()}!"


def build_body(job_name: str, build_id: int, status: PipelineStatus, build_url: str) -> str:
    return (
        f"{job_name} - Build {build_id} - {status.value.capitalize()}:\n"
        f"Check console output at {build_url} to view the results."
    )


class Notifier:
    """Sends notifications over SMTP. Delivery failures are logged, never raised."""

    def __init__(self, smtp_host: Optional[str], smtp_port: int = 25, sender: str = "pipeline-cli@localhost"):
        self.smtp_host = smtp_host
        self.smtp_port = smtp_port
        self.sender = sender

    def send(self, recipients: List[str], cc: List[str], subject: str, body: str) -> bool:
        """Send one message.

        Returns:
            True if the message was handed to the SMTP server
        """
        recipients = [r for r in recipients if r]
        cc = [c for c in cc if c]
        if not self.smtp_host:
            logger.warning("No SMTP host configured, not sending '%s' to %s", subject, ", ".join(recipients))
            return False

        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = ", ".join(recipients)
        if cc:
            message["Cc"] = ", ".join(cc)
        message["Subject"] = subject
        message.set_content(body)

        try:
            with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=30) as smtp:
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send notification '%s': %s", subject, e)
            return False

        logger.info("Sent notification '%s' to %s", subject, message["To"])
        return True

    def notify(
        self,
        status: PipelineStatus,
        config: PipelineConfig,
        job_name: str,
        build_id: int,
        build_url: str
    ) -> bool:
        """Send the end-of-pipeline notification for a run."""
        subject = build_subject(job_name, build_id, status)
        body = build_body(job_name, build_id, status, build_url)
        if status == PipelineStatus.SUCCESS:
            return self.send([config.success_email], [], subject, body)
        return self.send([config.failure_email], [config.failure_cc], subject, body)
