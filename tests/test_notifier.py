"""Tests for status notifications."""

import smtplib
from unittest.mock import MagicMock, patch

from pipeline_cli.models import PipelineStatus
from pipeline_cli.notifier import Notifier, build_body, build_subject


def test_subject_and_body():
    assert build_subject("foo-deploy", 42, PipelineStatus.SUCCESS) == "foo-deploy - Build 42 - Success!"
    assert build_body("foo-deploy", 42, PipelineStatus.FAILURE, "https://ci/42/") == (
        "foo-deploy - Build 42 - Failure:\nCheck console output at https://ci/42/ to view the results."
    )


def test_success_goes_to_success_address(springboot_config):
    smtp = MagicMock()
    with patch("pipeline_cli.notifier.smtplib.SMTP") as smtp_class:
        smtp_class.return_value.__enter__.return_value = smtp
        sent = Notifier("mail.local").notify(PipelineStatus.SUCCESS, springboot_config, "job", 1, "https://ci/1")

    assert sent is True
    message = smtp.send_message.call_args.args[0]
    assert message["To"] == springboot_config.success_email
    assert message["Cc"] is None
    assert message["Subject"] == "job - Build 1 - Success!"


def test_failure_copies_failure_cc(springboot_config):
    smtp = MagicMock()
    with patch("pipeline_cli.notifier.smtplib.SMTP") as smtp_class:
        smtp_class.return_value.__enter__.return_value = smtp
        Notifier("mail.local").notify(PipelineStatus.FAILURE, springboot_config, "job", 1, "https://ci/1")

    message = smtp.send_message.call_args.args[0]
    assert message["To"] == springboot_config.failure_email
    assert message["Cc"] == springboot_config.failure_cc


def test_delivery_failure_is_not_raised(springboot_config):
    with patch("pipeline_cli.notifier.smtplib.SMTP", side_effect=smtplib.SMTPConnectError(421, "busy")):
        assert Notifier("mail.local").send(["a@b.c"], [], "s", "b") is False


def test_no_smtp_host_skips_sending():
    with patch("pipeline_cli.notifier.smtplib.SMTP") as smtp_class:
        assert Notifier(None).send(["a@b.c"], [], "s", "b") is False
    smtp_class.assert_not_called()
