"""E-mail channel registry.

The fake adapter is used unless ``STOREFRONT_EMAIL_BACKEND=smtp``. SMTP sends
block, so that backend is only accepted when events are processed by the
async engine and never on the request path.
"""

from protean.utils.globals import current_domain

from storefront import settings
from storefront.notification.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def _events_processed_inline() -> bool:
    return current_domain.config["event_processing"] == "sync"


def get_email_channel() -> EmailPort:
    global _email_channel
    if _email_channel is None:
        if settings.EMAIL_BACKEND == "smtp":
            if _events_processed_inline():
                raise ValueError(
                    "The smtp email backend needs async event processing; "
                    "run with PROTEAN_ENV=production or use the fake backend"
                )

            from storefront.notification.channel.smtp_email import SmtpEmailAdapter

            _email_channel = SmtpEmailAdapter()
        elif settings.EMAIL_BACKEND == "fake":
            from storefront.notification.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown email backend: {settings.EMAIL_BACKEND}")

    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_email_channel() -> None:
    global _email_channel
    _email_channel = None
