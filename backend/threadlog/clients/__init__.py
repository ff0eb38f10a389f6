from flask import current_app

from .locations import LocationClient
from .sms import SmsNotifier

_LOCATIONS_KEY = "threadlog.locations"
_SMS_KEY = "threadlog.sms"


def init_clients(app) -> None:
    """Build one client of each kind per app (the location cache lives here)."""
    app.extensions.setdefault(_LOCATIONS_KEY, LocationClient(
        app.config["PSGC_API_URL"],
        timeout=app.config["HTTP_TIMEOUT_SECONDS"],
    ))
    app.extensions.setdefault(_SMS_KEY, SmsNotifier.from_config(app.config))


def get_location_client() -> LocationClient:
    return current_app.extensions[_LOCATIONS_KEY]


def get_sms_notifier() -> SmsNotifier:
    return current_app.extensions[_SMS_KEY]


__all__ = ["LocationClient", "SmsNotifier", "init_clients", "get_location_client", "get_sms_notifier"]
