"""Board configuration, stored in ``QSettings`` with environment overrides."""

import os
from typing import Final, cast

from PySide6.QtCore import QSettings


class BoardSettings:
    """
    Settings for the note board.

    Values are looked up in this order: environment variable (where one is
    defined for the key), ``QSettings``, built-in default.

    Keyword Args:
        settings: The ``QSettings`` store to read; defaults to the
            application's own store

    """

    #: Settings key -> environment variable that overrides it.
    ENVIRONMENT: Final[dict[str, str]] = {
        "api/url": "NOTEBOARD_API_URL",
        "api/user_id": "NOTEBOARD_USER_ID",
    }
    #: Built-in defaults.
    DEFAULTS: Final[dict[str, str | int]] = {
        "api/url": "http://localhost:3001/api",
        "api/user_id": "test-user-id",
        "api/days": 14,
        "sync/reconcile_delay_ms": 5000,
        "sync/periodic_ms": 30000,
    }

    def __init__(self, settings: QSettings | None = None) -> None:
        self.settings = settings if settings is not None else QSettings()

    def get_int_value(self, key: str, default: int) -> int:
        """
        Get the value of a setting key that has an integer value.

        Args:
            key: Key for the settings value
            default: Default value for the setting

        Returns:
            Value for the setting

        """
        env_name = self.ENVIRONMENT.get(key)
        if env_name and os.environ.get(env_name):
            return int(os.environ[env_name])
        value = cast("int", self.settings.value(key, default, type=int))
        return int(value) if value is not None else default

    def get_str_value(self, key: str, default: str) -> str:
        """
        Get the value of a setting key that has a string value.

        Args:
            key: Key for the settings value
            default: Default value for the setting

        Returns:
            Value for the setting

        """
        env_name = self.ENVIRONMENT.get(key)
        if env_name and os.environ.get(env_name):
            return os.environ[env_name]
        value = cast("str", self.settings.value(key, default, type=str))
        return value if value is not None else default

    @property
    def api_url(self) -> str:
        """Base URL of the backend of record."""
        return self.get_str_value("api/url", cast("str", self.DEFAULTS["api/url"]))

    @property
    def user_id(self) -> str:
        """Caller identity sent with every backend request."""
        return self.get_str_value(
            "api/user_id", cast("str", self.DEFAULTS["api/user_id"])
        )

    @property
    def days(self) -> int:
        """How many days back the board asks the backend for."""
        return self.get_int_value("api/days", cast("int", self.DEFAULTS["api/days"]))

    @property
    def reconcile_delay_ms(self) -> int:
        """Delay of the safety-net reconciliation after adding a note."""
        return self.get_int_value(
            "sync/reconcile_delay_ms",
            cast("int", self.DEFAULTS["sync/reconcile_delay_ms"]),
        )

    @property
    def periodic_ms(self) -> int:
        """Interval of the background full reconciliation."""
        return self.get_int_value(
            "sync/periodic_ms", cast("int", self.DEFAULTS["sync/periodic_ms"])
        )
