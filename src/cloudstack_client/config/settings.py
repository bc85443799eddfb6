"""Process-wide settings backed by dynaconf.

Values come, in increasing priority, from the defaults below, the settings file
(``settings.toml`` in the config directory, or ``CLOUDSTACK_SETTINGS_FILE``),
a ``.env`` file and ``CLOUDSTACK_*`` environment variables.
"""

import os

from dynaconf import Dynaconf, Validator

from cloudstack_client.config.platform_dirs import get_config_location, get_profiles_file


def _settings_files() -> list:
    if env_file := os.environ.get("CLOUDSTACK_SETTINGS_FILE"):
        return [env_file]
    return [str(get_config_location() / "settings.toml")]


def build_settings(**overrides) -> Dynaconf:
    """
    Create a settings object.

    :param overrides: Values that take precedence over every other source (mostly for tests).
    :return: A validated Dynaconf instance.
    """
    settings = Dynaconf(
        envvar_prefix="CLOUDSTACK",
        settings_files=_settings_files(),
        load_dotenv=True,
        validators=[
            Validator("LOG_LEVEL", default="INFO"),
            Validator("LOG_DESTINATION", default="stderr", is_in=["stderr", "file", "both"]),
            Validator("LOG_DIR", default=None),
            Validator("LOG_FILENAME", default="cloudstack_client.log"),
            Validator("HTTP_TIMEOUT", default=30.0, gt=0),
            Validator("VERIFY_SSL", default=True, is_type_of=bool),
            Validator("POLL_INTERVAL", default=1.0, gte=0),
            Validator("RESPONSE_FORMAT", default="json", is_in=["json", "xml"]),
            Validator("PROFILE_FILE", default=str(get_profiles_file())),
            Validator("DEFAULT_PROFILE", default="default"),
        ],
    )
    for key, value in overrides.items():
        settings.set(key, value)
    return settings


settings = build_settings()
