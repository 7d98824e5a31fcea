import os
import logging
from dataclasses import dataclass
from typing import Optional
from dotenv import find_dotenv, load_dotenv
from . import strings_en
from . import strings_es
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

LANGUAGES = {'english': strings_en, 'spanish': strings_es}
CLIENT_CERT_MODES = ('none', 'optional', 'required')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')

# --- Defaults ---
DEFAULT_KEY_FILE = "server.key"
DEFAULT_CERT_FILE = "server.crt"
DEFAULT_CA_FILE = "ca.crt"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 443


def get_strings(language):
    """Return the strings module for a language name, falling back to English."""
    return LANGUAGES.get((language or 'english').lower(), strings_en)


# Log messages follow the language of the process environment
SERVICE_LANGUAGE = os.getenv('SERVICE_LANGUAGE', 'english').lower()
s = get_strings(SERVICE_LANGUAGE)


@dataclass(frozen=True)
class Settings:
    key_file: str = DEFAULT_KEY_FILE
    cert_file: str = DEFAULT_CERT_FILE
    ca_file: Optional[str] = DEFAULT_CA_FILE
    ca_required: bool = False
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    client_cert_mode: str = 'none'
    language: str = 'english'
    greeting: str = strings_en.GREETING
    log_level: str = 'INFO'


def _parse_bool(name, value):
    lowered = value.strip().lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no', ''):
        return False
    raise ConfigurationError(s.ERROR_INVALID_BOOLEAN.format(name=name, value=value))


def _parse_port(value):
    try:
        port = int(value)
    except ValueError:
        raise ConfigurationError(s.ERROR_INVALID_PORT.format(value=value)) from None
    if not 0 <= port <= 65535:
        raise ConfigurationError(s.ERROR_INVALID_PORT.format(value=value))
    return port


def load_settings(environ=None, dotenv_path=None):
    """
    Build the service settings from environment variables.

    Args:
        environ (Mapping[str, str] | None): Variables to read. Defaults to
            ``os.environ``, after merging in a ``.env`` file.
        dotenv_path (str | None): ``.env`` file to merge when ``environ`` is
            not given. Defaults to python-dotenv's search from the cwd.

    Returns:
        Settings: The immutable settings for this process.

    Raises:
        ConfigurationError: If a variable holds an unusable value.
    """
    if environ is None:
        # Real environment variables win over the .env file
        if load_dotenv(dotenv_path or find_dotenv(usecwd=True)):
            logger.info(s.LOG_DOTENV_LOADED)
        env = os.environ
    else:
        env = environ

    language = env.get('SERVICE_LANGUAGE', 'english').lower()
    if language not in LANGUAGES:
        logger.warning(s.WARN_UNKNOWN_LANGUAGE.format(value=language))
        language = 'english'

    client_cert_mode = env.get('CLIENT_CERT_MODE', 'none').strip().lower()
    if client_cert_mode not in CLIENT_CERT_MODES:
        raise ConfigurationError(s.ERROR_INVALID_CLIENT_CERT_MODE.format(
            modes=', '.join(CLIENT_CERT_MODES), value=client_cert_mode))

    log_level = env.get('LOG_LEVEL', 'INFO').strip().upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(s.ERROR_INVALID_LOG_LEVEL.format(
            levels=', '.join(LOG_LEVELS), value=log_level))

    # An empty TLS_CA_FILE disables the CA certificate entirely
    ca_file = env.get('TLS_CA_FILE', DEFAULT_CA_FILE) or None

    settings = Settings(
        key_file=env.get('TLS_KEY_FILE', DEFAULT_KEY_FILE),
        cert_file=env.get('TLS_CERT_FILE', DEFAULT_CERT_FILE),
        ca_file=ca_file,
        ca_required=_parse_bool('TLS_CA_REQUIRED', env.get('TLS_CA_REQUIRED', 'false')),
        host=env.get('HOST', DEFAULT_HOST),
        port=_parse_port(env.get('PORT', str(DEFAULT_PORT))),
        client_cert_mode=client_cert_mode,
        language=language,
        greeting=env.get('SERVICE_GREETING') or get_strings(language).GREETING,
        log_level=log_level,
    )
    logger.info(s.LOG_SETTINGS_LOADED.format(
        host=settings.host, port=settings.port, mode=settings.client_cert_mode))
    return settings
