# main.py
import logging
import signal
import sys

# Import from our modules
from service_modules import config
from service_modules.config import s
from service_modules.credentials import load_credentials
from service_modules.errors import ConfigurationError, StartupCredentialError, ListenerBindError
from service_modules.flask_app import create_app
from service_modules.server import TLSListener

logger = logging.getLogger(__name__)


def main(environ=None):
    """Load settings and credentials, bind the HTTPS listener and serve. Returns the exit code."""
    # --- Initial Logging Setup ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    # --- Configuration ---
    try:
        settings = config.load_settings(environ)
    except ConfigurationError as e:
        logger.error(s.FATAL_CONFIGURATION.format(error=e))
        return 1
    logging.getLogger().setLevel(settings.log_level)

    # --- Credentials (read once, before anything is bound) ---
    try:
        bundle = load_credentials(
            settings.key_file,
            settings.cert_file,
            ca_file=settings.ca_file,
            ca_required=settings.ca_required,
        )
    except StartupCredentialError as e:
        logger.error(s.FATAL_CREDENTIALS.format(error=e), exc_info=True)
        return 1

    # SIGTERM drains the same way Ctrl+C does
    signal.signal(signal.SIGTERM, signal.default_int_handler)

    # --- Listener ---
    listener = TLSListener(
        create_app(settings.greeting),
        bundle,
        host=settings.host,
        port=settings.port,
        client_cert_mode=settings.client_cert_mode,
    )
    try:
        listener.start()
    except StartupCredentialError as e:
        # Key, certificate or CA the TLS layer cannot parse
        logger.error(s.FATAL_CREDENTIALS.format(error=e), exc_info=True)
        return 1
    except ListenerBindError as e:
        logger.error(s.FATAL_LISTENER.format(error=e), exc_info=True)
        return 1

    listener.serve_forever()
    return 0


if __name__ == '__main__':
    sys.exit(main())
