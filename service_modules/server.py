"""
HTTPS listener for the Flask app.

The SSL context is built from the in-memory credential bundle before any
socket is bound, so invalid TLS material never leaves a half-started
listener behind. Connections are served by Werkzeug's threaded WSGI server.
"""
import errno
import logging
import os
import socket
import ssl
import tempfile
import threading
from enum import Enum

from werkzeug.serving import make_server

from .config import s, CLIENT_CERT_MODES, DEFAULT_HOST, DEFAULT_PORT
from .errors import ConfigurationError, InvalidCredentialError, ListenerBindError, TLSConfigurationError

logger = logging.getLogger(__name__)

HTTPS_DEFAULT_PORT = 443

# OpenSSL reports a certificate/key mismatch under either reason depending on version
KEY_MISMATCH_REASONS = ('KEY_VALUES_MISMATCH', 'NO_CERTIFICATE_ASSIGNED')

VERIFY_MODES = {
    'none': ssl.CERT_NONE,
    'optional': ssl.CERT_OPTIONAL,
    'required': ssl.CERT_REQUIRED,
}


class ListenerState(Enum):
    NOT_LISTENING = 'not listening'
    LISTENING = 'listening'
    STOPPED = 'stopped'


def _write(directory, name, data):
    path = os.path.join(directory, name)
    with open(path, 'wb') as f:
        f.write(data)
    return path


def _chain_rejected(error):
    # A key that does not belong to the certificate is a TLS setup problem;
    # anything else the TLS layer cannot parse is bad credential material
    if getattr(error, 'reason', None) in KEY_MISMATCH_REASONS:
        return TLSConfigurationError(s.ERROR_TLS_CERT_CHAIN.format(error=error))
    return InvalidCredentialError(s.ERROR_CREDENTIAL_INVALID.format(kind='certificate/private key', error=error))


def _load_credentials_into(context, bundle):
    # ssl only loads certificates and keys from paths; the files live in a
    # 0700 temporary directory for the duration of the calls. OpenSSL's PEM
    # reader skips any text around the BEGIN/END blocks.
    with tempfile.TemporaryDirectory(prefix='tls-') as tmpdir:
        cert_path = _write(tmpdir, 'server.crt', bundle.certificate)
        key_path = _write(tmpdir, 'server.key', bundle.private_key)
        try:
            context.load_cert_chain(certfile=cert_path, keyfile=key_path)
        except ssl.SSLError as e:
            raise _chain_rejected(e) from e

        if bundle.ca_certificate is not None:
            ca_path = _write(tmpdir, 'ca.crt', bundle.ca_certificate)
            try:
                context.load_verify_locations(cafile=ca_path)
            except ssl.SSLError as e:
                raise InvalidCredentialError(s.ERROR_TLS_CA.format(error=e)) from e


def build_ssl_context(bundle, client_cert_mode='none'):
    """
    Create a server-side SSL context from a CredentialBundle.

    Args:
        bundle (CredentialBundle): Key, certificate and optional CA bytes.
        client_cert_mode (str): 'none' (CA loaded but not enforced),
            'optional' or 'required' (mutual TLS).

    Returns:
        ssl.SSLContext: The configured context.

    Raises:
        ConfigurationError: If client_cert_mode is unknown.
        InvalidCredentialError: If the key, certificate or CA is not valid PEM.
        TLSConfigurationError: If the key does not match the certificate, or
            client verification is requested without a CA.
    """
    if client_cert_mode not in CLIENT_CERT_MODES:
        raise ConfigurationError(s.ERROR_INVALID_CLIENT_CERT_MODE.format(
            modes=', '.join(CLIENT_CERT_MODES), value=client_cert_mode))
    if bundle.ca_certificate is None and client_cert_mode != 'none':
        raise TLSConfigurationError(s.ERROR_TLS_MODE_WITHOUT_CA.format(mode=client_cert_mode))

    context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
    _load_credentials_into(context, bundle)

    context.verify_mode = VERIFY_MODES[client_cert_mode]
    logger.info(s.LOG_CLIENT_CERT_MODE.format(mode=client_cert_mode))
    return context


class TLSListener:
    """
    Binds the port, wraps it with TLS and serves a WSGI app.

    Lifecycle: NOT_LISTENING -> start() -> LISTENING -> stop() or
    KeyboardInterrupt -> STOPPED.
    """

    def __init__(self, app, bundle, host=DEFAULT_HOST, port=DEFAULT_PORT, client_cert_mode='none'):
        self.app = app
        self.bundle = bundle
        self.host = host
        self.client_cert_mode = client_cert_mode
        self.state = ListenerState.NOT_LISTENING
        self._port = port
        self._server = None
        self._serving = threading.Event()
        self._lock = threading.Lock()

    @property
    def port(self):
        """The bound port once listening, otherwise the configured one."""
        if self._server is not None:
            return self._server.port
        return self._port

    @property
    def url(self):
        if self.port == HTTPS_DEFAULT_PORT:
            return "https://localhost"
        return f"https://localhost:{self.port}"

    def _bind(self):
        family = socket.AF_INET6 if ':' in self.host else socket.AF_INET
        try:
            return socket.create_server((self.host, self._port), family=family)
        except OSError as e:
            if e.errno == errno.EADDRINUSE:
                message = s.ERROR_PORT_IN_USE.format(host=self.host, port=self._port)
            elif e.errno in (errno.EACCES, errno.EPERM):
                message = s.ERROR_PORT_PERMISSION.format(host=self.host, port=self._port)
            else:
                message = s.ERROR_BIND_FAILED.format(host=self.host, port=self._port, error=e)
            raise ListenerBindError(message, host=self.host, port=self._port) from e

    def start(self):
        """Build the TLS context, bind the socket and log the startup message."""
        if self.state is not ListenerState.NOT_LISTENING:
            raise RuntimeError(s.ERROR_ALREADY_STARTED)

        context = build_ssl_context(self.bundle, self.client_cert_mode)
        sock = self._bind()
        try:
            # Werkzeug duplicates the descriptor, so our handle is closed either way
            self._server = make_server(
                self.host,
                sock.getsockname()[1],
                self.app,
                threaded=True,
                ssl_context=context,
                fd=sock.fileno(),
            )
        finally:
            sock.close()

        self.state = ListenerState.LISTENING
        logger.info(s.LOG_SERVER_RUNNING.format(url=self.url))
        return self

    def serve_forever(self):
        """Serve until stop() is called or the process is interrupted."""
        if self.state is not ListenerState.LISTENING:
            raise RuntimeError(f"Cannot serve from state '{self.state.value}'")
        self._serving.set()
        try:
            # Werkzeug swallows KeyboardInterrupt here and closes the socket
            self._server.serve_forever()
        finally:
            self._mark_stopped()

    def stop(self):
        """Stop serving and close the socket. Safe to call more than once."""
        with self._lock:
            if self.state is not ListenerState.LISTENING:
                return
            logger.info(s.LOG_SERVER_STOPPING.format(url=self.url))
        if self._serving.is_set():
            self._server.shutdown()
        else:
            self._server.server_close()
        self._mark_stopped()

    def _mark_stopped(self):
        with self._lock:
            if self.state is ListenerState.STOPPED:
                return
            self.state = ListenerState.STOPPED
        logger.info(s.LOG_SERVER_STOPPED)
