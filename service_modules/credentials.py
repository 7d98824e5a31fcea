import logging
from dataclasses import dataclass
from typing import Optional
from .config import s
from .errors import StartupCredentialError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CredentialBundle:
    """Raw PEM bytes handed to the TLS layer. Never mutated after startup."""
    private_key: bytes
    certificate: bytes
    ca_certificate: Optional[bytes] = None


def _read_file(path, kind):
    try:
        with open(path, 'rb') as f:
            data = f.read()
    except OSError as e:
        raise StartupCredentialError(
            s.ERROR_CREDENTIAL_READ.format(kind=kind, path=path, error=e.strerror or e),
            path=path) from e
    logger.info(s.LOG_CREDENTIAL_READ.format(kind=kind, path=path, size=len(data)))
    return data


def load_credentials(key_file, cert_file, ca_file=None, ca_required=False):
    """
    Read the private key, certificate and optional CA certificate from disk.

    The contents are not parsed here; the TLS layer rejects malformed material
    when the SSL context is built.

    Args:
        key_file (str): Path to the PEM private key.
        cert_file (str): Path to the PEM server certificate.
        ca_file (str | None): Path to the PEM CA certificate, or None.
        ca_required (bool): Treat a missing CA file as fatal.

    Returns:
        CredentialBundle: The loaded bytes.

    Raises:
        StartupCredentialError: If a required file cannot be read.
    """
    private_key = _read_file(key_file, 'private key')
    certificate = _read_file(cert_file, 'certificate')

    ca_certificate = None
    if ca_file:
        try:
            ca_certificate = _read_file(ca_file, 'CA certificate')
        except StartupCredentialError as e:
            if ca_required or not isinstance(e.__cause__, FileNotFoundError):
                raise
            logger.warning(s.WARN_CA_NOT_FOUND.format(path=ca_file))

    return CredentialBundle(
        private_key=private_key,
        certificate=certificate,
        ca_certificate=ca_certificate,
    )
