import datetime
import ipaddress
import logging
import threading
from types import SimpleNamespace

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import ExtendedKeyUsageOID, NameOID

from service_modules import strings_en
from service_modules.credentials import load_credentials
from service_modules.flask_app import create_app
from service_modules.server import TLSListener

logger = logging.getLogger(__name__)

GREETING = strings_en.GREETING


# --- Certificate helpers ---
def _new_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


def _key_pem(key):
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )


def _cert_pem(cert):
    return cert.public_bytes(serialization.Encoding.PEM)


def _builder(subject, issuer, public_key):
    now = datetime.datetime.now(datetime.timezone.utc)
    return (x509.CertificateBuilder()
            .subject_name(subject)
            .issuer_name(issuer)
            .public_key(public_key)
            .serial_number(x509.random_serial_number())
            .not_valid_before(now - datetime.timedelta(minutes=5))
            .not_valid_after(now + datetime.timedelta(days=30))
            .add_extension(x509.SubjectKeyIdentifier.from_public_key(public_key), critical=False))


def _name(common_name):
    return x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])


def _make_ca():
    key = _new_key()
    name = _name("Test Root CA")
    cert = (_builder(name, name, key.public_key())
            .add_extension(x509.BasicConstraints(ca=True, path_length=None), critical=True)
            .add_extension(x509.KeyUsage(
                digital_signature=True, content_commitment=False, key_encipherment=False,
                data_encipherment=False, key_agreement=False, key_cert_sign=True,
                crl_sign=True, encipher_only=False, decipher_only=False), critical=True)
            .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(key.public_key()), critical=False)
            .sign(key, hashes.SHA256()))
    return key, cert


def _make_leaf(ca_key, ca_cert, common_name, usage):
    key = _new_key()
    builder = (_builder(_name(common_name), ca_cert.subject, key.public_key())
               .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
               .add_extension(x509.KeyUsage(
                   digital_signature=True, content_commitment=False, key_encipherment=True,
                   data_encipherment=False, key_agreement=False, key_cert_sign=False,
                   crl_sign=False, encipher_only=False, decipher_only=False), critical=True)
               .add_extension(x509.ExtendedKeyUsage([usage]), critical=False)
               .add_extension(x509.AuthorityKeyIdentifier.from_issuer_public_key(ca_key.public_key()), critical=False))
    if usage == ExtendedKeyUsageOID.SERVER_AUTH:
        builder = builder.add_extension(x509.SubjectAlternativeName([
            x509.DNSName("localhost"),
            x509.IPAddress(ipaddress.ip_address("127.0.0.1")),
        ]), critical=False)
    cert = builder.sign(ca_key, hashes.SHA256())
    return key, cert


@pytest.fixture(scope="session")
def tls_material(tmp_path_factory):
    """CA, server and client credentials written as PEM files in one directory."""
    directory = tmp_path_factory.mktemp("certs")
    ca_key, ca_cert = _make_ca()
    server_key, server_cert = _make_leaf(ca_key, ca_cert, "localhost", ExtendedKeyUsageOID.SERVER_AUTH)
    client_key, client_cert = _make_leaf(ca_key, ca_cert, "test-client", ExtendedKeyUsageOID.CLIENT_AUTH)
    other_key = _new_key()

    files = {
        'server.key': _key_pem(server_key),
        'server.crt': _cert_pem(server_cert),
        'ca.crt': _cert_pem(ca_cert),
        'client.key': _key_pem(client_key),
        'client.crt': _cert_pem(client_cert),
        'other.key': _key_pem(other_key),
    }
    for filename, data in files.items():
        (directory / filename).write_bytes(data)
    logger.info(f"Generated test TLS material in {directory}")

    return SimpleNamespace(
        directory=directory,
        key_file=str(directory / 'server.key'),
        cert_file=str(directory / 'server.crt'),
        ca_file=str(directory / 'ca.crt'),
        client_key_file=str(directory / 'client.key'),
        client_cert_file=str(directory / 'client.crt'),
        other_key_file=str(directory / 'other.key'),
    )


@pytest.fixture
def bundle(tls_material):
    return load_credentials(tls_material.key_file, tls_material.cert_file, tls_material.ca_file)


@pytest.fixture
def serve():
    """Start TLSListener instances on 127.0.0.1 in background threads and stop them afterwards."""
    started = []

    def _serve(bundle, greeting=GREETING, port=0, client_cert_mode='none'):
        listener = TLSListener(create_app(greeting), bundle, host='127.0.0.1', port=port,
                               client_cert_mode=client_cert_mode)
        listener.start()
        thread = threading.Thread(target=listener.serve_forever, daemon=True)
        thread.start()
        started.append((listener, thread))
        return listener

    yield _serve

    for listener, thread in started:
        listener.stop()
        thread.join(timeout=5)
