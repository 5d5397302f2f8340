from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.x509.oid import NameOID


def _make_certificate(
    private_key: ec.EllipticCurvePrivateKey, common_name: str
) -> x509.Certificate:
    name = x509.Name([x509.NameAttribute(NameOID.COMMON_NAME, common_name)])
    now = datetime.now(timezone.utc)
    return (
        x509.CertificateBuilder()
        .subject_name(name)
        .issuer_name(name)
        .public_key(private_key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(now - timedelta(days=1))
        .not_valid_after(now + timedelta(days=365))
        .add_extension(x509.BasicConstraints(ca=False, path_length=None), critical=True)
        .sign(private_key, hashes.SHA256())
    )


@pytest.fixture()
def certificate_factory() -> Callable[[str], x509.Certificate]:
    """Return a function creating fresh self-signed P-256 attestation certs."""

    def factory(common_name: str = "U2F EE Serial 1") -> x509.Certificate:
        return _make_certificate(ec.generate_private_key(ec.SECP256R1()), common_name)

    return factory


@pytest.fixture()
def attestation_certificate(certificate_factory) -> x509.Certificate:
    return certificate_factory()
