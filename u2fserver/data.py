# Copyright (c) 2018 Yubico AB
# All rights reserved.
#
#   Redistribution and use in source and binary forms, with or
#   without modification, are permitted provided that the following
#   conditions are met:
#
#    1. Redistributions of source code must retain the above copyright
#       notice, this list of conditions and the following disclaimer.
#    2. Redistributions in binary form must reproduce the above
#       copyright notice, this list of conditions and the following
#       disclaimer in the documentation and/or other materials provided
#       with the distribution.
#
# THIS SOFTWARE IS PROVIDED BY THE COPYRIGHT HOLDERS AND CONTRIBUTORS
# "AS IS" AND ANY EXPRESS OR IMPLIED WARRANTIES, INCLUDING, BUT NOT
# LIMITED TO, THE IMPLIED WARRANTIES OF MERCHANTABILITY AND FITNESS
# FOR A PARTICULAR PURPOSE ARE DISCLAIMED. IN NO EVENT SHALL THE
# COPYRIGHT HOLDER OR CONTRIBUTORS BE LIABLE FOR ANY DIRECT, INDIRECT,
# INCIDENTAL, SPECIAL, EXEMPLARY, OR CONSEQUENTIAL DAMAGES (INCLUDING,
# BUT NOT LIMITED TO, PROCUREMENT OF SUBSTITUTE GOODS OR SERVICES;
# LOSS OF USE, DATA, OR PROFITS; OR BUSINESS INTERRUPTION) HOWEVER
# CAUSED AND ON ANY THEORY OF LIABILITY, WHETHER IN CONTRACT, STRICT
# LIABILITY, OR TORT (INCLUDING NEGLIGENCE OR OTHERWISE) ARISING IN
# ANY WAY OUT OF THE USE OF THIS SOFTWARE, EVEN IF ADVISED OF THE
# POSSIBILITY OF SUCH DAMAGE.

"""The enrolled security key record kept by a U2F relying party."""

from __future__ import annotations

import json
import re

from collections.abc import Mapping
from typing import Any, List, Optional, Union

from cryptography import x509
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from fido2.utils import websafe_decode, websafe_encode

from . import config
from .certificates import load_certificate, load_public_key_info, public_key_info
from .exceptions import FormatError, catch_builtins

KEY_HANDLE = "keyHandle"
PUBLIC_KEY = "publicKey"
ATTESTATION_CERT = "attestationCert"
COUNTER = "counter"

_FIELDS = (KEY_HANDLE, PUBLIC_KEY, ATTESTATION_CERT, COUNTER)

_WEBSAFE_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def _as_bytes(value: Any, name: str) -> bytes:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return bytes(value)
    raise TypeError(f"{name} must be bytes, not {type(value).__name__}")


def _check_counter(value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"counter must be an int, not {type(value).__name__}")
    if value < 0:
        raise ValueError(f"counter must be non-negative, got {value}")
    return value


def _hex_lines(data: bytes, bytes_per_line: int = 16) -> List[str]:
    hex_pairs = [f"{byte:02x}" for byte in data]
    return [
        ":".join(hex_pairs[start : start + bytes_per_line])
        for start in range(0, len(hex_pairs), bytes_per_line)
    ]


def _decode_field(data: Mapping[str, Any], name: str) -> bytes:
    value = data[name]
    if not isinstance(value, str):
        raise FormatError(f"{name} must be a base64url string")
    if not _WEBSAFE_ALPHABET.fullmatch(value) or len(value) % 4 == 1:
        raise FormatError(f"{name} is not valid base64url")
    decoded = websafe_decode(value)
    if websafe_encode(decoded) != value:
        raise FormatError(f"{name} is not canonical base64url")
    return decoded


class Device:
    """A security key registered to an account.

    Identity is the key handle, the credential public key and the public key
    info of the attestation certificate. Two devices with equal identity but
    different counters compare (and hash) equal.

    :param key_handle: Opaque key handle returned by the authenticator.
    :param public_key: Raw uncompressed EC point of the credential key.
    :param attestation_certificate: The attestation certificate presented at
        registration. Only its SubjectPublicKeyInfo is kept.
    :param counter: The last observed signature counter.
    """

    def __init__(
        self,
        key_handle: bytes,
        public_key: bytes,
        attestation_certificate: x509.Certificate,
        counter: int,
    ):
        self._key_handle = _as_bytes(key_handle, "key_handle")
        self._public_key = _as_bytes(public_key, "public_key")
        self._attestation_identity = public_key_info(attestation_certificate)
        self._counter = _check_counter(counter)

    @classmethod
    def _restore(
        cls,
        key_handle: bytes,
        public_key: bytes,
        attestation_identity: bytes,
        counter: int,
    ) -> Device:
        device = cls.__new__(cls)
        device._key_handle = key_handle
        device._public_key = public_key
        device._attestation_identity = attestation_identity
        device._counter = _check_counter(counter)
        return device

    @property
    def key_handle(self) -> bytes:
        return self._key_handle

    @property
    def public_key(self) -> bytes:
        return self._public_key

    @property
    def attestation_identity(self) -> bytes:
        """DER SubjectPublicKeyInfo of the attestation certificate."""
        return self._attestation_identity

    @property
    def counter(self) -> int:
        return self._counter

    def set_counter(self, counter: int) -> None:
        """Record the signature counter reported by the latest authentication.

        No monotonicity check is made here. Callers must serialize the
        read-compare-update of the counter for a given device (for instance in
        a storage transaction), otherwise concurrent authentications may
        accept a stale counter and defeat clone detection.
        """
        self._counter = _check_counter(counter)

    def attestation_certificate(self) -> x509.Certificate:
        """Decode the stored attestation bytes as an X.509 certificate.

        Devices created from a certificate store only its public key info, so
        for those this always raises.

        :raises DecodeError: if the stored bytes are not a DER certificate.
        """
        return load_certificate(self._attestation_identity)

    def attestation_public_key(self) -> PublicKeyTypes:
        """Decode the stored attestation public key info.

        :raises DecodeError: if the stored bytes are not a valid
            SubjectPublicKeyInfo.
        """
        return load_public_key_info(self._attestation_identity)

    def _identity(self) -> tuple[bytes, bytes, bytes]:
        return self._key_handle, self._public_key, self._attestation_identity

    def __eq__(self, other):
        if not isinstance(other, Device):
            return NotImplemented
        return self._identity() == other._identity()

    def __hash__(self):
        return hash(self._identity())

    def __str__(self):
        lines = [
            f"public_key: {websafe_encode(self._public_key)}",
            f"key_handle: {websafe_encode(self._key_handle)}",
            f"counter: {self._counter}",
            "attestation certificate:",
        ]
        lines.extend(_hex_lines(self._attestation_identity))
        return "\n".join(lines)

    def __repr__(self):
        return (
            f"{type(self).__name__}(key_handle={websafe_encode(self._key_handle)!r}, "
            f"counter={self._counter})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON friendly mapping, binary fields as base64url."""
        return {
            KEY_HANDLE: websafe_encode(self._key_handle),
            PUBLIC_KEY: websafe_encode(self._public_key),
            ATTESTATION_CERT: websafe_encode(self._attestation_identity),
            COUNTER: self._counter,
        }

    @classmethod
    @catch_builtins(error=FormatError)
    def from_dict(
        cls, data: Mapping[str, Any], *, strict: Optional[bool] = None
    ) -> Device:
        """Restore a device from the mapping produced by :meth:`to_dict`.

        :param strict: Reject unknown keys. Defaults to the
            ``U2FSERVER_STRICT_JSON`` setting.
        :raises FormatError: if the mapping is malformed or incomplete.
        """
        if not isinstance(data, Mapping):
            raise FormatError(
                f"Device record must be an object, not {type(data).__name__}"
            )

        missing = [name for name in _FIELDS if name not in data]
        if missing:
            raise FormatError(f"Device record missing fields: {', '.join(missing)}")

        if strict is None:
            strict = config.settings.strict_json
        if strict:
            unknown = sorted(str(name) for name in data if name not in _FIELDS)
            if unknown:
                raise FormatError(
                    f"Device record has unknown fields: {', '.join(unknown)}"
                )

        return cls._restore(
            _decode_field(data, KEY_HANDLE),
            _decode_field(data, PUBLIC_KEY),
            _decode_field(data, ATTESTATION_CERT),
            data[COUNTER],
        )

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    @catch_builtins(error=FormatError)
    def from_json(
        cls, data: Union[str, bytes], *, strict: Optional[bool] = None
    ) -> Device:
        """Restore a device from the output of :meth:`to_json`.

        :raises FormatError: if the text is not a well formed device record.
        """
        return cls.from_dict(json.loads(data), strict=strict)
