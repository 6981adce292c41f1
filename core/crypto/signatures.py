"""
Signature Primitives
Asymmetric signing and verification over canonical payload bytes.

This module provides:
- A fixed set of named signature algorithms (algorithm + hash pair)
- PEM key loading with algorithm/key-type checks
- sign / verify over raw bytes
- Base64 transport encoding of signatures

Security Notes:
- verify() always goes through the library's verify routine; it never
  re-signs and compares bytes.
- The algorithm is configuration, fixed per deployment. It is never read
  from the payload being verified.
"""
from __future__ import annotations

import base64
import binascii
from enum import Enum
from typing import Union

from cryptography.exceptions import InvalidSignature, UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa

from core.schemas.errors import (
    InvalidKeyException,
    MalformedInputException,
    UnsupportedAlgorithmException,
)


class SignatureAlgorithm(str, Enum):
    """Supported signature schemes."""

    RSA_PKCS1V15_SHA256 = "rsa-pkcs1v15-sha256"
    RSA_PSS_SHA256 = "rsa-pss-sha256"
    ECDSA_SHA256 = "ecdsa-sha256"
    ED25519 = "ed25519"


# What a plain RSA PEM signed with SHA-256 produces by default
DEFAULT_ALGORITHM = SignatureAlgorithm.RSA_PKCS1V15_SHA256

PrivateKey = Union[rsa.RSAPrivateKey, ec.EllipticCurvePrivateKey, ed25519.Ed25519PrivateKey]
PublicKey = Union[rsa.RSAPublicKey, ec.EllipticCurvePublicKey, ed25519.Ed25519PublicKey]
KeyMaterial = Union[bytes, str]

_PRIVATE_KEY_TYPES: dict[SignatureAlgorithm, type] = {
    SignatureAlgorithm.RSA_PKCS1V15_SHA256: rsa.RSAPrivateKey,
    SignatureAlgorithm.RSA_PSS_SHA256: rsa.RSAPrivateKey,
    SignatureAlgorithm.ECDSA_SHA256: ec.EllipticCurvePrivateKey,
    SignatureAlgorithm.ED25519: ed25519.Ed25519PrivateKey,
}

_PUBLIC_KEY_TYPES: dict[SignatureAlgorithm, type] = {
    SignatureAlgorithm.RSA_PKCS1V15_SHA256: rsa.RSAPublicKey,
    SignatureAlgorithm.RSA_PSS_SHA256: rsa.RSAPublicKey,
    SignatureAlgorithm.ECDSA_SHA256: ec.EllipticCurvePublicKey,
    SignatureAlgorithm.ED25519: ed25519.Ed25519PublicKey,
}


def resolve_algorithm(value: SignatureAlgorithm | str) -> SignatureAlgorithm:
    """
    Turn an algorithm name into a SignatureAlgorithm.

    Raises:
        UnsupportedAlgorithmException: If the name is unknown.
    """
    if isinstance(value, SignatureAlgorithm):
        return value
    try:
        return SignatureAlgorithm(value.strip().lower())
    except (ValueError, AttributeError):
        raise UnsupportedAlgorithmException(
            str(value), supported=[a.value for a in SignatureAlgorithm]
        ) from None


def _pem_bytes(material: KeyMaterial) -> bytes:
    if isinstance(material, str):
        return material.encode("utf-8")
    return bytes(material)


def load_private_key(
    material: KeyMaterial | PrivateKey,
    algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
) -> PrivateKey:
    """
    Load an unencrypted PEM private key and check it fits the algorithm.

    Args:
        material: PEM text/bytes, or an already loaded key object.
        algorithm: Signature algorithm the key will be used with.

    Raises:
        InvalidKeyException: If the PEM is malformed, encrypted, or of the
            wrong key type for the algorithm.
    """
    alg = resolve_algorithm(algorithm)
    expected = _PRIVATE_KEY_TYPES[alg]

    if isinstance(material, (bytes, bytearray, str)):
        try:
            key = serialization.load_pem_private_key(_pem_bytes(material), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyException(
                f"Cannot load private key: {e}", algorithm=alg.value
            ) from e
    else:
        key = material

    if not isinstance(key, expected):
        raise InvalidKeyException(
            f"Private key type {type(key).__name__} does not match algorithm {alg.value}",
            algorithm=alg.value,
        )
    return key


def load_public_key(
    material: KeyMaterial | PublicKey,
    algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
) -> PublicKey:
    """
    Load a PEM public key (SubjectPublicKeyInfo or PKCS#1) and check its type.

    Raises:
        InvalidKeyException: If the PEM is malformed or of the wrong key type.
    """
    alg = resolve_algorithm(algorithm)
    expected = _PUBLIC_KEY_TYPES[alg]

    if isinstance(material, (bytes, bytearray, str)):
        try:
            key = serialization.load_pem_public_key(_pem_bytes(material))
        except (ValueError, TypeError, UnsupportedAlgorithm) as e:
            raise InvalidKeyException(
                f"Cannot load public key: {e}", algorithm=alg.value
            ) from e
    else:
        key = material

    if not isinstance(key, expected):
        raise InvalidKeyException(
            f"Public key type {type(key).__name__} does not match algorithm {alg.value}",
            algorithm=alg.value,
        )
    return key


def _pss() -> padding.PSS:
    return padding.PSS(mgf=padding.MGF1(hashes.SHA256()), salt_length=padding.PSS.DIGEST_LENGTH)


def sign(
    payload: bytes,
    private_key: PrivateKey,
    algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
) -> bytes:
    """
    Sign raw payload bytes.

    Args:
        payload: Canonical bytes to sign
        private_key: Key returned by load_private_key()
        algorithm: Signature algorithm

    Returns:
        Raw signature bytes
    """
    alg = resolve_algorithm(algorithm)
    if alg is SignatureAlgorithm.RSA_PKCS1V15_SHA256:
        return private_key.sign(payload, padding.PKCS1v15(), hashes.SHA256())
    if alg is SignatureAlgorithm.RSA_PSS_SHA256:
        return private_key.sign(payload, _pss(), hashes.SHA256())
    if alg is SignatureAlgorithm.ECDSA_SHA256:
        return private_key.sign(payload, ec.ECDSA(hashes.SHA256()))
    return private_key.sign(payload)


def verify(
    payload: bytes,
    signature: bytes,
    public_key: PublicKey,
    algorithm: SignatureAlgorithm | str = DEFAULT_ALGORITHM,
) -> bool:
    """
    Verify a signature over raw payload bytes.

    Returns:
        True if the signature is valid for payload under public_key.
    """
    alg = resolve_algorithm(algorithm)
    try:
        if alg is SignatureAlgorithm.RSA_PKCS1V15_SHA256:
            public_key.verify(signature, payload, padding.PKCS1v15(), hashes.SHA256())
        elif alg is SignatureAlgorithm.RSA_PSS_SHA256:
            public_key.verify(signature, payload, _pss(), hashes.SHA256())
        elif alg is SignatureAlgorithm.ECDSA_SHA256:
            public_key.verify(signature, payload, ec.ECDSA(hashes.SHA256()))
        else:
            public_key.verify(signature, payload)
    except InvalidSignature:
        return False
    return True


def encode_signature(signature: bytes) -> str:
    """Encode raw signature bytes as standard base64 text."""
    return base64.b64encode(signature).decode("ascii")


def decode_signature(token: str) -> bytes:
    """
    Decode a base64 signature token.

    Raises:
        MalformedInputException: If the token is not valid base64.
    """
    try:
        raw = base64.b64decode(token, validate=True)
    except (binascii.Error, ValueError) as e:
        raise MalformedInputException(
            f"Signature is not valid base64: {e}", field_path="signature"
        ) from e
    if not raw:
        raise MalformedInputException("Signature is empty", field_path="signature")
    return raw


__all__ = [
    "DEFAULT_ALGORITHM",
    "PrivateKey",
    "PublicKey",
    "SignatureAlgorithm",
    "decode_signature",
    "encode_signature",
    "load_private_key",
    "load_public_key",
    "resolve_algorithm",
    "sign",
    "verify",
]
