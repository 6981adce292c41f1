"""
Core cryptographic utilities.

Hashing provides payload fingerprints; signatures provides the
asymmetric sign/verify primitives used by the protocol.
"""
from .hashing import (
    sha256,
    to_hex,
    fingerprint_bytes,
    transaction_fingerprint,
)
from .signatures import (
    DEFAULT_ALGORITHM,
    PrivateKey,
    PublicKey,
    SignatureAlgorithm,
    decode_signature,
    encode_signature,
    load_private_key,
    load_public_key,
    resolve_algorithm,
    sign,
    verify,
)

__all__ = [
    "sha256",
    "to_hex",
    "fingerprint_bytes",
    "transaction_fingerprint",
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
