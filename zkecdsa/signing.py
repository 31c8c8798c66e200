"""
Signing helper
==============

Produces witness fields for either relation from a P-256 key and a
message: ECDSA(SHA-256) through ``cryptography``, the DER signature split
into (r, s), msgHash = sha256(message).

Example:
    >>> key = generate_key()
    >>> fields = sign_and_build_fields(key, b"hello", variant="committed")
    >>> WitnessCodec(COMMITTED).encode(fields)
    {'msgHash': '2cf2...', 'r': ..., 'pubCom': ..., 'nonce': ...}
"""

import hashlib
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils

from zkecdsa.errors import ConfigError
from zkecdsa.gadgets.mimc import commit_public_key


def generate_key():
    return ec.generate_private_key(ec.SECP256R1())


def key_commitment(x, y, nonce):
    return commit_public_key(x, y, nonce)


def sign_and_build_fields(private_key, message, variant="plain", nonce=None):
    """Sign ``message`` and return the witness fields (name → int).

    ``committed`` adds the blinding nonce (random below 2^256 unless given)
    and the commitment to the public key.
    """
    if variant not in ("plain", "committed"):
        raise ConfigError("unknown circuit variant {!r}".format(variant))
    if isinstance(message, str):
        message = message.encode("utf-8")

    signature = private_key.sign(message, ec.ECDSA(hashes.SHA256()))
    r, s = utils.decode_dss_signature(signature)
    numbers = private_key.public_key().public_numbers()

    fields = {
        "msgHash": int.from_bytes(hashlib.sha256(message).digest(), "big"),
        "r": r,
        "s": s,
        "pubX": numbers.x,
        "pubY": numbers.y,
    }
    if variant == "committed":
        if nonce is None:
            nonce = secrets.randbits(256)
        fields["nonce"] = nonce
        fields["pubCom"] = key_commitment(numbers.x, numbers.y, nonce)
    return fields
