"""
ECDSA over P-256
================

Native P-256 verification (``cryptography``) and the
``ecdsa_p256_verify`` gadget built on it.

The gadget receives the limbs of (msgHash, r, s, pubX, pubY) and produces
one wire, constrained to 1. The solver fills that wire by running the
native verification below, so proving fails on the first unsatisfied
constraint whenever the signature, the key or the message hash is wrong.
The curve arithmetic itself is not expressed as constraints: a prover
running a modified solver can satisfy the circuit without a signature.
Where every input is public the verifier repeats the native check (see
``Relation.failed_checks``).
"""

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.utils import Prehashed, encode_dss_signature

from zkecdsa.gadgets.emulated import NUM_LIMBS, P256_N, P256_P, join_limbs
from zkecdsa.groth16.constraint_system import register_hint

P = P256_P
N = P256_N

HASH_BYTES = 32

HINT_NAME = "ecdsa_p256_verify"

_ALGORITHM = ec.ECDSA(Prehashed(hashes.SHA256()))


def public_key(x, y):
    """Affine coordinates → P-256 public key, or None when off the curve."""
    if not (0 <= x < P and 0 <= y < P):
        return None
    try:
        return ec.EllipticCurvePublicNumbers(x, y, ec.SECP256R1()).public_key()
    except ValueError:
        return None


def verify(msg_hash, r, s, x, y):
    """ECDSA verification of (r, s) over the 256-bit hash ``msg_hash``.

    The hash is taken as a SHA-256 digest (big-endian) and reduced mod N by
    the verification equation.
    """
    if not (1 <= r < N and 1 <= s < N):
        return False
    if not 0 <= msg_hash < 1 << (8 * HASH_BYTES):
        return False
    key = public_key(x, y)
    if key is None:
        return False
    try:
        key.verify(encode_dss_signature(r, s), msg_hash.to_bytes(HASH_BYTES, "big"), _ALGORITHM)
    except InvalidSignature:
        return False
    return True


@register_hint(HINT_NAME)
def verify_hint(inputs):
    """[5 × 4 limbs] → [1] if the signature verifies else [0]."""
    if len(inputs) != 5 * NUM_LIMBS:
        raise ValueError("{} expects {} limbs".format(HINT_NAME, 5 * NUM_LIMBS))
    values = [join_limbs(inputs[i:i + NUM_LIMBS]) for i in range(0, len(inputs), NUM_LIMBS)]
    return [1 if verify(*values) else 0]


def assert_signature(cs, msg_hash, r, s, pub_x, pub_y):
    """Constrain ECDSA-Verify(pub, msgHash, (r, s)) = true.

    Every argument is the limb list of one value.
    """
    (ok,) = cs.hint(HINT_NAME, list(msg_hash) + list(r) + list(s) + list(pub_x) + list(pub_y))
    cs.assert_equal(ok, 1, label="ecdsa signature")
