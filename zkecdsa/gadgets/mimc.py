"""
MiMC-5 over the BN254 scalar field
==================================

Block cipher E_k(m): 110 rounds of m ← (m + k + c_i)^5, output m + k.
Hash (Miyaguchi–Preneel): h_0 = 0, h_{i+1} = h_i + E_{h_i}(x_i) + x_i.

Round constants come from a sha256 chain seeded with ``SEED``. Each round
costs 3 multiplication constraints in-circuit (t², t⁴, t⁵).

The key commitment hashes six 128-bit words, low half first:

    MiMC(pubX_lo, pubX_hi, pubY_lo, pubY_hi, nonce_lo, nonce_hi)
"""

import hashlib

from zkecdsa.field import CURVE_ORDER
from zkecdsa.gadgets.emulated import limb_words

ROUNDS = 110
SEED = b"zkecdsa.mimc5.bn254"


def round_constants(seed=SEED, rounds=ROUNDS):
    constants = []
    h = hashlib.sha256(seed).digest()
    for _ in range(rounds):
        h = hashlib.sha256(h).digest()
        constants.append(int.from_bytes(h, "big") % CURVE_ORDER)
    return constants


ROUND_CONSTANTS = round_constants()


# ─── Native ───

def encrypt(key, message):
    m = message % CURVE_ORDER
    for c in ROUND_CONSTANTS:
        m = pow((m + key + c) % CURVE_ORDER, 5, CURVE_ORDER)
    return (m + key) % CURVE_ORDER


def mimc_hash(values):
    h = 0
    for x in values:
        x = x % CURVE_ORDER
        h = (h + encrypt(h, x) + x) % CURVE_ORDER
    return h


def _halves(value):
    return [value & ((1 << 128) - 1), value >> 128]


def commit_public_key(x, y, nonce):
    """Commitment to the public key (x, y) blinded by ``nonce`` (< 2^256)."""
    return mimc_hash(_halves(x) + _halves(y) + _halves(nonce))


# ─── In-circuit ───

def encrypt_gadget(cs, key, message):
    m = message
    for c in ROUND_CONSTANTS:
        t = m + key + c
        t2 = cs.mul(t, t)
        t4 = cs.mul(t2, t2)
        m = cs.mul(t4, t)
    return m + key


def hash_gadget(cs, values):
    h = 0
    for x in values:
        h = h + encrypt_gadget(cs, h, x) + x
    return h


def commitment_gadget(cs, x_limbs, y_limbs, nonce_limbs):
    """Linear combination equal to ``commit_public_key`` of the limb values."""
    words = limb_words(x_limbs) + limb_words(y_limbs) + limb_words(nonce_limbs)
    return hash_gadget(cs, words)
