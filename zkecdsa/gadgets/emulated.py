"""
Emulated (non-native) field elements
====================================

P-256 values do not fit in the BN254 scalar field (r ≈ 2^254 < 2^256), so
they enter the constraint system as four 64-bit limbs, least significant
first:

    value = limb_0 + limb_1·2^64 + limb_2·2^128 + limb_3·2^192

Native BN254 scalars (the key commitment) take a single wire.
"""

from zkecdsa.field import CURVE_ORDER

LIMB_BITS = 64
NUM_LIMBS = 4
LIMB_MASK = (1 << LIMB_BITS) - 1

P256_P = 0xffffffff00000001000000000000000000000000ffffffffffffffffffffffff
P256_N = 0xffffffff00000000ffffffffffffffffbce6faada7179e84f3b9cac2fc632551


class ElementKind:
    """Range rules and wire layout of one kind of circuit value.

    Attributes:
        name: short label used in error messages
        modulus: exclusive upper bound of a valid value
        nonzero: zero is rejected (ECDSA r and s)
        num_limbs: wires per value (1 for native scalars)
    """

    def __init__(self, name, modulus, nonzero=False, num_limbs=NUM_LIMBS):
        self.name = name
        self.modulus = modulus
        self.nonzero = nonzero
        self.num_limbs = num_limbs

    @property
    def byte_capacity(self):
        return ((self.modulus - 1).bit_length() + 7) // 8

    def check(self, value):
        """Raise ValueError when ``value`` is outside the element's range."""
        if value < 0 or value >= self.modulus:
            raise ValueError("value is not below the {} modulus".format(self.name))
        if self.nonzero and value == 0:
            raise ValueError("value must be non-zero")

    def wire_names(self, field_name):
        if self.num_limbs == 1:
            return [field_name]
        return ["{}[{}]".format(field_name, i) for i in range(self.num_limbs)]

    def to_wires(self, value):
        if self.num_limbs == 1:
            return [value]
        return split_limbs(value)

    def from_wires(self, wires):
        if self.num_limbs == 1:
            (value,) = wires
            return int(value)
        return join_limbs(wires)

    def __repr__(self):
        return "ElementKind({})".format(self.name)


P256_FP = ElementKind("P-256 base field", P256_P)
P256_FR = ElementKind("P-256 scalar field", P256_N, nonzero=True)
UINT256 = ElementKind("uint256", 1 << 256)
BN254_SCALAR = ElementKind("BN254 scalar field", CURVE_ORDER, num_limbs=1)


def split_limbs(value, num_limbs=NUM_LIMBS):
    """int → [limb_0, ..., limb_{k-1}], little-endian 64-bit limbs."""
    if value < 0 or value >> (LIMB_BITS * num_limbs):
        raise ValueError("value does not fit in {} limbs".format(num_limbs))
    return [(value >> (LIMB_BITS * i)) & LIMB_MASK for i in range(num_limbs)]


def join_limbs(limbs):
    value = 0
    for i, limb in enumerate(limbs):
        value += int(limb) << (LIMB_BITS * i)
    return value


def limb_words(limbs, limbs_per_word=2):
    """Pack limb wires into wider words as linear combinations.

    Used to absorb a 256-bit value into a native hash as two 128-bit
    halves (low half first). Costs no constraints.
    """
    words = []
    for start in range(0, len(limbs), limbs_per_word):
        word = 0
        for j, limb in enumerate(limbs[start:start + limbs_per_word]):
            word = limb * (1 << (LIMB_BITS * j)) + word
        words.append(word)
    return words
