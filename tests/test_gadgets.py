"""
Gadget tests
============

Native P-256 ECDSA against signatures from ``cryptography``, the limb
layout, and MiMC natively versus in-circuit.
"""

import hashlib

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, utils

from zkecdsa.field import CURVE_ORDER
from zkecdsa.gadgets import ecdsa, mimc
from zkecdsa.gadgets.emulated import (
    P256_FR,
    UINT256,
    BN254_SCALAR,
    join_limbs,
    limb_words,
    split_limbs,
)
from zkecdsa.groth16.constraint_system import Witness, compile
from zkecdsa.groth16.errors import UnsatisfiedConstraint
from zkecdsa.signing import key_commitment


class TestLimbs:
    def test_split_join(self):
        value = 0x0123456789abcdef_fedcba9876543210_0011223344556677_8899aabbccddeeff
        limbs = split_limbs(value)
        assert limbs[0] == 0x8899aabbccddeeff
        assert limbs[3] == 0x0123456789abcdef
        assert join_limbs(limbs) == value

    def test_too_wide(self):
        with pytest.raises(ValueError):
            split_limbs(1 << 256)

    def test_words(self):
        value = (3 << 192) | (2 << 128) | (1 << 64) | 7
        assert limb_words(split_limbs(value)) == [(1 << 64) | 7, (3 << 64) | 2]

    def test_wire_names(self):
        assert UINT256.wire_names("nonce") == ["nonce[0]", "nonce[1]", "nonce[2]", "nonce[3]"]
        assert BN254_SCALAR.wire_names("pubCom") == ["pubCom"]

    def test_byte_capacity(self):
        assert UINT256.byte_capacity == 32
        assert P256_FR.byte_capacity == 32
        assert BN254_SCALAR.byte_capacity == 32


class TestNativeEcdsa:
    def test_public_key(self, private_key):
        numbers = private_key.public_key().public_numbers()
        key = ecdsa.public_key(numbers.x, numbers.y)
        assert key.public_numbers() == numbers

    def test_off_curve_key(self, plain_fields):
        assert ecdsa.public_key(plain_fields["pubX"], plain_fields["pubY"] ^ 1) is None

    def test_key_coordinate_out_of_range(self, plain_fields):
        f = plain_fields
        assert ecdsa.public_key(f["pubX"] + ecdsa.P, f["pubY"]) is None
        assert not ecdsa.verify(f["msgHash"], f["r"], f["s"], f["pubX"] + ecdsa.P, f["pubY"])

    def test_verify(self, plain_fields):
        f = plain_fields
        assert ecdsa.verify(f["msgHash"], f["r"], f["s"], f["pubX"], f["pubY"])

    def test_verify_fresh_signature(self):
        key = ec.generate_private_key(ec.SECP256R1())
        msg = b"another message"
        r, s = utils.decode_dss_signature(key.sign(msg, ec.ECDSA(hashes.SHA256())))
        pub = key.public_key().public_numbers()
        e = int.from_bytes(hashlib.sha256(msg).digest(), "big")
        assert ecdsa.verify(e, r, s, pub.x, pub.y)

    @pytest.mark.parametrize("field", ["msgHash", "r", "s", "pubX", "pubY"])
    def test_reject_modified(self, plain_fields, field):
        f = dict(plain_fields)
        f[field] = f[field] ^ (1 << 17)
        assert not ecdsa.verify(f["msgHash"], f["r"], f["s"], f["pubX"], f["pubY"])

    def test_reject_zero_r(self, plain_fields):
        f = plain_fields
        assert not ecdsa.verify(f["msgHash"], 0, f["s"], f["pubX"], f["pubY"])

    def test_reject_wide_hash(self, plain_fields):
        f = plain_fields
        assert not ecdsa.verify(f["msgHash"] + (1 << 256), f["r"], f["s"], f["pubX"], f["pubY"])

    def test_hint_output(self, plain_fields):
        f = plain_fields
        limbs = []
        for name in ("msgHash", "r", "s", "pubX", "pubY"):
            limbs += split_limbs(f[name])
        assert ecdsa.verify_hint(limbs) == [1]
        limbs[0] ^= 1
        assert ecdsa.verify_hint(limbs) == [0]

    def test_hint_arity(self):
        with pytest.raises(ValueError):
            ecdsa.verify_hint([0] * 19)


class TestMimc:
    def test_round_constants(self):
        assert len(mimc.ROUND_CONSTANTS) == mimc.ROUNDS
        assert all(0 <= c < CURVE_ORDER for c in mimc.ROUND_CONSTANTS)
        assert mimc.round_constants() == mimc.ROUND_CONSTANTS

    def test_hash_is_deterministic(self):
        assert mimc.mimc_hash([1, 2, 3]) == mimc.mimc_hash([1, 2, 3])

    def test_hash_is_order_sensitive(self):
        assert mimc.mimc_hash([1, 2]) != mimc.mimc_hash([2, 1])

    def test_commitment_in_field(self):
        com = key_commitment(5, 7, 11)
        assert 0 <= com < CURVE_ORDER
        assert com != key_commitment(5, 7, 12)

    def test_gadget_matches_native(self):
        values = [(1 << 200) + 3, (1 << 255) + 12345, 42]

        def define(cs):
            com = cs.public_input("com")
            limbs = [[cs.secret_input("v{}[{}]".format(i, j)) for j in range(4)]
                     for i in range(3)]
            cs.assert_equal(mimc.commitment_gadget(cs, *limbs), com, label="com")

        r1cs = compile(define)
        assignment = {"com": mimc.commit_public_key(*values)}
        for i, value in enumerate(values):
            for j, limb in enumerate(split_limbs(value)):
                assignment["v{}[{}]".format(i, j)] = limb
        witness = Witness.from_assignment(r1cs.public_names, r1cs.secret_names, assignment)
        r1cs.solve(witness)

        assignment["com"] = (assignment["com"] + 1) % CURVE_ORDER
        witness = Witness.from_assignment(r1cs.public_names, r1cs.secret_names, assignment)
        with pytest.raises(UnsatisfiedConstraint):
            r1cs.solve(witness)

    def test_three_constraints_per_round(self):
        def define(cs):
            x = cs.secret_input("x")
            mimc.hash_gadget(cs, [x])
            cs.assert_equal(x, x)

        assert compile(define).num_constraints == 3 * mimc.ROUNDS + 1
