"""
Relation tests
==============

Field partitions of both variants, deterministic compilation and the
predicates exercised through the solver (no setup needed).
"""

import pytest

from zkecdsa.circuit import (
    COMMITTED,
    PLAIN,
    FieldSpec,
    KeyCommitment,
    Relation,
    SignatureVerify,
    relation_for,
)
from zkecdsa.errors import CompileError, ConfigError
from zkecdsa.gadgets.emulated import UINT256
from zkecdsa.gadgets.mimc import ROUNDS
from zkecdsa.groth16.constraint_system import Witness, compile
from zkecdsa.groth16.errors import UnsatisfiedConstraint


def solve(relation, fields):
    r1cs = compile(relation.define)
    witness = Witness.from_assignment(r1cs.public_names, r1cs.secret_names,
                                      relation.assignment(fields))
    return r1cs.solve(witness)


class TestPartition:
    def test_plain(self):
        assert PLAIN.public_names == ["msgHash", "r", "s", "pubX", "pubY"]
        assert PLAIN.private_fields == []

    def test_committed(self):
        assert COMMITTED.public_names == ["msgHash", "r", "s", "pubCom"]
        assert [f.name for f in COMMITTED.private_fields] == ["pubX", "pubY", "nonce"]

    def test_shared_pool(self):
        # pubX and pubY are read by both predicates but declared once
        assert COMMITTED.field_names.count("pubX") == 1

    def test_relation_for(self):
        assert relation_for("plain") is PLAIN
        assert relation_for("committed") is COMMITTED

    def test_relation_for_unknown(self):
        with pytest.raises(ConfigError):
            relation_for("groth")

    def test_kind_conflict(self):
        class Other:
            fields = (FieldSpec("r", UINT256),)

            def define(self, cs, pool):
                pass

        with pytest.raises(CompileError):
            Relation("broken", [SignatureVerify(), Other()], public=("r",))

    def test_unknown_public_field(self):
        with pytest.raises(CompileError):
            Relation("broken", [KeyCommitment()], public=("msgHash",))


class TestCompile:
    def test_plain_layout(self):
        r1cs = compile(PLAIN.define)
        # 5 fields × 4 limbs
        assert r1cs.num_public == 20
        assert r1cs.secret_names == []
        assert r1cs.public_names[:4] == ["msgHash[0]", "msgHash[1]", "msgHash[2]", "msgHash[3]"]
        # 20 bindings + signature check
        assert r1cs.num_constraints == 21

    def test_committed_layout(self):
        r1cs = compile(COMMITTED.define)
        assert r1cs.num_public == 13
        assert r1cs.public_names[-1] == "pubCom"
        assert len(r1cs.secret_names) == 12
        # bindings + signature + 6 absorbed words × ROUNDS × 3 + commitment
        assert r1cs.num_constraints == 13 + 1 + 6 * ROUNDS * 3 + 1

    @pytest.mark.parametrize("relation", [PLAIN, COMMITTED], ids=["plain", "committed"])
    def test_deterministic(self, relation):
        a = compile(relation.define)
        b = compile(relation.define)
        assert a.num_constraints == b.num_constraints
        assert a.digest == b.digest


class TestPredicates:
    def test_signature_accepts(self, plain_fields):
        wires = solve(PLAIN, plain_fields)
        assert wires[0] == 1

    def test_signature_rejects_other_message(self, plain_fields):
        fields = dict(plain_fields, msgHash=plain_fields["msgHash"] ^ 1)
        with pytest.raises(UnsatisfiedConstraint) as exc:
            solve(PLAIN, fields)
        assert exc.value.label == "ecdsa signature"

    def test_commitment_accepts(self, committed_fields):
        solve(COMMITTED, committed_fields)

    def test_commitment_binding(self, committed_fields):
        fields = dict(committed_fields, pubCom=committed_fields["pubCom"] ^ 1)
        with pytest.raises(UnsatisfiedConstraint) as exc:
            solve(COMMITTED, fields)
        assert exc.value.label == "key commitment"

    def test_commitment_depends_on_nonce(self, committed_fields):
        fields = dict(committed_fields, nonce=committed_fields["nonce"] + 1)
        with pytest.raises(UnsatisfiedConstraint):
            solve(COMMITTED, fields)

    def test_assignment_limbs(self, plain_fields):
        assignment = PLAIN.assignment(plain_fields)
        r = plain_fields["r"]
        assert assignment["r[0]"] == r & (2 ** 64 - 1)
        assert assignment["r[3]"] == r >> 192


class TestPublicChecks:
    def test_public_values(self, plain_fields):
        assert PLAIN.public_values(PLAIN.assignment(plain_fields)) == plain_fields

    def test_valid_signature(self, plain_fields):
        assert PLAIN.failed_checks(plain_fields) == []

    def test_forged_signature(self, plain_fields):
        forged = dict(plain_fields, msgHash=1, r=12345, s=67890)
        assert PLAIN.failed_checks(forged) == ["ecdsa signature"]

    def test_private_fields_are_not_rechecked(self, committed_fields):
        # the key is private here, so only the circuit vouches for the signature
        forged = dict(committed_fields, r=12345)
        assert COMMITTED.failed_checks(forged) == []
