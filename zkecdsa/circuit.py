"""
Relations
=========

A relation is an ordered list of predicates over one shared variable
pool. Each predicate names the fields it reads and their element kind;
the relation decides which fields are public. Two relations ship:

  | variant   | public                  | private            | predicates                      |
  |-----------|-------------------------|--------------------|---------------------------------|
  | plain     | msgHash, r, s, pubX, pubY | none             | SignatureVerify                 |
  | committed | msgHash, r, s, pubCom   | pubX, pubY, nonce  | SignatureVerify, KeyCommitment  |

``plain`` reveals the signer's key. ``committed`` proves that some key
matching the public commitment signed the message, without revealing it.
"""

from zkecdsa.errors import CompileError, ConfigError
from zkecdsa.gadgets import mimc
from zkecdsa.gadgets import ecdsa
from zkecdsa.gadgets.emulated import BN254_SCALAR, P256_FP, P256_FR, UINT256


class FieldSpec:

    def __init__(self, name, kind):
        self.name = name
        self.kind = kind

    def __eq__(self, other):
        return isinstance(other, FieldSpec) and (self.name, self.kind) == (other.name, other.kind)

    def __hash__(self):
        return hash(self.name)

    def __repr__(self):
        return "FieldSpec({!r}, {})".format(self.name, self.kind.name)


MSG_HASH = FieldSpec("msgHash", UINT256)
SIG_R = FieldSpec("r", P256_FR)
SIG_S = FieldSpec("s", P256_FR)
PUB_X = FieldSpec("pubX", P256_FP)
PUB_Y = FieldSpec("pubY", P256_FP)
PUB_COM = FieldSpec("pubCom", BN254_SCALAR)
NONCE = FieldSpec("nonce", UINT256)


# ─── Predicates ───

class SignatureVerify:
    """ECDSA-Verify(pub, msgHash, (r, s)) = true"""

    fields = (MSG_HASH, SIG_R, SIG_S, PUB_X, PUB_Y)
    label = "ecdsa signature"

    def define(self, cs, pool):
        ecdsa.assert_signature(cs, pool["msgHash"], pool["r"], pool["s"], pool["pubX"], pool["pubY"])

    def holds(self, values):
        return ecdsa.verify(values["msgHash"], values["r"], values["s"], values["pubX"], values["pubY"])


class KeyCommitment:
    """pubCom = MiMC(pubX, pubY, nonce)"""

    fields = (PUB_X, PUB_Y, NONCE, PUB_COM)
    label = "key commitment"

    def define(self, cs, pool):
        computed = mimc.commitment_gadget(cs, pool["pubX"], pool["pubY"], pool["nonce"])
        (commitment,) = pool["pubCom"]
        cs.assert_equal(computed, commitment, label="key commitment")

    def holds(self, values):
        return mimc.commit_public_key(values["pubX"], values["pubY"], values["nonce"]) == values["pubCom"]


# ─── Relation ───

class Relation:

    def __init__(self, name, predicates, public):
        self.name = name
        self.predicates = list(predicates)

        pool = {}
        for predicate in self.predicates:
            for field in predicate.fields:
                known = pool.setdefault(field.name, field)
                if known.kind is not field.kind:
                    raise CompileError("field {!r} used as {} and as {}".format(
                        field.name, known.kind.name, field.kind.name))

        unknown = [n for n in public if n not in pool]
        if unknown:
            raise CompileError("public fields {} are not used by any predicate".format(unknown))

        self.public_fields = [pool[n] for n in public]
        self.private_fields = [field for n, field in pool.items() if n not in public]

    @property
    def fields(self):
        return self.public_fields + self.private_fields

    @property
    def field_names(self):
        return [field.name for field in self.fields]

    @property
    def public_names(self):
        return [field.name for field in self.public_fields]

    def kind_of(self, name):
        for field in self.fields:
            if field.name == name:
                return field.kind
        return None

    def define(self, cs):
        pool = {}
        for field in self.public_fields:
            pool[field.name] = [cs.public_input(w) for w in field.kind.wire_names(field.name)]
        for field in self.private_fields:
            pool[field.name] = [cs.secret_input(w) for w in field.kind.wire_names(field.name)]
        for predicate in self.predicates:
            predicate.define(cs, pool)

    def assignment(self, values):
        """Field values (name → int) → circuit input values (wire name → int)."""
        result = {}
        for field in self.fields:
            names = field.kind.wire_names(field.name)
            result.update(zip(names, field.kind.to_wires(values[field.name])))
        return result

    def public_values(self, wires):
        """Public circuit inputs (wire name → int) → public field values."""
        return {
            field.name: field.kind.from_wires([wires[w] for w in field.kind.wire_names(field.name)])
            for field in self.public_fields
        }

    def failed_checks(self, values):
        """Labels of the predicates that read only public fields and do not hold.

        Lets a verifier re-check natively what the circuit leaves to a
        solver hint (the plain signature check).
        """
        public = set(self.public_names)
        return [
            predicate.label for predicate in self.predicates
            if all(f.name in public for f in predicate.fields) and not predicate.holds(values)
        ]

    def __repr__(self):
        return "Relation({!r})".format(self.name)


PLAIN = Relation(
    "plain",
    [SignatureVerify()],
    public=("msgHash", "r", "s", "pubX", "pubY"),
)

COMMITTED = Relation(
    "committed",
    [SignatureVerify(), KeyCommitment()],
    public=("msgHash", "r", "s", "pubCom"),
)

RELATIONS = {relation.name: relation for relation in (PLAIN, COMMITTED)}


def relation_for(variant):
    try:
        return RELATIONS[variant]
    except KeyError:
        raise ConfigError("unknown circuit variant {!r} (expected one of {})".format(
            variant, ", ".join(RELATIONS))) from None
