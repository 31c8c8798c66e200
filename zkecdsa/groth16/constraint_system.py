"""
Rank-1 constraint system builder and solver
===========================================

A circuit is a function ``define(cs)`` that declares its inputs and emits
constraints through a ``ConstraintSystem``. ``compile(define)`` runs it once
and freezes the result into an ``R1CS``.

**Wire layout**:
  | index              | meaning                              |
  |--------------------|--------------------------------------|
  | 0                  | the constant 1                       |
  | 1 .. P             | public inputs, in declaration order  |
  | P+1 .. P+S         | secret inputs, in declaration order  |
  | P+S+1 ..           | internal wires (mul outputs, hints)  |

  Public inputs must be declared before secret inputs, and inputs before
  any internal wire, so that the layout above holds by construction.

**Constraints**:
  Each constraint is ⟨A, w⟩ · ⟨B, w⟩ = ⟨C, w⟩ with A, B, C linear
  combinations over the wires. Additions and scalar multiplications are
  free (they only build linear combinations); ``mul`` emits one constraint.

**Hints**:
  Some values are cheaper to compute outside the constraint system (a
  native gadget, a bit decomposition...). ``cs.hint(name, inputs)`` creates
  output wires the solver fills by calling the hint registered under
  ``name``. Hints are referenced by name so a compiled circuit survives
  serialization.

Example:
    >>> def cubic(cs):
    ...     x = cs.secret_input("x")
    ...     out = cs.public_input("out")
    ...     x3 = cs.mul(cs.mul(x, x), x)
    ...     cs.assert_equal(x3 + x + 5, out)
    >>> r1cs = compile(cubic)
"""

import hashlib
import json

from zkecdsa.field import CURVE_ORDER
from zkecdsa.groth16.errors import (
    AssignmentError,
    ConstraintSystemError,
    UnsatisfiedConstraint,
)

ONE_WIRE = 0

HINTS = {}


def register_hint(name):
    """Register ``fn(inputs, **params) -> list[int]`` as a solver hint."""
    def decorator(fn):
        HINTS[name] = fn
        return fn
    return decorator


# ─────────────────────────────────────────────────────────────────────
# Linear combinations
# ─────────────────────────────────────────────────────────────────────

class LinearCombination:
    """Σ coeff · wire over FR, kept as a sparse {wire: coeff} mapping."""

    def __init__(self, terms=None):
        self.terms = {}
        if terms:
            for wire, coeff in terms.items():
                coeff = int(coeff) % CURVE_ORDER
                if coeff:
                    self.terms[wire] = coeff

    @classmethod
    def wire(cls, index):
        return cls({index: 1})

    @classmethod
    def constant(cls, value):
        return cls({ONE_WIRE: int(value)})

    @staticmethod
    def coerce(value):
        if isinstance(value, LinearCombination):
            return value
        return LinearCombination.constant(value)

    def __add__(self, other):
        other = LinearCombination.coerce(other)
        terms = dict(self.terms)
        for wire, coeff in other.terms.items():
            terms[wire] = terms.get(wire, 0) + coeff
        return LinearCombination(terms)

    def __radd__(self, other):
        return self + other

    def __neg__(self):
        return LinearCombination({w: -c for w, c in self.terms.items()})

    def __sub__(self, other):
        return self + (-LinearCombination.coerce(other))

    def __rsub__(self, other):
        return LinearCombination.coerce(other) - self

    def __mul__(self, scalar):
        if isinstance(scalar, LinearCombination):
            raise TypeError("use ConstraintSystem.mul to multiply two linear combinations")
        scalar = int(scalar)
        return LinearCombination({w: c * scalar for w, c in self.terms.items()})

    def __rmul__(self, scalar):
        return self * scalar

    def evaluate(self, wires):
        total = 0
        for wire, coeff in self.terms.items():
            total += coeff * wires[wire]
        return total % CURVE_ORDER

    def to_list(self):
        return [[wire, str(coeff)] for wire, coeff in sorted(self.terms.items())]

    @classmethod
    def from_list(cls, data):
        return cls({int(wire): int(coeff) for wire, coeff in data})

    def __eq__(self, other):
        return isinstance(other, LinearCombination) and self.terms == other.terms

    def __repr__(self):
        return "LinearCombination({})".format(self.terms)


# ─────────────────────────────────────────────────────────────────────
# Builder
# ─────────────────────────────────────────────────────────────────────

class ConstraintSystem:
    """Mutable builder handed to a circuit's ``define`` function."""

    def __init__(self):
        self.num_wires = 1
        self.public_names = []
        self.secret_names = []
        self.constraints = []
        self.producers = []
        self._names = set()

    def one(self):
        return LinearCombination.wire(ONE_WIRE)

    def _declare(self, name):
        if name in self._names:
            raise ConstraintSystemError(f"input {name!r} declared twice")
        self._names.add(name)
        index = self.num_wires
        self.num_wires += 1
        return LinearCombination.wire(index)

    def public_input(self, name):
        if self.secret_names or self.producers:
            raise ConstraintSystemError(
                f"public input {name!r} declared after secret inputs or internal wires")
        lc = self._declare(name)
        self.public_names.append(name)
        return lc

    def secret_input(self, name):
        if self.producers:
            raise ConstraintSystemError(
                f"secret input {name!r} declared after internal wires")
        lc = self._declare(name)
        self.secret_names.append(name)
        return lc

    def _internal_wire(self):
        index = self.num_wires
        self.num_wires += 1
        return index

    def mul(self, a, b, label=None):
        """New wire w with the constraint a · b = w."""
        a = LinearCombination.coerce(a)
        b = LinearCombination.coerce(b)
        out = self._internal_wire()
        self.producers.append({"op": "mul", "a": a, "b": b, "out": out})
        self.constraints.append((a, b, LinearCombination.wire(out), label))
        return LinearCombination.wire(out)

    def assert_equal(self, a, b, label=None):
        """Constraint a · 1 = b."""
        self.constraints.append(
            (LinearCombination.coerce(a), self.one(), LinearCombination.coerce(b), label))

    def hint(self, name, inputs, n_outputs=1, **params):
        """Output wires computed by the registered hint ``name``.

        The outputs are unconstrained until the caller constrains them.
        """
        if name not in HINTS:
            raise ConstraintSystemError(f"unknown hint {name!r}")
        outputs = [self._internal_wire() for _ in range(n_outputs)]
        self.producers.append({
            "op": "hint",
            "name": name,
            "inputs": [LinearCombination.coerce(v) for v in inputs],
            "outputs": outputs,
            "params": params,
        })
        return [LinearCombination.wire(w) for w in outputs]


def compile(define, *args):
    """Run ``define(cs, *args)`` and freeze the constraint system.

    Every public input additionally gets a binding constraint x · 1 = x so
    that its column in the QAP is non-zero and the verifier's input
    commitment depends on it.

    Raises:
        ConstraintSystemError: the definition is malformed
    """
    cs = ConstraintSystem()
    define(cs, *args)

    if not cs.constraints:
        raise ConstraintSystemError("circuit defines no constraints")

    binding = []
    for i, name in enumerate(cs.public_names):
        wire = LinearCombination.wire(1 + i)
        binding.append((wire, cs.one(), wire, "public " + name))

    return R1CS(
        num_wires=cs.num_wires,
        public_names=list(cs.public_names),
        secret_names=list(cs.secret_names),
        constraints=binding + cs.constraints,
        producers=cs.producers,
    )


# ─────────────────────────────────────────────────────────────────────
# Witness
# ─────────────────────────────────────────────────────────────────────

class Witness:
    """Values of a circuit's declared inputs, public inputs first."""

    def __init__(self, names, values, num_public):
        if len(names) != len(values):
            raise AssignmentError("witness names and values differ in length")
        self.names = list(names)
        self.values = [int(v) for v in values]
        self.num_public = num_public

    @classmethod
    def from_assignment(cls, public_names, secret_names, assignment):
        """Order ``assignment`` (name → int) by the circuit's input layout.

        Raises:
            AssignmentError: an input is missing, unexpected or ≥ r
        """
        names = list(public_names) + list(secret_names)
        missing = [n for n in names if n not in assignment]
        unexpected = sorted(set(assignment) - set(names))
        if missing or unexpected:
            raise AssignmentError(
                "assignment does not match circuit inputs (missing: {}, unexpected: {})".format(
                    missing or "none", unexpected or "none"))
        values = []
        for name in names:
            value = int(assignment[name])
            if not 0 <= value < CURVE_ORDER:
                raise AssignmentError(f"input {name!r} is outside the scalar field")
            values.append(value)
        return cls(names, values, len(public_names))

    def public(self):
        return Witness(self.names[:self.num_public], self.values[:self.num_public], self.num_public)

    def __len__(self):
        return len(self.values)

    def __eq__(self, other):
        return (isinstance(other, Witness) and self.names == other.names
                and self.values == other.values and self.num_public == other.num_public)


# ─────────────────────────────────────────────────────────────────────
# Compiled circuit
# ─────────────────────────────────────────────────────────────────────

class R1CS:
    """Frozen rank-1 constraint system."""

    def __init__(self, num_wires, public_names, secret_names, constraints, producers):
        self.num_wires = num_wires
        self.public_names = public_names
        self.secret_names = secret_names
        self.constraints = constraints
        self.producers = producers
        self._digest = None

    @property
    def num_public(self):
        return len(self.public_names)

    @property
    def num_inputs(self):
        return len(self.public_names) + len(self.secret_names)

    @property
    def num_constraints(self):
        return len(self.constraints)

    @property
    def digest(self):
        """sha256 over the canonical encoding; identifies the circuit."""
        if self._digest is None:
            canonical = json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))
            self._digest = hashlib.sha256(canonical.encode()).hexdigest()
        return self._digest

    def solve(self, witness):
        """Complete every wire from the input witness and check all constraints.

        Returns:
            list[int]: values of all wires

        Raises:
            AssignmentError: the witness does not fit the input layout
            UnsatisfiedConstraint: the first violated constraint
        """
        expected = self.public_names + self.secret_names
        if witness.names != expected or witness.num_public != self.num_public:
            raise AssignmentError(
                "witness layout does not match the circuit ({} inputs expected, {} given)".format(
                    len(expected), len(witness)))

        wires = [1] + list(witness.values) + [0] * (self.num_wires - 1 - len(witness))
        for producer in self.producers:
            if producer["op"] == "mul":
                value = producer["a"].evaluate(wires) * producer["b"].evaluate(wires)
                wires[producer["out"]] = value % CURVE_ORDER
            else:
                fn = HINTS.get(producer["name"])
                if fn is None:
                    raise ConstraintSystemError(f"unknown hint {producer['name']!r}")
                inputs = [lc.evaluate(wires) for lc in producer["inputs"]]
                outputs = fn(inputs, **producer["params"])
                if len(outputs) != len(producer["outputs"]):
                    raise ConstraintSystemError(
                        f"hint {producer['name']!r} returned {len(outputs)} values")
                for wire, value in zip(producer["outputs"], outputs):
                    wires[wire] = int(value) % CURVE_ORDER

        self.check(wires)
        return wires

    def check(self, wires):
        for index, (a, b, c, label) in enumerate(self.constraints):
            if (a.evaluate(wires) * b.evaluate(wires) - c.evaluate(wires)) % CURVE_ORDER:
                raise UnsatisfiedConstraint(index, label)

    def to_dict(self):
        producers = []
        for p in self.producers:
            if p["op"] == "mul":
                producers.append({"op": "mul", "a": p["a"].to_list(),
                                  "b": p["b"].to_list(), "out": p["out"]})
            else:
                producers.append({"op": "hint", "name": p["name"],
                                  "inputs": [lc.to_list() for lc in p["inputs"]],
                                  "outputs": p["outputs"], "params": p["params"]})
        return {
            "num_wires": self.num_wires,
            "public_names": self.public_names,
            "secret_names": self.secret_names,
            "constraints": [[a.to_list(), b.to_list(), c.to_list(), label]
                            for a, b, c, label in self.constraints],
            "producers": producers,
        }

    @classmethod
    def from_dict(cls, data):
        producers = []
        for p in data["producers"]:
            if p["op"] == "mul":
                producers.append({"op": "mul",
                                  "a": LinearCombination.from_list(p["a"]),
                                  "b": LinearCombination.from_list(p["b"]),
                                  "out": int(p["out"])})
            elif p["op"] == "hint":
                producers.append({"op": "hint", "name": p["name"],
                                  "inputs": [LinearCombination.from_list(lc) for lc in p["inputs"]],
                                  "outputs": [int(w) for w in p["outputs"]],
                                  "params": dict(p["params"])})
            else:
                raise ValueError("unknown producer op {!r}".format(p["op"]))
        constraints = [
            (LinearCombination.from_list(a), LinearCombination.from_list(b),
             LinearCombination.from_list(c), label)
            for a, b, c, label in data["constraints"]
        ]
        return cls(
            num_wires=int(data["num_wires"]),
            public_names=list(data["public_names"]),
            secret_names=list(data["secret_names"]),
            constraints=constraints,
            producers=producers,
        )
