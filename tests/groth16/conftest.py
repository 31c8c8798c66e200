import pytest

from zkecdsa.groth16.constraint_system import Witness, compile
from zkecdsa.groth16.proving import prove
from zkecdsa.groth16.setup import ToxicWaste, setup


# ── test constants ──
TOXIC_ALPHA = 3926
TOXIC_BETA = 3604
TOXIC_GAMMA = 2971
TOXIC_DELTA = 1357
TOXIC_X_VAL = 3721

PROVER_R = 4106
PROVER_S = 4565

# wires: [one, out, x, x^2, x^3]
EXPECTED_WIRES = [1, 35, 3, 9, 27]


def _cubic(cs):
    """x^3 + x + 5 == out"""
    out = cs.public_input("out")
    x = cs.secret_input("x")
    x2 = cs.mul(x, x, label="x^2")
    x3 = cs.mul(x2, x, label="x^3")
    cs.assert_equal(x3 + x + 5, out, label="out")


@pytest.fixture(scope="session")
def cubic():
    return _cubic


@pytest.fixture(scope="session")
def expected_wires():
    return list(EXPECTED_WIRES)


@pytest.fixture(scope="session")
def toxic():
    return ToxicWaste(TOXIC_ALPHA, TOXIC_BETA, TOXIC_GAMMA, TOXIC_DELTA, TOXIC_X_VAL)


@pytest.fixture(scope="session")
def r1cs():
    return compile(_cubic)


@pytest.fixture(scope="session")
def witness(r1cs):
    return Witness.from_assignment(r1cs.public_names, r1cs.secret_names, {"out": 35, "x": 3})


@pytest.fixture(scope="session")
def keys(r1cs, toxic):
    return setup(r1cs, toxic)


@pytest.fixture(scope="session")
def proof(r1cs, keys, witness):
    pk, _ = keys
    return prove(r1cs, pk, witness, r=PROVER_R, s=PROVER_S)
