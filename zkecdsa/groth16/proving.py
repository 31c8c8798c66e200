"""
Groth16 proving
===============

With z the full wire assignment, h the QAP quotient and prover randomness
r, s:

    A = [α]₁ + Σ z_i [u_i(τ)]₁ + r·[δ]₁
    B = [β]₂ + Σ z_i [v_i(τ)]₂ + s·[δ]₂
    C = Σ_{i private} z_i [L_i]₁ + Σ h_k [τᵏ Z_H(τ)/δ]₁ + s·A + r·B₁ - r·s·[δ]₁

where B₁ is B computed in G1.
"""

import logging
import secrets

from zkecdsa.field import CURVE_ORDER, Z1, Z2, ec_add, ec_mul, ec_neg, msm
from zkecdsa.groth16.errors import KeyMismatch
from zkecdsa.groth16.qap import quotient_coeffs

logger = logging.getLogger(__name__)


class Proof:
    """Groth16 proof: A, C in G1 and B in G2."""

    def __init__(self, a, b, c):
        self.a = a
        self.b = b
        self.c = c


def proof_a(pk, wires, r):
    proof_A = ec_add(pk.alpha_g1, msm(pk.a_query, wires, Z1))
    return ec_add(proof_A, ec_mul(pk.delta_g1, r))


def proof_b(pk, wires, s):
    proof_B = ec_add(pk.beta_g2, msm(pk.b_g2_query, wires, Z2))
    return ec_add(proof_B, ec_mul(pk.delta_g2, s))


def proof_b_g1(pk, wires, s):
    temp_proof_B = ec_add(pk.beta_g1, msm(pk.b_g1_query, wires, Z1))
    return ec_add(temp_proof_B, ec_mul(pk.delta_g1, s))


def proof_c(pk, wires, hx, prf_A, prf_B1, r, s):
    private = wires[pk.num_public + 1:]
    proof_C = msm(pk.l_query, private, Z1)
    proof_C = ec_add(proof_C, msm(pk.h_query, hx, Z1))
    proof_C = ec_add(proof_C, ec_mul(prf_A, s))
    proof_C = ec_add(proof_C, ec_mul(prf_B1, r))
    return ec_add(proof_C, ec_neg(ec_mul(pk.delta_g1, (r * s) % CURVE_ORDER)))


def prove(r1cs, pk, witness, r=None, s=None):
    """Solve the circuit for ``witness`` and produce a proof.

    Raises:
        KeyMismatch: ``pk`` was generated for another circuit
        AssignmentError: the witness does not fit the circuit inputs
        UnsatisfiedConstraint: the witness does not satisfy the circuit
    """
    if pk.circuit_digest != r1cs.digest or pk.num_wires != r1cs.num_wires:
        raise KeyMismatch("proving key was not generated for this circuit")

    wires = r1cs.solve(witness)
    logger.debug("solved %d wires over %d constraints", len(wires), r1cs.num_constraints)

    hx = quotient_coeffs(r1cs, wires, pk.domain_size)

    if r is None:
        r = secrets.randbelow(CURVE_ORDER)
    if s is None:
        s = secrets.randbelow(CURVE_ORDER)

    prf_A = proof_a(pk, wires, r)
    prf_B = proof_b(pk, wires, s)
    prf_B1 = proof_b_g1(pk, wires, s)
    prf_C = proof_c(pk, wires, hx, prf_A, prf_B1, r, s)
    return Proof(prf_A, prf_B, prf_C)
