"""
R1CS → QAP
==========

Constraint j is attached to the domain point ωʲ of a radix-2 domain H of
size n ≥ (number of constraints). Wire i gets three column polynomials

    u_i(x) = Σ_j A[j][i] · L_j(x)     (likewise v_i from B, w_i from C)

and a full wire assignment z satisfies the R1CS iff

    (Σ z_i u_i)(x) · (Σ z_i v_i)(x) - (Σ z_i w_i)(x) = h(x) · Z_H(x)

for some h of degree ≤ n - 2.
"""

from zkecdsa.field import FR, CURVE_ORDER, get_root_of_unity
from zkecdsa.polynomial import (
    COSET_SHIFT,
    coset_fft,
    coset_ifft,
    ifft,
    lagrange_basis_evals,
    next_power_of_2,
)


def domain_size(num_constraints):
    return next_power_of_2(max(num_constraints, 2))


def column_evaluations(r1cs, n, tau):
    """u_i(τ), v_i(τ), w_i(τ) for every wire i, as ints mod r."""
    omega = get_root_of_unity(n)
    lagrange = [int(l) for l in lagrange_basis_evals(n, omega, tau)]

    u = [0] * r1cs.num_wires
    v = [0] * r1cs.num_wires
    w = [0] * r1cs.num_wires
    for j, (a, b, c, _) in enumerate(r1cs.constraints):
        lj = lagrange[j]
        for wire, coeff in a.terms.items():
            u[wire] = (u[wire] + coeff * lj) % CURVE_ORDER
        for wire, coeff in b.terms.items():
            v[wire] = (v[wire] + coeff * lj) % CURVE_ORDER
        for wire, coeff in c.terms.items():
            w[wire] = (w[wire] + coeff * lj) % CURVE_ORDER
    return u, v, w


def quotient_coeffs(r1cs, wires, n):
    """Coefficients h_0 .. h_{n-2} of h(x) = (a·b - c) / Z_H.

    a, b, c are interpolated from the per-constraint evaluations, moved to
    the coset k·H where Z_H(k·ωⁱ) = kⁿ - 1, divided pointwise and brought
    back to coefficient form.
    """
    omega = get_root_of_unity(n)

    a_evals = [FR(0)] * n
    b_evals = [FR(0)] * n
    c_evals = [FR(0)] * n
    for j, (a, b, c, _) in enumerate(r1cs.constraints):
        a_evals[j] = FR(a.evaluate(wires))
        b_evals[j] = FR(b.evaluate(wires))
        c_evals[j] = FR(c.evaluate(wires))

    a_coset = coset_fft(ifft(a_evals, omega), omega)
    b_coset = coset_fft(ifft(b_evals, omega), omega)
    c_coset = coset_fft(ifft(c_evals, omega), omega)

    zh_inv = FR(1) / (COSET_SHIFT ** n - FR(1))
    h_coset = [(a_coset[i] * b_coset[i] - c_coset[i]) * zh_inv for i in range(n)]
    h = coset_ifft(h_coset, omega)
    return h[:n - 1]
