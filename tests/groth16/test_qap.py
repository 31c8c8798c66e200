"""
QAP reduction tests
===================

Domain sizing, the FFT helpers the quotient relies on, and the QAP
identity a(τ)·b(τ) - c(τ) = h(τ)·Z_H(τ) for the cubic circuit.
"""

import pytest

from zkecdsa.field import FR, get_root_of_unity
from zkecdsa.groth16.qap import column_evaluations, domain_size, quotient_coeffs
from zkecdsa.polynomial import (
    coset_fft,
    coset_ifft,
    fft,
    ifft,
    lagrange_basis_evals,
    next_power_of_2,
    vanishing_poly_eval,
)


def eval_poly(coeffs, x):
    acc = FR(0)
    for c in reversed(coeffs):
        acc = acc * x + c
    return acc


class TestDomain:
    @pytest.mark.parametrize("m,n", [(1, 2), (2, 2), (3, 4), (4, 4), (21, 32), (1995, 2048)])
    def test_domain_size(self, m, n):
        assert domain_size(m) == n

    def test_next_power_of_2(self):
        assert next_power_of_2(5) == 8
        assert next_power_of_2(1) == 1

    def test_root_of_unity_order(self):
        omega = get_root_of_unity(8)
        assert omega ** 8 == FR(1)
        assert omega ** 4 != FR(1)

    def test_rejects_non_power_of_two(self):
        with pytest.raises(ValueError):
            get_root_of_unity(6)


class TestFFT:
    def test_fft_matches_evaluation(self):
        coeffs = [FR(1), FR(2), FR(3), FR(4)]
        omega = get_root_of_unity(4)
        evals = fft(coeffs, omega)
        for k, y in enumerate(evals):
            x = omega ** k
            assert eval_poly(coeffs, x) == y

    def test_ifft_inverts_fft(self):
        coeffs = [FR(7), FR(0), FR(11), FR(5), FR(1), FR(2), FR(3), FR(9)]
        omega = get_root_of_unity(8)
        assert ifft(fft(coeffs, omega), omega) == coeffs

    def test_coset_round_trip(self):
        coeffs = [FR(3), FR(1), FR(4), FR(1)]
        omega = get_root_of_unity(4)
        assert coset_ifft(coset_fft(coeffs, omega), omega) == coeffs

    def test_lagrange_basis_sums_to_one(self):
        n = 8
        basis = lagrange_basis_evals(n, get_root_of_unity(n), FR(3721))
        total = FR(0)
        for l in basis:
            total = total + l
        assert total == FR(1)

    def test_lagrange_on_domain_point(self):
        n = 4
        omega = get_root_of_unity(n)
        basis = lagrange_basis_evals(n, omega, omega * omega)
        assert basis == [FR(0), FR(0), FR(1), FR(0)]


class TestQapIdentity:
    def test_quotient_length(self, r1cs, expected_wires):
        n = domain_size(r1cs.num_constraints)
        assert len(quotient_coeffs(r1cs, expected_wires, n)) == n - 1

    def test_identity_at_tau(self, r1cs, expected_wires):
        n = domain_size(r1cs.num_constraints)
        tau = FR(3721)
        u, v, w = column_evaluations(r1cs, n, tau)

        a = sum(z * ui for z, ui in zip(expected_wires, u))
        b = sum(z * vi for z, vi in zip(expected_wires, v))
        c = sum(z * wi for z, wi in zip(expected_wires, w))
        lhs = FR(a) * FR(b) - FR(c)

        h = quotient_coeffs(r1cs, expected_wires, n)
        rhs = eval_poly(h, tau) * vanishing_poly_eval(n, tau)
        assert lhs == rhs

    def test_wrong_wires_leave_remainder(self, r1cs):
        """x = 4 with out = 35: a·b - c is not divisible by Z_H."""
        n = domain_size(r1cs.num_constraints)
        wires = [1, 35, 4, 16, 64]
        tau = FR(3721)
        u, v, w = column_evaluations(r1cs, n, tau)
        a = sum(z * ui for z, ui in zip(wires, u))
        b = sum(z * vi for z, vi in zip(wires, v))
        c = sum(z * wi for z, wi in zip(wires, w))
        h = quotient_coeffs(r1cs, wires, n)
        assert FR(a) * FR(b) - FR(c) != eval_poly(h, tau) * vanishing_poly_eval(n, tau)
