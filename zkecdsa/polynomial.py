"""
Base module: FFT over FR and evaluation-domain helpers
======================================================

**FFT/IFFT (Number Theoretic Transform)**:
  Coefficient form ↔ evaluation form over a radix-2 domain
  H = {1, ω, ..., ω^(n-1)}. Recursive Cooley-Tukey.

**Coset FFT**:
  The QAP quotient h(x) = (a(x)·b(x) - c(x)) / Z_H(x) cannot be computed on
  H itself because Z_H vanishes there. On the coset k·H, Z_H(k·ωⁱ) = kⁿ - 1
  is a non-zero constant and the division is pointwise.

**Lagrange evaluation**:
  All L_i(τ) for i < n in O(n), used by setup to evaluate the R1CS columns
  at the toxic point.

Example:
    >>> omega = get_root_of_unity(4)
    >>> evals = fft([FR(1), FR(2), FR(3), FR(0)], omega)
    >>> ifft(evals, omega)   # [FR(1), FR(2), FR(3), FR(0)]
"""

from zkecdsa.field import FR


# Conventional coset generator for bn128
COSET_SHIFT = FR(5)


def fft(coeffs, omega):
    """Coefficients → evaluations at [1, ω, ..., ω^(n-1)].

    Args:
        coeffs: FR list, length a power of two
        omega: primitive n-th root of unity

    Returns:
        list[FR]: [p(1), p(ω), ..., p(ω^(n-1))]
    """
    n = len(coeffs)
    if n == 1:
        return [coeffs[0] if isinstance(coeffs[0], FR) else FR(coeffs[0])]

    even = [coeffs[i] for i in range(0, n, 2)]
    odd = [coeffs[i] for i in range(1, n, 2)]

    omega_sq = omega * omega
    even_vals = fft(even, omega_sq)
    odd_vals = fft(odd, omega_sq)

    # butterfly
    result = [FR(0)] * n
    omega_k = FR(1)
    half = n // 2
    for k in range(half):
        t = omega_k * odd_vals[k]
        result[k] = even_vals[k] + t
        result[k + half] = even_vals[k] - t
        omega_k = omega_k * omega

    return result


def ifft(evals, omega):
    """Evaluations → coefficients (inverse of fft).

    FFT with ω^{-1}, then scale by 1/n.
    """
    n = len(evals)
    omega_inv = FR(1) / omega
    coeffs = fft(evals, omega_inv)
    n_inv = FR(1) / FR(n)
    return [c * n_inv for c in coeffs]


def coset_fft(coeffs, omega, k=None):
    """Evaluate on the coset k·H.

    cᵢ → kⁱ·cᵢ, then an ordinary FFT (equivalent to evaluating p(k·x) on H).
    """
    if k is None:
        k = COSET_SHIFT
    shifted = []
    k_power = FR(1)
    for c in coeffs:
        if not isinstance(c, FR):
            c = FR(c)
        shifted.append(c * k_power)
        k_power = k_power * k
    return fft(shifted, omega)


def coset_ifft(evals, omega, k=None):
    """Inverse of coset_fft: evaluations on k·H → coefficients."""
    if k is None:
        k = COSET_SHIFT
    coeffs = ifft(evals, omega)
    k_inv = FR(1) / k
    k_inv_power = FR(1)
    result = []
    for c in coeffs:
        result.append(c * k_inv_power)
        k_inv_power = k_inv_power * k_inv
    return result


def vanishing_poly_eval(n, point):
    """Z_H(point) = pointⁿ - 1."""
    return point ** n - FR(1)


def lagrange_basis_evals(n, omega, tau):
    """[L_0(τ), ..., L_{n-1}(τ)] for the domain of size n.

    L_i(τ) = (ωⁱ / n) · (τⁿ - 1) / (τ - ωⁱ)

    If τ happens to be a domain point ω^j, the basis degenerates to the
    Kronecker delta δ_ij.
    """
    if not isinstance(tau, FR):
        tau = FR(tau)

    zh_tau = vanishing_poly_eval(n, tau)
    if zh_tau == FR(0):
        result = []
        omega_i = FR(1)
        for _ in range(n):
            result.append(FR(1) if omega_i == tau else FR(0))
            omega_i = omega_i * omega
        return result

    factor = zh_tau / FR(n)
    result = []
    omega_i = FR(1)
    for _ in range(n):
        result.append(factor * omega_i / (tau - omega_i))
        omega_i = omega_i * omega
    return result


def next_power_of_2(n):
    """Smallest power of two ≥ n.

    Example:
        >>> next_power_of_2(3)  # 4
        >>> next_power_of_2(5)  # 8
    """
    if n <= 1:
        return 1
    p = 1
    while p < n:
        p <<= 1
    return p
