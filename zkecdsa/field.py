"""
Base module: scalar field FR and bn128 group operations
========================================================

Algebraic toolbox shared by the Groth16 backend and the gadgets.

**Scalar field FR**:
  The scalar field of the bn128 (BN254) curve. Every constraint, witness
  value and QAP polynomial lives here.
  - order r ≈ 2^254, prime
  - r - 1 = 2^28 × m (m odd) → roots of unity up to order 2^28

**Group operations**:
  G1 / G2 arithmetic and the optimal Ate pairing, on py_ecc's Jacobian
  (optimized) representation. Points are triples (x, y, z); the point at
  infinity has z = 0.

**Roots of unity**:
  Radix-2 evaluation domains H = {1, ω, ω², ..., ω^(n-1)} for the QAP.

Example:
    >>> from zkecdsa.field import FR, G1, ec_mul
    >>> a = FR(3) * FR(7)    # FR(21)
    >>> P = ec_mul(G1, 5)     # 5·G1
"""

from py_ecc import optimized_bn128 as bn128
from py_ecc.fields import optimized_bn128_FQ as FQ
from py_ecc.fields import optimized_bn128_FQ2 as FQ2


# ─────────────────────────────────────────────────────────────────────
# Scalar field FR
# ─────────────────────────────────────────────────────────────────────

class FR(FQ):
    """Element of the bn128 scalar field.

    Inherits +, -, *, /, ** from py_ecc's FQ with the curve order as
    modulus.

    Example:
        >>> x = FR(3)
        >>> x * x           # FR(9)
        >>> FR(1) / FR(3)   # modular inverse of 3
    """
    field_modulus = bn128.curve_order


CURVE_ORDER = bn128.curve_order


# ─────────────────────────────────────────────────────────────────────
# Group constants and operations
# ─────────────────────────────────────────────────────────────────────

G1 = bn128.G1
G2 = bn128.G2

# Points at infinity
Z1 = bn128.Z1
Z2 = bn128.Z2


def ec_mul(point, scalar):
    """Scalar multiplication: scalar · point.

    Args:
        point: G1 or G2 point
        scalar: int or FR

    Returns:
        scalar · point in the same group
    """
    if isinstance(scalar, FR):
        scalar = int(scalar)
    return bn128.multiply(point, scalar % CURVE_ORDER)


def ec_add(p1, p2):
    """Point addition p1 + p2 (same group)."""
    return bn128.add(p1, p2)


def ec_neg(point):
    """Point negation -point."""
    return bn128.neg(point)


def ec_eq(p1, p2):
    """Equality of two Jacobian points."""
    return bn128.eq(p1, p2)


def is_infinity(point):
    return bn128.is_inf(point)


def ec_pairing(g2_point, g1_point):
    """Optimal Ate pairing e(G1, G2) → GT.

    Note:
        py_ecc takes the arguments in (G2, G1) order.
    """
    return bn128.pairing(g2_point, g1_point)


def msm(points, scalars, zero):
    """Multi-scalar multiplication Σ scalars[i] · points[i].

    Zero scalars are skipped, which matters for the sparse query vectors of
    the proving key.

    Args:
        points: list of points of one group
        scalars: list of ints or FR elements, same length as points
        zero: the identity of that group (Z1 or Z2)
    """
    acc = zero
    for point, scalar in zip(points, scalars):
        s = int(scalar) % CURVE_ORDER
        if s == 0 or is_infinity(point):
            continue
        acc = ec_add(acc, bn128.multiply(point, s))
    return acc


# ─────────────────────────────────────────────────────────────────────
# Affine encoding
# ─────────────────────────────────────────────────────────────────────

def g1_to_affine(point):
    """G1 point → (x, y) ints, or None at infinity."""
    if is_infinity(point):
        return None
    x, y = bn128.normalize(point)
    return int(x), int(y)


def g1_from_affine(coords):
    """(x, y) ints or None → G1 point.

    Raises:
        ValueError: the coordinates are not on the curve
    """
    if coords is None:
        return Z1
    x, y = coords
    point = (FQ(int(x)), FQ(int(y)), FQ.one())
    if not bn128.is_on_curve(point, bn128.b):
        raise ValueError("G1 point is not on the curve")
    return point


def g2_to_affine(point):
    """G2 point → ((x0, x1), (y0, y1)) ints, or None at infinity."""
    if is_infinity(point):
        return None
    x, y = bn128.normalize(point)
    return (
        (int(x.coeffs[0]), int(x.coeffs[1])),
        (int(y.coeffs[0]), int(y.coeffs[1])),
    )


def g2_from_affine(coords):
    """((x0, x1), (y0, y1)) ints or None → G2 point.

    Raises:
        ValueError: the coordinates are not on the twisted curve
    """
    if coords is None:
        return Z2
    x, y = coords
    point = (
        FQ2([int(x[0]), int(x[1])]),
        FQ2([int(y[0]), int(y[1])]),
        FQ2.one(),
    )
    if not bn128.is_on_curve(point, bn128.b2):
        raise ValueError("G2 point is not on the curve")
    return point


# ─────────────────────────────────────────────────────────────────────
# Roots of unity
# ─────────────────────────────────────────────────────────────────────

def get_root_of_unity(n):
    """Primitive n-th root of unity ω (ω^n = 1, ω^k ≠ 1 for 0 < k < n).

    r - 1 = 2^28 × m, so n must be a power of two ≤ 2^28.
    ω = 5^((r-1)/n), 5 generating FR*.

    Raises:
        ValueError: n is not a power of two or exceeds 2^28
    """
    if n < 1 or (n & (n - 1)) != 0:
        raise ValueError(f"n must be a power of two: {n}")
    if n > (1 << 28):
        raise ValueError(f"n must not exceed 2^28: {n}")
    if n == 1:
        return FR(1)

    g = FR(5)
    exponent = (CURVE_ORDER - 1) // n
    return g ** exponent
