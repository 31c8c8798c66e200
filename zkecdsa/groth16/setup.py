"""
Groth16 setup
=============

Circuit-specific trusted setup. Toxic waste (α, β, γ, δ, τ) is drawn from
``secrets``; passing a ``ToxicWaste`` makes the keys reproducible, which
the tests rely on. The toxic waste must never outlive ``setup``.

Proving key:
    [α]₁, [β]₁, [β]₂, [δ]₁, [δ]₂
    [u_i(τ)]₁, [v_i(τ)]₁, [v_i(τ)]₂           for every wire i
    [(β·u_i + α·v_i + w_i)(τ) / δ]₁          for every private wire i
    [τᵏ · Z_H(τ) / δ]₁                       for k = 0 .. n-2

Verifying key:
    [α]₁, [β]₂, [γ]₂, [δ]₂
    IC_i = [(β·u_i + α·v_i + w_i)(τ) / γ]₁   for i = 0 (constant) .. P
"""

import hashlib
import secrets

from zkecdsa.field import FR, CURVE_ORDER, G1, G2, ec_mul
from zkecdsa.groth16.qap import column_evaluations, domain_size
from zkecdsa.polynomial import vanishing_poly_eval


class ToxicWaste:

    def __init__(self, alpha, beta, gamma, delta, tau):
        self.alpha = FR(alpha)
        self.beta = FR(beta)
        self.gamma = FR(gamma)
        self.delta = FR(delta)
        self.tau = FR(tau)

    @classmethod
    def generate(cls, seed=None):
        """Fresh toxic waste; deterministic when ``seed`` is given."""
        if seed is None:
            values = [secrets.randbelow(CURVE_ORDER - 1) + 1 for _ in range(5)]
        else:
            values = []
            for label in ("alpha", "beta", "gamma", "delta", "tau"):
                h = hashlib.sha256(f"{seed}:{label}".encode()).digest()
                values.append(int.from_bytes(h, "big") % (CURVE_ORDER - 1) + 1)
        return cls(*values)


class ProvingKey:

    def __init__(self, circuit_digest, setup_id, domain_size, num_public,
                 alpha_g1, beta_g1, beta_g2, delta_g1, delta_g2,
                 a_query, b_g1_query, b_g2_query, l_query, h_query):
        self.circuit_digest = circuit_digest
        self.setup_id = setup_id
        self.domain_size = domain_size
        self.num_public = num_public
        self.alpha_g1 = alpha_g1
        self.beta_g1 = beta_g1
        self.beta_g2 = beta_g2
        self.delta_g1 = delta_g1
        self.delta_g2 = delta_g2
        self.a_query = a_query
        self.b_g1_query = b_g1_query
        self.b_g2_query = b_g2_query
        # indexed by wire - num_public - 1
        self.l_query = l_query
        self.h_query = h_query

    @property
    def num_wires(self):
        return len(self.a_query)


class VerifyingKey:

    def __init__(self, circuit_digest, setup_id, alpha_g1, beta_g2, gamma_g2, delta_g2, ic):
        self.circuit_digest = circuit_digest
        self.setup_id = setup_id
        self.alpha_g1 = alpha_g1
        self.beta_g2 = beta_g2
        self.gamma_g2 = gamma_g2
        self.delta_g2 = delta_g2
        self.ic = ic

    @property
    def num_public(self):
        return len(self.ic) - 1


def sigma11(alpha, beta, delta):
    return [ec_mul(G1, alpha), ec_mul(G1, beta), ec_mul(G1, delta)]


def sigma21(beta, delta, gamma):
    return [ec_mul(G2, beta), ec_mul(G2, gamma), ec_mul(G2, delta)]


def setup(r1cs, toxic=None):
    """Generate the key pair for ``r1cs``.

    Returns:
        tuple: (ProvingKey, VerifyingKey)
    """
    if toxic is None:
        toxic = ToxicWaste.generate()
        setup_id = secrets.token_hex(16)
    else:
        setup_id = hashlib.sha256(
            "{}:{}".format(r1cs.digest, int(toxic.tau)).encode()).hexdigest()[:32]

    alpha, beta, gamma, delta, tau = (
        toxic.alpha, toxic.beta, toxic.gamma, toxic.delta, toxic.tau)

    n = domain_size(r1cs.num_constraints)
    u, v, w = column_evaluations(r1cs, n, tau)

    alpha_g1, beta_g1, delta_g1 = sigma11(alpha, beta, delta)
    beta_g2, gamma_g2, delta_g2 = sigma21(beta, delta, gamma)

    a_query = [ec_mul(G1, ui) for ui in u]
    b_g1_query = [ec_mul(G1, vi) for vi in v]
    b_g2_query = [ec_mul(G2, vi) for vi in v]

    gamma_inv = FR(1) / gamma
    delta_inv = FR(1) / delta
    ic = []
    l_query = []
    for i in range(r1cs.num_wires):
        k = beta * FR(u[i]) + alpha * FR(v[i]) + FR(w[i])
        if i <= r1cs.num_public:
            ic.append(ec_mul(G1, k * gamma_inv))
        else:
            l_query.append(ec_mul(G1, k * delta_inv))

    zh_delta = vanishing_poly_eval(n, tau) * delta_inv
    h_query = []
    tau_power = FR(1)
    for _ in range(n - 1):
        h_query.append(ec_mul(G1, tau_power * zh_delta))
        tau_power = tau_power * tau

    pk = ProvingKey(
        circuit_digest=r1cs.digest,
        setup_id=setup_id,
        domain_size=n,
        num_public=r1cs.num_public,
        alpha_g1=alpha_g1,
        beta_g1=beta_g1,
        beta_g2=beta_g2,
        delta_g1=delta_g1,
        delta_g2=delta_g2,
        a_query=a_query,
        b_g1_query=b_g1_query,
        b_g2_query=b_g2_query,
        l_query=l_query,
        h_query=h_query,
    )
    vk = VerifyingKey(
        circuit_digest=r1cs.digest,
        setup_id=setup_id,
        alpha_g1=alpha_g1,
        beta_g2=beta_g2,
        gamma_g2=gamma_g2,
        delta_g2=delta_g2,
        ic=ic,
    )
    return pk, vk
