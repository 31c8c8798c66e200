from zkecdsa.field import ec_add, ec_mul, ec_pairing
from zkecdsa.groth16.errors import AssignmentError


def public_input_commitment(vk, public_values):
    """IC_0 + Σ x_i · IC_i over the public inputs x."""
    if len(public_values) != vk.num_public:
        raise AssignmentError(
            "public witness has {} values, verifying key expects {}".format(
                len(public_values), vk.num_public))
    temp = vk.ic[0]
    for ic_i, x_i in zip(vk.ic[1:], public_values):
        temp = ec_add(temp, ec_mul(ic_i, x_i))
    return temp


# e(A, B) == e(α, β) · e(IC(x), γ) · e(C, δ)
def verify(proof, vk, public_values):
    temp = public_input_commitment(vk, public_values)
    LHS = ec_pairing(proof.b, proof.a)
    RHS = ec_pairing(vk.beta_g2, vk.alpha_g1)
    RHS = (RHS * ec_pairing(vk.gamma_g2, temp)) * ec_pairing(vk.delta_g2, proof.c)
    return LHS == RHS
