"""
Groth16 backend facade
======================

The four calls the proof pipeline consumes, plus the blob codecs for the
circuit and key artifacts.

Example:
    >>> backend = Groth16()
    >>> r1cs = backend.compile(cubic)
    >>> pk, vk = backend.setup(r1cs)
    >>> witness = Witness.from_assignment(r1cs.public_names, r1cs.secret_names,
    ...                                   {"out": 35, "x": 3})
    >>> proof = backend.prove(r1cs, pk, witness)
    >>> backend.verify(vk, proof, witness.public())
    True
"""

import logging

from zkecdsa.groth16 import serializers
from zkecdsa.groth16.constraint_system import compile as compile_circuit
from zkecdsa.groth16.proving import prove
from zkecdsa.groth16.setup import setup
from zkecdsa.groth16.verifying import verify

logger = logging.getLogger(__name__)


class Groth16:

    def compile(self, define, *args):
        r1cs = compile_circuit(define, *args)
        logger.debug("compiled circuit %s: %d constraints, %d wires",
                     r1cs.digest[:12], r1cs.num_constraints, r1cs.num_wires)
        return r1cs

    def setup(self, r1cs, toxic=None):
        pk, vk = setup(r1cs, toxic)
        logger.debug("setup %s over a domain of %d", pk.setup_id, pk.domain_size)
        return pk, vk

    def prove(self, r1cs, pk, witness):
        return prove(r1cs, pk, witness)

    def verify(self, vk, proof, public_witness):
        return verify(proof, vk, public_witness.values)

    # ─── Artifact blobs ───

    def dump_circuit(self, r1cs):
        return serializers.circuit_to_bytes(r1cs)

    def load_circuit(self, blob):
        return serializers.circuit_from_bytes(blob)

    def dump_proving_key(self, pk):
        return serializers.proving_key_to_bytes(pk)

    def load_proving_key(self, blob):
        return serializers.proving_key_from_bytes(blob)

    def dump_verifying_key(self, vk):
        return serializers.verifying_key_to_bytes(vk)

    def load_verifying_key(self, blob):
        return serializers.verifying_key_from_bytes(blob)
