"""
Proof pipeline
==============

Compile → Setup → Prove → Verify for one relation, on top of the Groth16
backend.

    UNINITIALIZED ──compile()──▶ COMPILED ──setup()──▶ KEYS_READY
          │                                                ▲
          └─────────────────────load(store)────────────────┘

``setup`` runs once per pipeline; afterwards the key triple is saved and
every request reloads it. ``prove`` and ``verify`` need KEYS_READY; calling
them earlier is a programming error (``PipelineStateError``). Backend
failures are translated into the typed errors of ``zkecdsa.errors``.
``verify`` also re-runs natively every predicate that reads only public
fields.
"""

import enum
import logging

from zkecdsa import artifacts
from zkecdsa.errors import (
    ArtifactIOError,
    CompileError,
    PipelineStateError,
    ProveError,
    SetupError,
    ShapeMismatch,
    VerifyError,
)
from zkecdsa.groth16.backend import Groth16
from zkecdsa.groth16.constraint_system import Witness
from zkecdsa.groth16.errors import (
    AssignmentError,
    ConstraintSystemError,
    Groth16Error,
    KeyMismatch,
    SerializationError,
    UnsatisfiedConstraint,
)

logger = logging.getLogger(__name__)


class PipelineState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    COMPILED = "compiled"
    KEYS_READY = "keys ready"


class ProofPipeline:

    def __init__(self, relation, backend=None):
        self.relation = relation
        self.backend = backend or Groth16()
        self.state = PipelineState.UNINITIALIZED
        self.circuit = None
        self.proving_key = None
        self.verifying_key = None

    def _require(self, *states):
        if self.state not in states:
            raise PipelineStateError("pipeline is {}, expected {}".format(
                self.state.value, " or ".join(s.value for s in states)))

    # ─── Lifecycle ───

    def compile(self):
        """Compile the relation into a circuit. Deterministic."""
        self._require(PipelineState.UNINITIALIZED)
        try:
            self.circuit = self.backend.compile(self.relation.define)
        except ConstraintSystemError as err:
            raise CompileError("cannot compile the {} relation: {}".format(
                self.relation.name, err)) from err
        self.state = PipelineState.COMPILED
        logger.info("compiled %s relation: %d constraints, %d public inputs",
                    self.relation.name, self.circuit.num_constraints, self.circuit.num_public)
        return self.circuit

    def setup(self, toxic=None):
        """Generate the key pair. Expensive; runs once per pipeline."""
        if self.state is PipelineState.KEYS_READY:
            raise PipelineStateError("setup already ran for this pipeline")
        self._require(PipelineState.COMPILED)
        try:
            self.proving_key, self.verifying_key = self.backend.setup(self.circuit, toxic)
        except (Groth16Error, ValueError) as err:
            raise SetupError("key generation failed: {}".format(err)) from err
        self.state = PipelineState.KEYS_READY
        logger.info("setup %s complete for %s relation",
                    self.verifying_key.setup_id, self.relation.name)
        return self.proving_key, self.verifying_key

    def save(self, store):
        self._require(PipelineState.KEYS_READY)
        store.save(artifacts.CIRCUIT, self.backend.dump_circuit(self.circuit))
        store.save(artifacts.PROVING_KEY, self.backend.dump_proving_key(self.proving_key))
        store.save(artifacts.VERIFYING_KEY, self.backend.dump_verifying_key(self.verifying_key))

    def load(self, store):
        """Replace the circuit and keys with the triple persisted in ``store``.

        Raises:
            ArtifactIOError: a file is missing or corrupt, or the three
                artifacts do not come from the same setup
        """
        circuit = self._decode(self.backend.load_circuit, store.load(artifacts.CIRCUIT), "circuit")
        pk = self._decode(self.backend.load_proving_key,
                          store.load(artifacts.PROVING_KEY), "proving key")
        vk = self._decode(self.backend.load_verifying_key,
                          store.load(artifacts.VERIFYING_KEY), "verifying key")

        if pk.circuit_digest != circuit.digest or vk.circuit_digest != circuit.digest:
            raise ArtifactIOError("keys were not generated for the stored circuit")
        if pk.setup_id != vk.setup_id:
            raise ArtifactIOError("proving and verifying keys come from different setups")
        if vk.num_public != circuit.num_public:
            raise ArtifactIOError("verifying key expects {} public inputs, circuit has {}".format(
                vk.num_public, circuit.num_public))

        self.circuit, self.proving_key, self.verifying_key = circuit, pk, vk
        self.state = PipelineState.KEYS_READY
        logger.debug("loaded artifacts of setup %s", vk.setup_id)

    @staticmethod
    def _decode(fn, blob, what):
        try:
            return fn(blob)
        except SerializationError as err:
            raise ArtifactIOError("{} artifact is unreadable: {}".format(what, err)) from err

    # ─── Requests ───

    def build_witness(self, fields):
        """Decoded fields (name → int) → (full witness, public witness).

        Raises:
            ShapeMismatch: fields are missing or not part of the relation
        """
        self._require(PipelineState.COMPILED, PipelineState.KEYS_READY)
        expected = self.relation.field_names
        missing = [n for n in expected if n not in fields]
        unexpected = sorted(set(fields) - set(expected))
        if missing or unexpected:
            raise ShapeMismatch(
                "witness fields do not match the {} relation (missing: {}, unexpected: {})".format(
                    self.relation.name, ", ".join(missing) or "none",
                    ", ".join(unexpected) or "none"))
        try:
            full = Witness.from_assignment(
                self.circuit.public_names, self.circuit.secret_names,
                self.relation.assignment(fields))
        except (AssignmentError, ValueError) as err:
            raise ShapeMismatch(str(err)) from err
        return full, full.public()

    def prove(self, full):
        self._require(PipelineState.KEYS_READY)
        try:
            proof = self.backend.prove(self.circuit, self.proving_key, full)
        except UnsatisfiedConstraint as err:
            logger.warning("witness rejected: %s", err)
            raise ProveError("witness does not satisfy the {} relation: {}".format(
                self.relation.name, err)) from err
        except KeyMismatch as err:
            raise ProveError(str(err)) from err
        except AssignmentError as err:
            raise ShapeMismatch(str(err)) from err
        except (ConstraintSystemError, ValueError) as err:
            raise ProveError("cannot solve the {} circuit: {}".format(
                self.relation.name, err)) from err
        logger.info("proof generated for %s relation", self.relation.name)
        return proof

    def verify(self, proof, public):
        self._require(PipelineState.KEYS_READY)
        if public.names != self.circuit.public_names or len(public) != self.verifying_key.num_public:
            raise ShapeMismatch(
                "public witness has {} values, verifying key expects {}".format(
                    len(public), self.verifying_key.num_public))
        try:
            ok = self.backend.verify(self.verifying_key, proof, public)
        except AssignmentError as err:
            raise ShapeMismatch(str(err)) from err
        if not ok:
            logger.warning("proof rejected by the verifying key")
            raise VerifyError("proof does not validate against the verifying key")

        # predicates over public fields only are checked natively as well
        failed = self.relation.failed_checks(
            self.relation.public_values(dict(zip(public.names, public.values))))
        if failed:
            logger.warning("public inputs fail %s", ", ".join(failed))
            raise VerifyError("public inputs do not satisfy: {}".format(", ".join(failed)))
        logger.info("proof verified for %s relation", self.relation.name)

    def prove_and_verify(self, fields):
        full, public = self.build_witness(fields)
        proof = self.prove(full)
        self.verify(proof, public)
        return proof
