import sys
import os
import pytest

# project root on sys.path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from cryptography.hazmat.primitives.asymmetric import ec

from zkecdsa import ffi
from zkecdsa.artifacts import ArtifactStore
from zkecdsa.circuit import COMMITTED, PLAIN
from zkecdsa.config import ArtifactConfig, Settings
from zkecdsa.groth16.setup import ToxicWaste
from zkecdsa.pipeline import ProofPipeline
from zkecdsa.signing import sign_and_build_fields
from zkecdsa.witness import WitnessCodec

# fixed key so failures reproduce
PRIVATE_VALUE = 0x4f3c2a1b0e9d8c7b6a5948372615f4e3d2c1b0a9f8e7d6c5b4a392817161514
MESSAGE = b"testing ECDSA with a Groth16 proof"
NONCE = 0x1d2c3b4a59687766554433221100ffeeddccbbaa99887766554433221100aabb


@pytest.fixture(scope="session")
def private_key():
    return ec.derive_private_key(PRIVATE_VALUE, ec.SECP256R1())


@pytest.fixture(scope="session")
def plain_fields(private_key):
    return sign_and_build_fields(private_key, MESSAGE)


@pytest.fixture(scope="session")
def committed_fields(private_key):
    return sign_and_build_fields(private_key, MESSAGE, variant="committed", nonce=NONCE)


@pytest.fixture(scope="session")
def plain_hex(plain_fields):
    return WitnessCodec(PLAIN).encode(plain_fields)


@pytest.fixture(scope="session")
def committed_hex(committed_fields):
    return WitnessCodec(COMMITTED).encode(committed_fields)


@pytest.fixture(scope="session")
def plain_pipeline():
    """Plain relation compiled and set up once (22 wires, domain of 32)."""
    pipeline = ProofPipeline(PLAIN)
    pipeline.compile()
    pipeline.setup(ToxicWaste.generate(seed="plain"))
    return pipeline


@pytest.fixture(scope="session")
def plain_artifacts(tmp_path_factory, plain_pipeline, plain_hex):
    """Directory holding the plain artifact triple and a valid witness."""
    directory = tmp_path_factory.mktemp("plain-artifacts")
    store = ArtifactStore(ArtifactConfig.from_directory(directory))
    plain_pipeline.save(store)
    store.save_witness(plain_hex)
    return directory


@pytest.fixture(scope="session")
def committed_pipeline():
    """Committed relation set up once. Slow: about 2000 constraints."""
    pipeline = ProofPipeline(COMMITTED)
    pipeline.compile()
    pipeline.setup(ToxicWaste.generate(seed="committed"))
    return pipeline


@pytest.fixture(scope="session")
def committed_artifacts(tmp_path_factory, committed_pipeline, committed_hex):
    directory = tmp_path_factory.mktemp("committed-artifacts")
    store = ArtifactStore(ArtifactConfig.from_directory(directory))
    committed_pipeline.save(store)
    store.save_witness(committed_hex)
    return directory


@pytest.fixture
def plain_boundary(plain_artifacts):
    ffi.configure(Settings(ArtifactConfig.from_directory(plain_artifacts), "plain"))
    yield plain_artifacts
    ffi.configure(None)


@pytest.fixture
def committed_boundary(committed_artifacts):
    ffi.configure(Settings(ArtifactConfig.from_directory(committed_artifacts), "committed"))
    yield committed_artifacts
    ffi.configure(None)
