"""
Configuration
=============

Artifact locations are injected into ``ArtifactStore`` through an
``ArtifactConfig``; nothing reads module-level paths.

Environment (``Settings.from_env``):
  | variable              | default | meaning                       |
  |-----------------------|---------|-------------------------------|
  | ZKECDSA_ARTIFACT_DIR  | .       | directory of the four files   |
  | ZKECDSA_VARIANT       | plain   | ``plain`` or ``committed``    |
"""

import os
from dataclasses import dataclass, field

from zkecdsa.errors import ConfigError

CIRCUIT_FILE = "r1cs.bin"
PROVING_KEY_FILE = "proving_key.bin"
VERIFYING_KEY_FILE = "verifying_key.bin"
WITNESS_FILE = "witness_input.json"

VARIANTS = ("plain", "committed")


@dataclass(frozen=True)
class ArtifactConfig:
    circuit_path: str
    proving_key_path: str
    verifying_key_path: str
    witness_path: str

    @classmethod
    def from_directory(cls, directory):
        directory = os.fspath(directory)
        return cls(
            circuit_path=os.path.join(directory, CIRCUIT_FILE),
            proving_key_path=os.path.join(directory, PROVING_KEY_FILE),
            verifying_key_path=os.path.join(directory, VERIFYING_KEY_FILE),
            witness_path=os.path.join(directory, WITNESS_FILE),
        )


@dataclass(frozen=True)
class Settings:
    artifacts: ArtifactConfig = field(default_factory=lambda: ArtifactConfig.from_directory("."))
    variant: str = "plain"

    def __post_init__(self):
        if self.variant not in VARIANTS:
            raise ConfigError("unknown circuit variant {!r} (expected one of {})".format(
                self.variant, ", ".join(VARIANTS)))

    @classmethod
    def from_env(cls, environ=None):
        environ = os.environ if environ is None else environ
        directory = environ.get("ZKECDSA_ARTIFACT_DIR") or "."
        variant = (environ.get("ZKECDSA_VARIANT") or "plain").strip().lower()
        return cls(artifacts=ArtifactConfig.from_directory(directory), variant=variant)
