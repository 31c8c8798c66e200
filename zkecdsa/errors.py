"""Typed failures of the proof lifecycle.

Each error carries a ``kind`` label; the FFI boundary prefixes result
messages with it so callers can tell a decode failure from a rejected
proof.
"""


class ZkEcdsaError(Exception):
    kind = "error"


class ArtifactIOError(ZkEcdsaError):
    """Artifact or witness file missing, unreadable, truncated or corrupt."""
    kind = "io error"


class DecodeError(ZkEcdsaError):
    """Malformed hex field: not hex, odd length, empty, oversized or out of range."""
    kind = "decode error"


class ShapeMismatch(ZkEcdsaError):
    """Witness fields do not match the circuit's public/private partition."""
    kind = "shape mismatch"


class CompileError(ZkEcdsaError):
    kind = "compile error"


class SetupError(ZkEcdsaError):
    kind = "setup error"


class ProveError(ZkEcdsaError):
    """The witness does not satisfy the relation."""
    kind = "prove error"


class VerifyError(ZkEcdsaError):
    """The proof does not validate against the verifying key and public witness."""
    kind = "verify error"


class ConfigError(ZkEcdsaError):
    kind = "config error"


class PipelineStateError(RuntimeError):
    """A pipeline operation was called in the wrong lifecycle state."""
    kind = "pipeline state error"
