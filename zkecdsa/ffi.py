"""
Foreign-function boundary
=========================

C-layout records and three synchronous entry points over the pipeline:

    ProofResult RunProofVerification(void);
    ProofResult RunProofVerificationWithInputs(ProveInput input);
    void        FreeProofResult(ProofResult result);

**Ownership**:
  A failed call returns ``success = 0`` and an error message allocated
  with libc ``malloc``. The caller owns it and releases it with
  ``FreeProofResult`` exactly once. Freeing a NULL, unknown or
  already-freed pointer does nothing. Freed blocks go back to libc only
  after the next ``RETIRED_LIMIT`` frees, so a stale copy of a freed
  result never aliases a newer message within that window. A successful call returns
  ``success = 1`` and a NULL message.

**Failures**:
  Nothing raises across the boundary. Every failure becomes a message
  prefixed with its kind, e.g. ``decode error: field 'r' is not
  hexadecimal`` or ``verify error: ...``.

Artifacts are read fresh on every call.

Example:
    >>> result = RunProofVerificationWithInputs(ProveInput(b"...", ...))
    >>> if not result.success:
    ...     print(read_error_message(result))
    >>> FreeProofResult(result)
"""

import ctypes
import ctypes.util
import logging
from collections import deque, namedtuple

from zkecdsa.artifacts import ArtifactStore
from zkecdsa.circuit import relation_for
from zkecdsa.config import Settings
from zkecdsa.errors import DecodeError, PipelineStateError, ZkEcdsaError
from zkecdsa.pipeline import ProofPipeline
from zkecdsa.witness import WitnessCodec, read_c_fields

logger = logging.getLogger(__name__)


_libc = ctypes.CDLL(ctypes.util.find_library("c"))
_libc.malloc.argtypes = [ctypes.c_size_t]
_libc.malloc.restype = ctypes.c_void_p
_libc.free.argtypes = [ctypes.c_void_p]
_libc.free.restype = None

# addresses of messages handed out and not yet freed
_LIVE = set()

# freed messages, held back from libc so their addresses are not reused while
# a stale copy of the freed result may still be passed to FreeProofResult
_RETIRED = deque()
RETIRED_LIMIT = 1024

_settings = None


# ─────────────────────────────────────────────────────────────────────
# Records
# ─────────────────────────────────────────────────────────────────────

class ProveInput(ctypes.Structure):
    _fields_ = [
        ("msgHash", ctypes.c_char_p),
        ("r", ctypes.c_char_p),
        ("s", ctypes.c_char_p),
        ("pubX", ctypes.c_char_p),
        ("pubY", ctypes.c_char_p),
    ]


class ProveInputWithCommitment(ctypes.Structure):
    _fields_ = [
        ("msgHash", ctypes.c_char_p),
        ("r", ctypes.c_char_p),
        ("s", ctypes.c_char_p),
        ("pubX", ctypes.c_char_p),
        ("pubY", ctypes.c_char_p),
        ("pubCom", ctypes.c_char_p),
        ("nonce", ctypes.c_char_p),
    ]


class ProofResult(ctypes.Structure):
    _fields_ = [
        ("error_msg", ctypes.c_void_p),
        ("success", ctypes.c_int),
    ]


ProofOutcome = namedtuple("ProofOutcome", ["success", "error_message"])


# ─────────────────────────────────────────────────────────────────────
# Configuration and message ownership
# ─────────────────────────────────────────────────────────────────────

def configure(settings):
    """Set the boundary's settings; ``None`` goes back to the environment."""
    global _settings
    _settings = settings


def _current_settings():
    if _settings is None:
        return Settings.from_env()
    return _settings


def _alloc_message(text):
    data = (text or "unknown error").encode("utf-8", "replace")
    ptr = _libc.malloc(len(data) + 1)
    if not ptr:
        raise MemoryError("malloc failed for the error message")
    ctypes.memmove(ptr, data, len(data))
    ctypes.memset(ptr + len(data), 0, 1)
    _LIVE.add(ptr)
    return ptr


def live_allocations():
    """Number of error messages returned and not yet freed."""
    return len(_LIVE)


def read_error_message(result):
    """Borrow the message of ``result``; None on success or after free."""
    ptr = result.error_msg
    if not ptr or ptr not in _LIVE:
        return None
    return ctypes.string_at(ptr).decode("utf-8", "replace")


def _failure(text):
    return ProofResult(_alloc_message(text), 0)


def _success():
    return ProofResult(None, 1)


# ─────────────────────────────────────────────────────────────────────
# Entry points
# ─────────────────────────────────────────────────────────────────────

def _run(read_fields):
    try:
        settings = _current_settings()
        relation = relation_for(settings.variant)
        store = ArtifactStore(settings.artifacts)
        fields = WitnessCodec(relation).decode(read_fields(store))

        pipeline = ProofPipeline(relation)
        pipeline.load(store)
        pipeline.prove_and_verify(fields)
    except (ZkEcdsaError, PipelineStateError) as err:
        logger.warning("proof verification failed: %s: %s", err.kind, err)
        return _failure("{}: {}".format(err.kind, err))
    except Exception as err:
        logger.exception("unexpected failure in proof verification")
        return _failure("internal error: {}: {}".format(type(err).__name__, err))
    return _success()


def RunProofVerification():
    """Prove and verify the persisted witness against the persisted artifacts."""
    return _run(lambda store: store.load_witness())


def RunProofVerificationWithInputs(input_record):
    """Prove and verify caller-supplied fields against the persisted artifacts.

    ``input_record`` is a ``ProveInput`` or ``ProveInputWithCommitment``,
    or a pointer to one.
    """
    def read_fields(store):
        record = input_record
        if isinstance(record, ctypes._Pointer):
            if not record:
                raise DecodeError("input record is NULL")
            record = record.contents
        if record is None:
            raise DecodeError("input record is NULL")
        return read_c_fields(record)

    return _run(read_fields)


def FreeProofResult(result):
    """Release the message of ``result``. Safe to call more than once."""
    if isinstance(result, ctypes._Pointer):
        if not result:
            return
        result = result.contents
    ptr = result.error_msg
    if ptr and ptr in _LIVE:
        _retire(ptr)
    result.error_msg = None


def _retire(ptr):
    _LIVE.discard(ptr)
    _RETIRED.append(ptr)
    while len(_RETIRED) > RETIRED_LIMIT:
        _libc.free(_RETIRED.popleft())


# ─── Safe wrappers ───

def _collect(result):
    try:
        return ProofOutcome(bool(result.success), read_error_message(result))
    finally:
        FreeProofResult(result)


def run_from_files():
    return _collect(RunProofVerification())


def run_with_inputs(fields):
    """Call the boundary with a mapping of field name → hex string."""
    if set(fields) <= {name for name, _ in ProveInput._fields_}:
        record_type = ProveInput
    else:
        record_type = ProveInputWithCommitment
    known = {name for name, _ in record_type._fields_}
    unknown = sorted(set(fields) - known)
    if unknown:
        return ProofOutcome(False, "shape mismatch: unknown input fields {}".format(unknown))
    record = record_type(**{
        name: value.encode("ascii", "replace") if isinstance(value, str) else value
        for name, value in fields.items()
    })
    return _collect(RunProofVerificationWithInputs(record))
