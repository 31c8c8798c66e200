"""
Groth16 artifact serialization
==============================

Circuits and keys travel as opaque, versioned binary blobs:

    | bytes | content                               |
    |-------|---------------------------------------|
    | 4     | magic b"ZKEC"                          |
    | 1     | format version                        |
    | 1     | kind: b"C" circuit, b"P" pk, b"V" vk  |
    | 8     | payload length, big endian            |
    | 32    | sha256(payload)                       |
    | ...   | payload: zlib(canonical JSON)         |

Group elements are stored affine with decimal-string coordinates, the point
at infinity as null.
"""

import hashlib
import json
import struct
import zlib

from zkecdsa.field import g1_from_affine, g1_to_affine, g2_from_affine, g2_to_affine
from zkecdsa.groth16.constraint_system import R1CS
from zkecdsa.groth16.errors import SerializationError
from zkecdsa.groth16.setup import ProvingKey, VerifyingKey

MAGIC = b"ZKEC"
FORMAT_VERSION = 1

KIND_CIRCUIT = b"C"
KIND_PROVING_KEY = b"P"
KIND_VERIFYING_KEY = b"V"

_HEADER = struct.Struct(">4sBcQ32s")


# ─── G1 point ───

def serialize_g1(point):
    """G1 point → [str, str] or None"""
    coords = g1_to_affine(point)
    if coords is None:
        return None
    return [str(coords[0]), str(coords[1])]


def deserialize_g1(data):
    """[str, str] or None → G1 point"""
    if data is None:
        return g1_from_affine(None)
    return g1_from_affine((int(data[0]), int(data[1])))


# ─── G2 point ───

def serialize_g2(point):
    """G2 point → [[str,str],[str,str]] or None"""
    coords = g2_to_affine(point)
    if coords is None:
        return None
    (x0, x1), (y0, y1) = coords
    return [[str(x0), str(x1)], [str(y0), str(y1)]]


def deserialize_g2(data):
    """[[str,str],[str,str]] or None → G2 point"""
    if data is None:
        return g2_from_affine(None)
    return g2_from_affine((
        (int(data[0][0]), int(data[0][1])),
        (int(data[1][0]), int(data[1][1])),
    ))


# ─── Keys ───

def serialize_proving_key(pk):
    return {
        "circuit_digest": pk.circuit_digest,
        "setup_id": pk.setup_id,
        "domain_size": pk.domain_size,
        "num_public": pk.num_public,
        "alpha_g1": serialize_g1(pk.alpha_g1),
        "beta_g1": serialize_g1(pk.beta_g1),
        "beta_g2": serialize_g2(pk.beta_g2),
        "delta_g1": serialize_g1(pk.delta_g1),
        "delta_g2": serialize_g2(pk.delta_g2),
        "a_query": [serialize_g1(p) for p in pk.a_query],
        "b_g1_query": [serialize_g1(p) for p in pk.b_g1_query],
        "b_g2_query": [serialize_g2(p) for p in pk.b_g2_query],
        "l_query": [serialize_g1(p) for p in pk.l_query],
        "h_query": [serialize_g1(p) for p in pk.h_query],
    }


def deserialize_proving_key(data):
    return ProvingKey(
        circuit_digest=data["circuit_digest"],
        setup_id=data["setup_id"],
        domain_size=int(data["domain_size"]),
        num_public=int(data["num_public"]),
        alpha_g1=deserialize_g1(data["alpha_g1"]),
        beta_g1=deserialize_g1(data["beta_g1"]),
        beta_g2=deserialize_g2(data["beta_g2"]),
        delta_g1=deserialize_g1(data["delta_g1"]),
        delta_g2=deserialize_g2(data["delta_g2"]),
        a_query=[deserialize_g1(p) for p in data["a_query"]],
        b_g1_query=[deserialize_g1(p) for p in data["b_g1_query"]],
        b_g2_query=[deserialize_g2(p) for p in data["b_g2_query"]],
        l_query=[deserialize_g1(p) for p in data["l_query"]],
        h_query=[deserialize_g1(p) for p in data["h_query"]],
    )


def serialize_verifying_key(vk):
    return {
        "circuit_digest": vk.circuit_digest,
        "setup_id": vk.setup_id,
        "alpha_g1": serialize_g1(vk.alpha_g1),
        "beta_g2": serialize_g2(vk.beta_g2),
        "gamma_g2": serialize_g2(vk.gamma_g2),
        "delta_g2": serialize_g2(vk.delta_g2),
        "ic": [serialize_g1(p) for p in vk.ic],
    }


def deserialize_verifying_key(data):
    return VerifyingKey(
        circuit_digest=data["circuit_digest"],
        setup_id=data["setup_id"],
        alpha_g1=deserialize_g1(data["alpha_g1"]),
        beta_g2=deserialize_g2(data["beta_g2"]),
        gamma_g2=deserialize_g2(data["gamma_g2"]),
        delta_g2=deserialize_g2(data["delta_g2"]),
        ic=[deserialize_g1(p) for p in data["ic"]],
    )


# ─── Blob framing ───

def pack(kind, obj):
    payload = zlib.compress(
        json.dumps(obj, sort_keys=True, separators=(",", ":")).encode())
    header = _HEADER.pack(MAGIC, FORMAT_VERSION, kind, len(payload),
                          hashlib.sha256(payload).digest())
    return header + payload


def unpack(kind, blob):
    """Validate the framing of ``blob`` and return its decoded JSON object.

    Raises:
        SerializationError: truncated, corrupt, wrong kind or unknown version
    """
    blob = bytes(blob)
    if len(blob) < _HEADER.size:
        raise SerializationError("blob is truncated ({} bytes)".format(len(blob)))
    magic, version, blob_kind, length, digest = _HEADER.unpack_from(blob)
    if magic != MAGIC:
        raise SerializationError("not a zkecdsa artifact (bad magic)")
    if version != FORMAT_VERSION:
        raise SerializationError(f"unsupported artifact format version {version}")
    if blob_kind != kind:
        raise SerializationError("artifact kind {!r}, expected {!r}".format(
            blob_kind.decode(errors="replace"), kind.decode()))
    payload = blob[_HEADER.size:]
    if len(payload) != length:
        raise SerializationError(
            "artifact payload is {} bytes, header says {}".format(len(payload), length))
    if hashlib.sha256(payload).digest() != digest:
        raise SerializationError("artifact checksum mismatch")
    try:
        return json.loads(zlib.decompress(payload))
    except (zlib.error, ValueError) as err:
        raise SerializationError(f"artifact payload is corrupt: {err}") from err


def _decode(kind, blob, fn):
    data = unpack(kind, blob)
    try:
        return fn(data)
    except (KeyError, IndexError, TypeError, ValueError) as err:
        raise SerializationError(f"artifact content is invalid: {err}") from err


def circuit_to_bytes(r1cs):
    return pack(KIND_CIRCUIT, r1cs.to_dict())


def circuit_from_bytes(blob):
    return _decode(KIND_CIRCUIT, blob, R1CS.from_dict)


def proving_key_to_bytes(pk):
    return pack(KIND_PROVING_KEY, serialize_proving_key(pk))


def proving_key_from_bytes(blob):
    return _decode(KIND_PROVING_KEY, blob, deserialize_proving_key)


def verifying_key_to_bytes(vk):
    return pack(KIND_VERIFYING_KEY, serialize_verifying_key(vk))


def verifying_key_from_bytes(blob):
    return _decode(KIND_VERIFYING_KEY, blob, deserialize_verifying_key)
