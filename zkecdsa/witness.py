"""
Witness codec
=============

Hex field strings ⇄ integers, checked against the element kind each field
has in the relation.

Decoding rules, in order:
  1. the field belongs to the relation            (else ShapeMismatch)
  2. non-empty, even length, hex digits only,
     no ``0x`` prefix, case-insensitive           (else DecodeError)
  3. at most the element's byte capacity (32)     (else DecodeError)
  4. big-endian unsigned value in the element's
     range (< modulus, r and s non-zero)          (else DecodeError)

Encoding is minimal big-endian lowercase hex of even length, ``0`` → ``"00"``.
"""

import string

from zkecdsa.errors import DecodeError, ShapeMismatch

_HEX_DIGITS = frozenset(string.hexdigits)


class WitnessCodec:

    def __init__(self, relation):
        self.relation = relation

    def _kind(self, name):
        kind = self.relation.kind_of(name)
        if kind is None:
            raise ShapeMismatch("field {!r} is not part of the {} relation (expected {})".format(
                name, self.relation.name, ", ".join(self.relation.field_names)))
        return kind

    def decode(self, hex_fields):
        """Decode a mapping of field name → hex string.

        Returns:
            dict: field name → int

        Raises:
            ShapeMismatch: a field is not part of the relation
            DecodeError: a value breaks the hex or range rules
        """
        values = {}
        for name, text in hex_fields.items():
            kind = self._kind(name)
            values[name] = decode_field(name, text, kind)
        return values

    def encode(self, fields):
        hex_fields = {}
        for name, value in fields.items():
            self._kind(name)
            hex_fields[name] = encode_value(value)
        return hex_fields


def decode_field(name, text, kind):
    if not isinstance(text, str):
        raise DecodeError("field {!r}: expected a hex string, got {}".format(
            name, type(text).__name__))
    if not text:
        raise DecodeError("field {!r} is empty".format(name))
    if not _HEX_DIGITS.issuperset(text):
        raise DecodeError("field {!r} is not hexadecimal".format(name))
    if len(text) % 2:
        raise DecodeError("field {!r} has odd length {}".format(name, len(text)))
    if len(text) // 2 > kind.byte_capacity:
        raise DecodeError("field {!r} is {} bytes, at most {} allowed".format(
            name, len(text) // 2, kind.byte_capacity))

    value = int.from_bytes(bytes.fromhex(text), "big")
    try:
        kind.check(value)
    except ValueError as err:
        raise DecodeError("field {!r}: {}".format(name, err)) from err
    return value


def encode_value(value):
    value = int(value)
    if value < 0:
        raise ValueError("cannot encode a negative value")
    text = format(value, "x")
    if len(text) % 2:
        text = "0" + text
    return text


def read_c_fields(record):
    """Copy the null-terminated strings of an FFI input record.

    NULL fields are left out, so they surface as missing fields.

    Raises:
        DecodeError: a field is not ASCII
    """
    fields = {}
    for name, _ in record._fields_:
        raw = getattr(record, name)
        if raw is None:
            continue
        try:
            fields[name] = raw.decode("ascii")
        except UnicodeDecodeError as err:
            raise DecodeError("field {!r} is not ASCII".format(name)) from err
    return fields
