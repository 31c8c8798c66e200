"""
Artifact store
==============

Persists the circuit, proving key and verifying key as opaque blobs and
the witness descriptor as a flat JSON object (field name → hex string).

Blobs are transported byte-for-byte; their structure belongs to the
Groth16 backend. Writes land in a temporary sibling file that is renamed
into place, so a reader sees either the old or the new file. The store
assumes one writer at a time and takes no locks.
"""

import json
import logging
import os
import tempfile

from zkecdsa.errors import ArtifactIOError

logger = logging.getLogger(__name__)

CIRCUIT = "circuit"
PROVING_KEY = "proving_key"
VERIFYING_KEY = "verifying_key"

BLOB_NAMES = (CIRCUIT, PROVING_KEY, VERIFYING_KEY)


class ArtifactStore:

    def __init__(self, config):
        self.config = config

    def path(self, name):
        if name not in BLOB_NAMES:
            raise ArtifactIOError("unknown artifact {!r}".format(name))
        return getattr(self.config, name + "_path")

    def exists(self, name):
        return os.path.isfile(self.path(name))

    # ─── Blobs ───

    def save(self, name, blob):
        path = self.path(name)
        _atomic_write(path, bytes(blob))
        logger.info("saved %s (%d bytes) to %s", name, len(blob), path)

    def load(self, name):
        path = self.path(name)
        try:
            with open(path, "rb") as f:
                return f.read()
        except OSError as err:
            raise ArtifactIOError("cannot read {} from {}: {}".format(
                name, path, err.strerror or err)) from err

    # ─── Witness descriptor ───

    def witness_exists(self):
        return os.path.isfile(self.config.witness_path)

    def save_witness(self, fields):
        path = self.config.witness_path
        text = json.dumps(dict(fields), indent=1)
        _atomic_write(path, text.encode("utf-8"))
        logger.info("saved witness descriptor to %s", path)

    def load_witness(self):
        """Read the witness descriptor.

        Returns:
            dict: field name → hex string

        Raises:
            ArtifactIOError: missing, unreadable, not JSON, or not a flat
                object of strings
        """
        path = self.config.witness_path
        try:
            with open(path, "rb") as f:
                data = json.loads(f.read().decode("utf-8"))
        except OSError as err:
            raise ArtifactIOError("cannot read witness from {}: {}".format(
                path, err.strerror or err)) from err
        except ValueError as err:
            raise ArtifactIOError("witness file {} is not valid JSON: {}".format(path, err)) from err

        if not isinstance(data, dict):
            raise ArtifactIOError("witness file {} must hold a JSON object".format(path))
        for key, value in data.items():
            if not isinstance(value, str):
                raise ArtifactIOError("witness field {!r} must be a hex string".format(key))
        return data


def _atomic_write(path, data):
    directory = os.path.dirname(os.path.abspath(path))
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp = tempfile.mkstemp(prefix=".tmp-", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
    except OSError as err:
        raise ArtifactIOError("cannot write {}: {}".format(path, err.strerror or err)) from err
