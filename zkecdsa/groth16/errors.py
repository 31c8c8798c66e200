"""Exceptions raised by the Groth16 backend."""


class Groth16Error(Exception):
    pass


class ConstraintSystemError(Groth16Error):
    """The circuit definition is malformed (compile time)."""


class UnsatisfiedConstraint(Groth16Error):
    """The assignment does not satisfy the constraint system."""

    def __init__(self, index, label=None):
        self.index = index
        self.label = label
        where = f"constraint #{index}"
        if label:
            where += f" ({label})"
        super().__init__(f"{where} is not satisfied")


class AssignmentError(Groth16Error):
    """Inputs missing, unexpected or out of range for the circuit."""


class KeyMismatch(Groth16Error):
    """A key was not generated for the circuit it is used with."""


class SerializationError(Groth16Error):
    """A blob is truncated, corrupt or of an unknown version."""
