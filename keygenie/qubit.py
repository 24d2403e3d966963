"""
Qubit: Alice's side of a single BB84 photon, plus the generator that
prepares a whole sequence of them.

Display map (fixed):
  Rectilinear (+) basis:  bit 0 = |0⟩ ↑,  bit 1 = |1⟩ →
  Diagonal    (×) basis:  bit 0 = |+⟩ ↗,  bit 1 = |-⟩ ↖
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, List, Tuple

from .errors import ConfigurationError

if TYPE_CHECKING:
    from .random_source import RandomSource


class Basis(str, Enum):
    RECTILINEAR = "rectilinear"
    DIAGONAL = "diagonal"

    @property
    def code(self) -> int:
        """0 for rectilinear, 1 for diagonal."""
        return 0 if self is Basis.RECTILINEAR else 1

    @property
    def symbol(self) -> str:
        return BASIS_SYMBOLS[self]

    @property
    def vector_labels(self) -> Tuple[str, str]:
        return BASIS_VECTOR_LABELS[self]

    @classmethod
    def from_code(cls, code: int) -> "Basis":
        if code not in (0, 1):
            raise ValueError(f"Basis code must be 0 or 1, got {code!r}")
        return cls.RECTILINEAR if code == 0 else cls.DIAGONAL


BASES: Tuple[Basis, Basis] = (Basis.RECTILINEAR, Basis.DIAGONAL)

BASIS_SYMBOLS = {
    Basis.RECTILINEAR: "+",
    Basis.DIAGONAL:    "×",
}

BASIS_VECTOR_LABELS = {
    Basis.RECTILINEAR: ("|0⟩", "|1⟩"),
    Basis.DIAGONAL:    ("|+⟩", "|-⟩"),
}

POLARIZATION_SYMBOLS = {
    (Basis.RECTILINEAR, 0): "↑",
    (Basis.RECTILINEAR, 1): "→",
    (Basis.DIAGONAL, 0):    "↗",
    (Basis.DIAGONAL, 1):    "↖",
}


def basis_vector_label(bit: int, basis: Basis) -> str:
    return BASIS_VECTOR_LABELS[Basis(basis)][bit]


def polarization_symbol(bit: int, basis: Basis) -> str:
    return POLARIZATION_SYMBOLS[(Basis(basis), bit)]


@dataclass(frozen=True)
class Qubit:
    """A single photon as Alice prepared it: a classical bit in a basis."""
    index: int
    bit: int
    basis: Basis

    def __post_init__(self):
        if self.bit not in (0, 1):
            raise ValueError(f"Bit must be 0 or 1, got {self.bit!r}")
        object.__setattr__(self, "basis", Basis(self.basis))

    # ------------------------------------------------------------------ #
    #  Derived display values                                              #
    # ------------------------------------------------------------------ #
    @property
    def basis_vector_label(self) -> str:
        return basis_vector_label(self.bit, self.basis)

    @property
    def polarization_symbol(self) -> str:
        return polarization_symbol(self.bit, self.basis)

    def __repr__(self) -> str:
        return (
            f"Qubit(index={self.index}, bit={self.bit}, "
            f"basis='{self.basis.symbol}', {self.basis_vector_label} {self.polarization_symbol})"
        )


def generate(count: int, source: "RandomSource") -> List[Qubit]:
    """
    Prepares *count* qubits, drawing the bit and then the basis for each
    position in index order.  A count of 0 yields an empty list.
    """
    if isinstance(count, bool) or not isinstance(count, int) or count < 0:
        raise ConfigurationError(f"Qubit count must be a non-negative integer, got {count!r}")
    qubits = []
    for index in range(count):
        bit = source.bit()
        basis = source.basis()
        qubits.append(Qubit(index=index, bit=bit, basis=basis))
    return qubits
