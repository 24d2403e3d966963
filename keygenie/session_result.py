"""
Per-qubit record and QBER report dataclasses.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

from .config import SECURITY_THRESHOLD_PERCENT
from .qubit import Basis, basis_vector_label, polarization_symbol


@dataclass(frozen=True)
class QubitRecord:
    """Complete, immutable history of one photon exchange."""
    index: int

    # Alice's side
    alice_bit: int
    alice_basis: Basis

    # Bob's side
    bob_basis: Basis
    bob_measurement: int

    # Channel perturbations
    is_noisy: bool = False
    is_intercepted: bool = False

    def __post_init__(self):
        if self.alice_bit not in (0, 1):
            raise ValueError(f"alice_bit must be 0 or 1, got {self.alice_bit!r}")
        if self.bob_measurement not in (0, 1):
            raise ValueError(f"bob_measurement must be 0 or 1, got {self.bob_measurement!r}")
        object.__setattr__(self, "alice_basis", Basis(self.alice_basis))
        object.__setattr__(self, "bob_basis", Basis(self.bob_basis))

    @property
    def basis_vector_label(self) -> str:
        return basis_vector_label(self.alice_bit, self.alice_basis)

    @property
    def polarization_symbol(self) -> str:
        return polarization_symbol(self.alice_bit, self.alice_basis)

    @property
    def bases_match(self) -> bool:
        return self.alice_basis == self.bob_basis

    @property
    def is_error(self) -> bool:
        """Matching bases but Bob disagrees with Alice: a detected error."""
        return self.bases_match and self.alice_bit != self.bob_measurement

    @property
    def is_kept(self) -> bool:
        """Survives sifting: matching bases and an error-free measurement."""
        return self.bases_match and self.alice_bit == self.bob_measurement

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "alice_bit": self.alice_bit,
            "alice_basis": self.alice_basis.value,
            "basis_vector_label": self.basis_vector_label,
            "polarization_symbol": self.polarization_symbol,
            "bob_basis": self.bob_basis.value,
            "is_noisy": self.is_noisy,
            "is_intercepted": self.is_intercepted,
            "bob_measurement": self.bob_measurement,
            "bases_match": self.bases_match,
            "is_error": self.is_error,
            "is_kept": self.is_kept,
        }


@dataclass(frozen=True)
class QberReport:
    """Sifting and QBER results for a complete set of records."""
    total_bits: int = 0
    matching_bases: int = 0
    error_count: int = 0
    qber_percent: float = 0.0
    final_key_bits: Tuple[int, ...] = ()
    efficiency_percent: float = 0.0
    is_secure: bool = True
    security_threshold_percent: float = SECURITY_THRESHOLD_PERCENT
    qber_history: Tuple[float, ...] = field(default=())   # cumulative QBER per comparison

    @property
    def final_key_length(self) -> int:
        return len(self.final_key_bits)

    @property
    def discarded_count(self) -> int:
        return self.total_bits - self.final_key_length

    @property
    def final_key_string(self) -> str:
        return "".join(str(b) for b in self.final_key_bits)

    @property
    def final_key_hex(self) -> str:
        if not self.final_key_bits:
            return ""
        width = (len(self.final_key_bits) + 3) // 4
        return format(int(self.final_key_string, 2), f"0{width}X")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_bits": self.total_bits,
            "matching_bases": self.matching_bases,
            "error_count": self.error_count,
            "qber_percent": self.qber_percent,
            "final_key_bits": list(self.final_key_bits),
            "final_key_length": self.final_key_length,
            "final_key_string": self.final_key_string,
            "final_key_hex": self.final_key_hex,
            "discarded_count": self.discarded_count,
            "efficiency_percent": self.efficiency_percent,
            "is_secure": self.is_secure,
            "security_threshold_percent": self.security_threshold_percent,
            "qber_history": list(self.qber_history),
        }
