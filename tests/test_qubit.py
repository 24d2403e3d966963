"""
tests/test_qubit.py
Pytest unit tests for keygenie/qubit.py (display tables and the qubit generator).
"""
import pytest

from keygenie.errors import ConfigurationError
from keygenie.qubit import (
    BASES,
    Basis,
    Qubit,
    basis_vector_label,
    generate,
    polarization_symbol,
)
from keygenie.random_source import RandomSource

from tests.conftest import D, R, ScriptedSource

DISPLAY_TABLE = [
    (R, 0, "|0⟩", "↑"),
    (R, 1, "|1⟩", "→"),
    (D, 0, "|+⟩", "↗"),
    (D, 1, "|-⟩", "↖"),
]


class TestDisplayTable:
    """Labels and glyphs are a fixed function of (bit, basis)."""

    @pytest.mark.parametrize("basis, bit, label, glyph", DISPLAY_TABLE)
    def test_functions_match_table(self, basis, bit, label, glyph) -> None:
        assert basis_vector_label(bit, basis) == label
        assert polarization_symbol(bit, basis) == glyph

    @pytest.mark.parametrize("basis, bit, label, glyph", DISPLAY_TABLE)
    def test_qubit_properties_match_table(self, basis, bit, label, glyph) -> None:
        q = Qubit(index=0, bit=bit, basis=basis)
        assert q.basis_vector_label == label
        assert q.polarization_symbol == glyph

    def test_basis_metadata(self) -> None:
        """Symbols, 0/1 codes and vector pairs for both bases."""
        assert R.symbol == "+" and D.symbol == "×"
        assert R.code == 0 and D.code == 1
        assert Basis.from_code(1) is D
        assert R.vector_labels == ("|0⟩", "|1⟩")
        assert D.vector_labels == ("|+⟩", "|-⟩")

    def test_basis_accepts_plain_string(self) -> None:
        assert Qubit(index=0, bit=1, basis="diagonal").basis is D


class TestQubit:

    def test_rejects_non_binary_bit(self) -> None:
        with pytest.raises(ValueError, match="Bit must be 0 or 1"):
            Qubit(index=0, bit=2, basis=R)

    def test_is_immutable(self) -> None:
        q = Qubit(index=0, bit=0, basis=R)
        with pytest.raises(AttributeError):
            q.bit = 1  # type: ignore[misc]

    def test_bad_basis_code_raises(self) -> None:
        with pytest.raises(ValueError):
            Basis.from_code(2)


class TestGenerate:

    def test_draws_bit_then_basis_in_index_order(self) -> None:
        source = ScriptedSource(bits=[1, 0, 1], bases=[D, R, R])
        qubits = generate(3, source)
        assert [(q.index, q.bit, q.basis) for q in qubits] == [(0, 1, D), (1, 0, R), (2, 1, R)]

    def test_zero_count_is_empty(self) -> None:
        assert generate(0, RandomSource(seed=1)) == []

    @pytest.mark.parametrize("count", [-1, 2.5, True, "4"])
    def test_invalid_count_raises(self, count) -> None:
        with pytest.raises(ConfigurationError):
            generate(count, RandomSource(seed=1))

    def test_same_seed_same_qubits(self) -> None:
        assert generate(30, RandomSource(seed=5)) == generate(30, RandomSource(seed=5))

    def test_bits_and_bases_roughly_uniform(self) -> None:
        """Over 4000 draws each bit value and each basis appears 45-55% of the time."""
        qubits = generate(4000, RandomSource(seed=11))
        ones = sum(q.bit for q in qubits)
        diagonal = sum(1 for q in qubits if q.basis is D)
        assert 1800 < ones < 2200
        assert 1800 < diagonal < 2200
        assert set(q.basis for q in qubits) == set(BASES)
