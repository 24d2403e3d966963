"""
Quantum channel between Alice and Bob, with two perturbations:
  - Eavesdropping : Eve intercepts the photon with probability p_eve
  - Noise         : the channel flips the bit with probability p_noise

Per photon the draws are made in a fixed order (Bob's basis, interception,
noise, then any measurement coin) so a seeded source reproduces a run.
"""
from dataclasses import dataclass
from typing import Iterable, List

from .errors import ConfigurationError
from .qubit import Qubit
from .random_source import RandomSource
from .session_result import QubitRecord


def validate_probability(value: float, name: str) -> float:
    """Returns *value* as a float, or raises if it is not a probability."""
    if isinstance(value, bool):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from None
    if not 0.0 <= value <= 1.0:
        raise ConfigurationError(f"{name} must be a probability in [0, 1], got {value}")
    return value


@dataclass(frozen=True)
class ChannelModel:
    """Perturbation probabilities, both in [0, 1]."""
    noise_level: float = 0.0
    eavesdropping_level: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "noise_level", validate_probability(self.noise_level, "noise_level"))
        object.__setattr__(
            self, "eavesdropping_level",
            validate_probability(self.eavesdropping_level, "eavesdropping_level"),
        )


class QuantumChannel:
    """Carries Alice's qubits to Bob and records what he measures."""

    def __init__(self, model: ChannelModel, source: RandomSource):
        self.model = model
        self._source = source

    def transmit(self, qubit: Qubit) -> QubitRecord:
        source = self._source
        bob_basis = source.basis()
        intercepted = source.chance(self.model.eavesdropping_level)
        noisy = source.chance(self.model.noise_level)

        if bob_basis != qubit.basis:
            # Wrong basis: the outcome is a coin toss whatever else happened
            measurement = source.bit()
        else:
            measurement = qubit.bit
            if intercepted and source.chance(0.5):
                measurement ^= 1
            if noisy:
                measurement ^= 1

        return QubitRecord(
            index=qubit.index,
            alice_bit=qubit.bit,
            alice_basis=qubit.basis,
            bob_basis=bob_basis,
            bob_measurement=measurement,
            is_noisy=noisy,
            is_intercepted=intercepted,
        )

    def transmit_all(self, qubits: Iterable[Qubit]) -> List[QubitRecord]:
        return [self.transmit(q) for q in qubits]


def simulate_channel(
    qubit: Qubit,
    noise_level: float,
    eavesdropping_level: float,
    source: RandomSource,
) -> QubitRecord:
    """Single-photon convenience wrapper around QuantumChannel.transmit."""
    return QuantumChannel(ChannelModel(noise_level, eavesdropping_level), source).transmit(qubit)
