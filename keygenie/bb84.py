"""
SimulationSession: orchestrates one BB84 run as an explicit state machine.

    Setup --start()--> Transmitting --advance()...--> Comparing --advance()--> Done
    Setup --run_all()-------------------------------------------------------> Done
    any   --reset()--> Setup

All qubits are generated and sent through the channel eagerly on start();
step mode only paces how many of them are revealed.  The session never
sleeps or waits; animation delay belongs to the caller.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from .errors import ConfigurationError, SessionStateError
from .logging_config import get_logger
from .quantum_channel import ChannelModel, QuantumChannel
from .qubit import generate
from .random_source import RandomSource
from .session_result import QberReport, QubitRecord
from .sifting import sift

log = get_logger("keygenie.engine")


class Phase(str, Enum):
    SETUP = "setup"
    TRANSMITTING = "transmitting"
    COMPARING = "comparing"
    DONE = "done"


@dataclass(frozen=True)
class SimulationSettings:
    """Validated parameters for one run."""
    qubit_count: int
    noise_level: float = 0.0
    eavesdropping_level: float = 0.0

    def __post_init__(self):
        count = self.qubit_count
        if isinstance(count, bool) or not isinstance(count, int) or count <= 0:
            raise ConfigurationError(f"qubit_count must be a positive integer, got {count!r}")
        # ChannelModel validates and normalises both probabilities
        model = ChannelModel(self.noise_level, self.eavesdropping_level)
        object.__setattr__(self, "noise_level", model.noise_level)
        object.__setattr__(self, "eavesdropping_level", model.eavesdropping_level)

    @property
    def channel_model(self) -> ChannelModel:
        return ChannelModel(self.noise_level, self.eavesdropping_level)


@dataclass(frozen=True)
class SessionSnapshot:
    """What a front end needs to draw the session at this moment."""
    phase: Phase
    cursor: int
    total: int
    current: Optional[QubitRecord]
    revealed: Tuple[QubitRecord, ...]
    running_qber_percent: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "cursor": self.cursor,
            "total": self.total,
            "current": self.current.to_dict() if self.current else None,
            "revealed": [r.to_dict() for r in self.revealed],
            "running_qber_percent": self.running_qber_percent,
        }


class SimulationSession:
    """One independently owned BB84 simulation."""

    def __init__(self, source: Optional[RandomSource] = None):
        self._source = source or RandomSource()
        self.settings: Optional[SimulationSettings] = None
        self._qubits: List[QubitRecord] = []
        self._phase = Phase.SETUP
        self._cursor = 0

    # ------------------------------------------------------------------ #
    #  Properties                                                          #
    # ------------------------------------------------------------------ #
    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def qubits(self) -> Tuple[QubitRecord, ...]:
        return tuple(self._qubits)

    @property
    def report(self) -> Optional[QberReport]:
        """The QBER report, or None until the session is Done."""
        if self._phase is not Phase.DONE:
            return None
        return sift(self._qubits)

    # ------------------------------------------------------------------ #
    #  Transitions                                                         #
    # ------------------------------------------------------------------ #
    def start(self, qubit_count: int, noise_level: float = 0.0,
              eavesdropping_level: float = 0.0) -> SessionSnapshot:
        """Setup -> Transmitting.  Generates and transmits every qubit up front."""
        settings = SimulationSettings(qubit_count, noise_level, eavesdropping_level)
        self._require_setup("start")
        self._transmit(settings)
        self._phase = Phase.TRANSMITTING
        log.debug("Session started in step mode: %d qubits", settings.qubit_count)
        return self.snapshot()

    def run_all(self, qubit_count: int, noise_level: float = 0.0,
                eavesdropping_level: float = 0.0) -> QberReport:
        """Setup -> Done in one call (quick run)."""
        settings = SimulationSettings(qubit_count, noise_level, eavesdropping_level)
        self._require_setup("run_all")
        self._transmit(settings)
        return self._finish()

    def advance(self) -> SessionSnapshot:
        if self._phase is Phase.TRANSMITTING:
            if self._cursor < len(self._qubits) - 1:
                self._cursor += 1
            else:
                self._phase = Phase.COMPARING
                log.debug("All %d qubits revealed; comparing bases", len(self._qubits))
        elif self._phase is Phase.COMPARING:
            self._finish()
        return self.snapshot()

    def retreat(self) -> SessionSnapshot:
        if self._phase is Phase.TRANSMITTING and self._cursor > 0:
            self._cursor -= 1
        return self.snapshot()

    def run_to_completion(self) -> QberReport:
        """Jumps from any phase straight to Done and returns the report."""
        if self._phase is Phase.DONE:
            return self.report
        if self._phase is Phase.SETUP:
            if self.settings is None:
                raise SessionStateError("Session has no settings; call start() or run_all() first")
            self._transmit(self.settings)
        return self._finish()

    def reset(self) -> SessionSnapshot:
        """Any phase -> Setup.  The last settings are remembered, nothing else."""
        self._qubits = []
        self._cursor = 0
        self._phase = Phase.SETUP
        log.debug("Session reset")
        return self.snapshot()

    # ------------------------------------------------------------------ #
    #  Views                                                               #
    # ------------------------------------------------------------------ #
    def snapshot(self) -> SessionSnapshot:
        if self._phase is Phase.SETUP:
            revealed: Tuple[QubitRecord, ...] = ()
            current = None
        elif self._phase is Phase.TRANSMITTING:
            revealed = tuple(self._qubits[:self._cursor + 1])
            current = self._qubits[self._cursor]
        else:
            revealed = tuple(self._qubits)
            current = None

        return SessionSnapshot(
            phase=self._phase,
            cursor=self._cursor,
            total=len(self._qubits),
            current=current,
            revealed=revealed,
            running_qber_percent=sift(revealed).qber_percent,
        )

    # ------------------------------------------------------------------ #
    #  Internal                                                            #
    # ------------------------------------------------------------------ #
    def _require_setup(self, operation: str) -> None:
        if self._phase is not Phase.SETUP:
            raise SessionStateError(
                f"{operation}() needs a session in the setup phase, not {self._phase.value}; "
                f"reset() it first"
            )

    def _transmit(self, settings: SimulationSettings) -> None:
        self.settings = settings
        qubits = generate(settings.qubit_count, self._source)
        channel = QuantumChannel(settings.channel_model, self._source)
        self._qubits = channel.transmit_all(qubits)
        self._cursor = 0

    def _finish(self) -> QberReport:
        self._phase = Phase.DONE
        report = sift(self._qubits)
        log.info(
            "Session complete: %d bits, %d matching, QBER=%.2f%%, key=%d bits, %s",
            report.total_bits, report.matching_bases, report.qber_percent,
            report.final_key_length, "secure" if report.is_secure else "COMPROMISED",
        )
        return report

    def __repr__(self) -> str:
        return (
            f"SimulationSession(phase={self._phase.value}, cursor={self._cursor}, "
            f"qubits={len(self._qubits)})"
        )


# ------------------------------------------------------------------ #
#  Front-end facade                                                    #
# ------------------------------------------------------------------ #
def create_session(qubit_count: int, noise_level: float = 0.0, eavesdropping_level: float = 0.0,
                   source: Optional[RandomSource] = None) -> SimulationSession:
    """Creates a session already started in step mode (phase Transmitting)."""
    session = SimulationSession(source)
    session.start(qubit_count, noise_level, eavesdropping_level)
    return session


def advance_step(session: SimulationSession) -> SessionSnapshot:
    return session.advance()


def retreat_step(session: SimulationSession) -> SessionSnapshot:
    return session.retreat()


def run_to_completion(session: SimulationSession) -> QberReport:
    return session.run_to_completion()


def reset_session(session: SimulationSession) -> SessionSnapshot:
    return session.reset()


def get_report(session: SimulationSession) -> Optional[QberReport]:
    return session.report


def run_all(qubit_count: int, noise_level: float = 0.0, eavesdropping_level: float = 0.0,
            source: Optional[RandomSource] = None) -> QberReport:
    """Quick run on a throwaway session."""
    return SimulationSession(source).run_all(qubit_count, noise_level, eavesdropping_level)
