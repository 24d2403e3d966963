"""
SimulationController
====================
Sits between the simulation engine and a Qt front end.

It owns:
  - A SimulationSession
  - A QTimer that paces reveals in auto-play mode
  - PyQt signals that the UI connects to

The session computes everything up front; the timer only decides *when*
the next qubit is revealed, so pacing never changes the results.
"""
from typing import Optional

from PyQt6.QtCore import QObject, QTimer, pyqtSignal

from keygenie import config
from keygenie.bb84 import Phase, SessionSnapshot, SimulationSession
from keygenie.logging_config import get_logger
from keygenie.random_source import RandomSource
from keygenie.session_result import QberReport

log = get_logger("keygenie.controller")


class SimulationController(QObject):

    # ---- Signals ----
    snapshot_changed = pyqtSignal(object)   # SessionSnapshot
    phase_changed    = pyqtSignal(str)      # Phase value
    session_complete = pyqtSignal(object)   # QberReport
    simulation_reset = pyqtSignal()
    log_message      = pyqtSignal(str)      # status-log text

    def __init__(self, parent=None, source: Optional[RandomSource] = None):
        super().__init__(parent)

        self._session = SimulationSession(source)

        # Timer drives auto-play
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._on_tick)

        # Settings (updated by the control panel before Start)
        self.qubit_count:         int   = config.DEFAULT_QUBIT_COUNT
        self.noise_percent:       float = 0.0
        self.eavesdropping_percent: float = 0.0
        self.speed_ms:            int   = config.AUTO_INTERVAL_MS

    # ------------------------------------------------------------------ #
    #  Properties                                                          #
    # ------------------------------------------------------------------ #
    @property
    def session(self) -> SimulationSession:
        return self._session

    @property
    def is_auto_playing(self) -> bool:
        return self._timer.isActive()

    # ------------------------------------------------------------------ #
    #  Public API                                                          #
    # ------------------------------------------------------------------ #
    def start(self) -> SessionSnapshot:
        """Start a fresh session in step mode (reveals are driven by step_once)."""
        self._timer.stop()
        if self._session.phase is not Phase.SETUP:
            self._session.reset()
        snapshot = self._session.start(
            config.check_qubit_count(self.qubit_count),
            config.percent_to_probability(self.noise_percent, "noise"),
            config.percent_to_probability(self.eavesdropping_percent, "eavesdropping"),
        )
        self.log_message.emit(
            f"Session started - {self.qubit_count} qubits, "
            f"noise={self.noise_percent:.0f}%, eavesdropping={self.eavesdropping_percent:.0f}%"
        )
        self._publish(snapshot, phase_changed=True)
        return snapshot

    def start_auto(self) -> SessionSnapshot:
        """Start a fresh session and reveal one qubit per timer tick."""
        snapshot = self.start()
        self._timer.start(self.speed_ms)
        return snapshot

    def pause(self) -> None:
        self._timer.stop()
        self.log_message.emit("Paused.")

    def resume(self) -> None:
        if self._session.phase in (Phase.TRANSMITTING, Phase.COMPARING):
            self._timer.start(self.speed_ms)
            self.log_message.emit("Resumed.")

    def step_once(self) -> SessionSnapshot:
        """Reveal exactly one more step (for step-through mode)."""
        self._timer.stop()
        return self._advance()

    def step_back(self) -> SessionSnapshot:
        self._timer.stop()
        before = self._session.cursor
        snapshot = self._session.retreat()
        if snapshot.cursor != before:
            self._publish(snapshot)
        return snapshot

    def run_quick(self) -> QberReport:
        """Skip the animation entirely and go straight to the report."""
        self._timer.stop()
        if self._session.phase is not Phase.SETUP:
            self._session.reset()
        report = self._session.run_all(
            config.check_qubit_count(self.qubit_count),
            config.percent_to_probability(self.noise_percent, "noise"),
            config.percent_to_probability(self.eavesdropping_percent, "eavesdropping"),
        )
        self._publish(self._session.snapshot(), phase_changed=True)
        self._finish(report)
        return report

    def reset(self) -> None:
        self._timer.stop()
        self._session.reset()
        self.simulation_reset.emit()
        self.phase_changed.emit(Phase.SETUP.value)
        self.log_message.emit("Reset.")

    def set_speed(self, ms: int) -> None:
        self.speed_ms = max(10, ms)
        if self._timer.isActive():
            self._timer.setInterval(self.speed_ms)

    # ------------------------------------------------------------------ #
    #  Internal                                                            #
    # ------------------------------------------------------------------ #
    def _on_tick(self) -> None:
        if self._session.phase in (Phase.SETUP, Phase.DONE):
            self._timer.stop()
            return
        self._advance()

    def _advance(self) -> SessionSnapshot:
        before = self._session.snapshot()
        snapshot = self._session.advance()
        if snapshot == before:
            return snapshot

        self._publish(snapshot, phase_changed=snapshot.phase is not before.phase)
        if snapshot.phase is Phase.COMPARING:
            self.log_message.emit("All qubits sent. Comparing bases...")
        elif snapshot.phase is Phase.DONE:
            self._timer.stop()
            self._finish(self._session.report)
        return snapshot

    def _publish(self, snapshot: SessionSnapshot, phase_changed: bool = False) -> None:
        self.snapshot_changed.emit(snapshot)
        if phase_changed:
            self.phase_changed.emit(snapshot.phase.value)

    def _finish(self, report: QberReport) -> None:
        self.session_complete.emit(report)
        status = "Secure key established." if report.is_secure else "Eavesdropping suspected -- discard the key!"
        self.log_message.emit(
            f"Session complete. QBER={report.qber_percent:.1f}%. "
            f"Final key: {report.final_key_length} bits. {status}"
        )
        log.info("Controller finished session: QBER=%.2f%%", report.qber_percent)
