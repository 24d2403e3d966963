from .errors import KeyGenieError, ConfigurationError, SessionStateError
from .qubit import Basis, BASES, Qubit, generate, basis_vector_label, polarization_symbol
from .random_source import RandomSource
from .quantum_channel import ChannelModel, QuantumChannel, simulate_channel
from .session_result import QubitRecord, QberReport
from .sifting import sift, calculate_qber, compare_bases, is_secure
from .bb84 import (
    Phase,
    SimulationSettings,
    SessionSnapshot,
    SimulationSession,
    create_session,
    advance_step,
    retreat_step,
    run_to_completion,
    reset_session,
    get_report,
    run_all,
)

__version__ = "1.0.0"
