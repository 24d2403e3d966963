"""
tests/test_bb84_session.py
Pytest unit tests for keygenie/bb84.py (session state machine and front-end facade).
"""
import pytest

from keygenie.bb84 import (
    Phase,
    SimulationSession,
    SimulationSettings,
    advance_step,
    create_session,
    get_report,
    reset_session,
    retreat_step,
    run_all,
    run_to_completion,
)
from keygenie.errors import ConfigurationError, SessionStateError
from keygenie.random_source import RandomSource


def _session(count=5, noise=0.0, eve=0.0, seed=7):
    return create_session(count, noise, eve, source=RandomSource(seed))


class TestStepMode:

    def test_create_starts_transmitting_at_zero(self) -> None:
        session = _session()
        snap = session.snapshot()
        assert snap.phase is Phase.TRANSMITTING
        assert snap.cursor == 0
        assert snap.total == 5
        assert snap.current == session.qubits[0]
        assert snap.revealed == session.qubits[:1]

    def test_five_advances_reach_comparing_then_done(self) -> None:
        session = _session(5)
        for _ in range(4):
            assert advance_step(session).phase is Phase.TRANSMITTING
        snap = advance_step(session)
        assert snap.phase is Phase.COMPARING
        assert snap.current is None
        assert len(snap.revealed) == 5
        assert advance_step(session).phase is Phase.DONE

    def test_cursor_tracks_advances(self) -> None:
        session = _session(5)
        for expected in (1, 2, 3):
            assert advance_step(session).cursor == expected
        assert session.snapshot().current.index == 3

    def test_retreat_from_three_returns_two(self) -> None:
        session = _session(5)
        for _ in range(3):
            advance_step(session)
        snap = retreat_step(session)
        assert snap.cursor == 2
        assert snap.current.index == 2

    def test_retreat_at_zero_is_noop(self) -> None:
        session = _session()
        before = session.snapshot()
        assert retreat_step(session) == before

    def test_advance_after_done_is_noop(self) -> None:
        session = _session(2)
        run_to_completion(session)
        before = session.snapshot()
        assert advance_step(session) == before
        assert before.phase is Phase.DONE

    def test_retreat_outside_transmitting_is_noop(self) -> None:
        session = _session(1)
        assert advance_step(session).phase is Phase.COMPARING
        assert retreat_step(session).phase is Phase.COMPARING

    def test_single_qubit_session(self) -> None:
        session = _session(1)
        assert advance_step(session).phase is Phase.COMPARING

    def test_qubits_computed_eagerly(self) -> None:
        """Stepping only changes what is revealed, never the records."""
        session = _session(6)
        before = session.qubits
        for _ in range(10):
            advance_step(session)
        assert session.qubits == before

    def test_running_qber_over_revealed_prefix(self) -> None:
        session = _session(20, noise=1.0)
        snap = session.snapshot()
        while snap.phase is Phase.TRANSMITTING:
            expected = 100.0 if any(r.bases_match for r in snap.revealed) else 0.0
            assert snap.running_qber_percent == expected
            snap = advance_step(session)


class TestReport:

    def test_not_ready_until_done(self) -> None:
        session = _session(3)
        assert get_report(session) is None
        advance_step(session)
        advance_step(session)
        advance_step(session)
        assert session.phase is Phase.COMPARING
        assert get_report(session) is None
        advance_step(session)
        assert get_report(session) is not None

    def test_report_is_idempotent(self) -> None:
        session = _session(12, noise=0.3, eve=0.4)
        run_to_completion(session)
        assert get_report(session) == get_report(session)

    def test_run_to_completion_mid_transmission(self) -> None:
        session = _session(8)
        advance_step(session)
        report = run_to_completion(session)
        assert session.phase is Phase.DONE
        assert report == get_report(session)
        assert report.total_bits == 8

    def test_run_to_completion_when_done_returns_same_report(self) -> None:
        session = _session(8)
        first = run_to_completion(session)
        assert run_to_completion(session) == first

    def test_same_seed_same_report(self) -> None:
        a = run_all(30, 0.1, 0.5, source=RandomSource(99))
        b = run_all(30, 0.1, 0.5, source=RandomSource(99))
        assert a == b

    def test_step_and_quick_run_agree(self) -> None:
        """Pacing does not change results for the same seed."""
        stepped = _session(15, noise=0.2, eve=0.3, seed=5)
        while stepped.phase is not Phase.DONE:
            advance_step(stepped)
        quick = run_all(15, 0.2, 0.3, source=RandomSource(5))
        assert get_report(stepped) == quick


class TestReset:

    @pytest.mark.parametrize("advances", [0, 2, 5, 6])
    def test_reset_from_any_phase(self, advances) -> None:
        session = _session(5)
        for _ in range(advances):
            advance_step(session)
        snap = reset_session(session)
        assert snap.phase is Phase.SETUP
        assert snap.cursor == 0
        assert snap.total == 0
        assert snap.revealed == ()
        assert session.qubits == ()
        assert get_report(session) is None

    def test_reset_then_run_reuses_settings(self) -> None:
        session = _session(9, noise=0.0, eve=0.0)
        reset_session(session)
        report = run_to_completion(session)
        assert report.total_bits == 9
        assert session.phase is Phase.DONE

    def test_advance_in_setup_is_noop(self) -> None:
        session = SimulationSession(RandomSource(1))
        assert session.advance().phase is Phase.SETUP

    def test_restart_after_reset(self) -> None:
        session = _session(4)
        reset_session(session)
        assert session.start(6).total == 6


class TestConfiguration:

    @pytest.mark.parametrize("count", [0, -3, 1.5, True])
    def test_bad_qubit_count(self, count) -> None:
        with pytest.raises(ConfigurationError, match="qubit_count"):
            create_session(count, 0.0, 0.0)

    @pytest.mark.parametrize("noise, eve", [(-0.1, 0.0), (1.5, 0.0), (0.0, 2.0), (0.0, -1)])
    def test_bad_levels(self, noise, eve) -> None:
        with pytest.raises(ConfigurationError):
            create_session(5, noise, eve)

    def test_bad_levels_rejected_by_run_all(self) -> None:
        with pytest.raises(ConfigurationError):
            run_all(5, 0.0, 40)

    def test_large_counts_accepted(self) -> None:
        assert run_all(500, source=RandomSource(1)).total_bits == 500

    def test_settings_normalise_to_float(self) -> None:
        settings = SimulationSettings(4, 0, 1)
        assert settings.noise_level == 0.0 and isinstance(settings.noise_level, float)

    def test_start_twice_raises(self) -> None:
        session = _session()
        with pytest.raises(SessionStateError):
            session.start(5)

    def test_run_all_outside_setup_raises(self) -> None:
        session = _session()
        with pytest.raises(SessionStateError):
            session.run_all(5)

    def test_run_to_completion_without_settings(self) -> None:
        with pytest.raises(SessionStateError):
            run_to_completion(SimulationSession())

    def test_failed_start_leaves_setup(self) -> None:
        session = SimulationSession()
        with pytest.raises(ConfigurationError):
            session.start(5, 3.0)
        assert session.phase is Phase.SETUP
        assert session.settings is None


class TestEndToEnd:

    def test_clean_channel_twenty_qubits(self) -> None:
        """No noise and no Eve: zero QBER, every matching bit kept."""
        report = run_all(20, 0.0, 0.0, source=RandomSource(2))
        assert report.qber_percent == 0.0
        assert report.error_count == 0
        assert report.final_key_length == report.matching_bases
        assert report.is_secure

    def test_clean_channel_efficiency_near_half(self) -> None:
        runs = [run_all(20, 0.0, 0.0, source=RandomSource(seed)) for seed in range(200)]
        mean = sum(r.efficiency_percent for r in runs) / len(runs)
        assert mean == pytest.approx(50.0, abs=3.0)
        assert all(r.qber_percent == 0.0 for r in runs)

    def test_full_eavesdropping_is_detected(self) -> None:
        report = run_all(400, 0.0, 1.0, source=RandomSource(8))
        assert report.qber_percent > 11.0
        assert not report.is_secure

    def test_kept_bits_are_error_free(self) -> None:
        session = SimulationSession(RandomSource(13))
        report = session.run_all(50, 0.2, 0.5)
        kept = [r for r in session.qubits if r.is_kept]
        assert all(r.alice_bit == r.bob_measurement for r in kept)
        assert report.final_key_bits == tuple(r.alice_bit for r in kept)
