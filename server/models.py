"""
models.py — Pydantic schemas for request/response validation.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field

from keygenie import config
from keygenie.bb84 import SessionSnapshot
from keygenie.session_result import QberReport, QubitRecord


# ── Requests ─────────────────────────────────────────────────────────── #

class SessionCreate(BaseModel):
    qubit_count: int = Field(config.DEFAULT_QUBIT_COUNT, ge=config.QUBIT_COUNT_MIN, le=config.QUBIT_COUNT_MAX)
    noise_percent: float = Field(0.0, ge=0.0, le=100.0)
    eavesdropping_percent: float = Field(0.0, ge=0.0, le=100.0)
    seed: Optional[int] = None     # reproducible run when set


# ── Responses ────────────────────────────────────────────────────────── #

class QubitRecordOut(BaseModel):
    index: int
    alice_bit: int
    alice_basis: str               # "rectilinear" | "diagonal"
    basis_vector_label: str
    polarization_symbol: str
    bob_basis: str
    is_noisy: bool
    is_intercepted: bool
    bob_measurement: int
    bases_match: bool
    is_error: bool
    is_kept: bool

    @classmethod
    def from_record(cls, record: QubitRecord) -> "QubitRecordOut":
        return cls(**record.to_dict())


class QberReportOut(BaseModel):
    total_bits: int
    matching_bases: int
    error_count: int
    qber_percent: float
    final_key_bits: List[int] = []
    final_key_length: int
    final_key_string: str = ""
    final_key_hex: str = ""
    discarded_count: int
    efficiency_percent: float
    is_secure: bool
    security_threshold_percent: float
    qber_history: List[float] = []

    @classmethod
    def from_report(cls, report: QberReport) -> "QberReportOut":
        return cls(**report.to_dict())


class SnapshotOut(BaseModel):
    session_id: str
    phase: str                     # "setup" | "transmitting" | "comparing" | "done"
    cursor: int
    total: int
    current: Optional[QubitRecordOut] = None
    revealed: List[QubitRecordOut] = []
    running_qber_percent: float = 0.0

    @classmethod
    def from_snapshot(cls, session_id: str, snapshot: SessionSnapshot) -> "SnapshotOut":
        return cls(
            session_id=session_id,
            phase=snapshot.phase.value,
            cursor=snapshot.cursor,
            total=snapshot.total,
            current=QubitRecordOut.from_record(snapshot.current) if snapshot.current else None,
            revealed=[QubitRecordOut.from_record(r) for r in snapshot.revealed],
            running_qber_percent=snapshot.running_qber_percent,
        )


class ReportEnvelope(BaseModel):
    session_id: str
    ready: bool = False
    report: Optional[QberReportOut] = None
