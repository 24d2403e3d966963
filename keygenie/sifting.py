"""
Basis reconciliation, key sifting and QBER analysis.

A record is kept for the final key only when Alice and Bob used the same
basis AND Bob's measurement agrees with Alice's bit.  Matching-basis
records that disagree are counted as errors and discarded.  The looser rule,
keeping every matching-basis bit regardless of error, is not used.
"""
from typing import List, Sequence

from .config import SECURITY_THRESHOLD_PERCENT
from .session_result import QberReport, QubitRecord


def compare_bases(records: Sequence[QubitRecord]) -> List[int]:
    """Indices (into *records*) where Alice's and Bob's bases match."""
    return [i for i, r in enumerate(records) if r.bases_match]


def calculate_qber(error_count: int, matching_bases: int) -> float:
    """QBER as a percentage; 0.0 when nothing was compared."""
    if matching_bases == 0:
        return 0.0
    return error_count / matching_bases * 100.0


def is_secure(qber_percent: float, threshold_percent: float = SECURITY_THRESHOLD_PERCENT) -> bool:
    """Strictly below the threshold is secure; exactly at it is not."""
    return qber_percent < threshold_percent


def sift(records: Sequence[QubitRecord]) -> QberReport:
    """Computes the QberReport for a complete, ordered set of records."""
    ordered = sorted(records, key=lambda r: r.index)
    total = len(ordered)

    matching, errors = 0, 0
    history = []
    final_key = []
    for r in ordered:
        if not r.bases_match:
            continue
        matching += 1
        if r.is_error:
            errors += 1
        else:
            final_key.append(r.alice_bit)
        history.append(calculate_qber(errors, matching))

    qber = calculate_qber(errors, matching)
    efficiency = len(final_key) / total * 100.0 if total else 0.0

    return QberReport(
        total_bits=total,
        matching_bases=matching,
        error_count=errors,
        qber_percent=qber,
        final_key_bits=tuple(final_key),
        efficiency_percent=efficiency,
        is_secure=is_secure(qber),
        security_threshold_percent=SECURITY_THRESHOLD_PERCENT,
        qber_history=tuple(history),
    )
