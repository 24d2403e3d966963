"""
KeyGenie BB84 simulator — command-line runner
==============================================

    keygenie run --qubits 20 --noise 5 --eavesdropping 30 --seed 7
    keygenie run --qubits 8 --step          # walk the session one reveal at a time
    keygenie run --qubits 8 --json          # machine-readable report

Noise and eavesdropping are given in percent (0-100), as the UI sliders show them.
"""
import argparse
import json
import sys
from typing import List, Optional

from . import config
from .bb84 import Phase, SimulationSession
from .errors import KeyGenieError
from .logging_config import configure_logging, get_logger
from .random_source import RandomSource
from .session_result import QberReport, QubitRecord

log = get_logger("keygenie.cli")

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _format_row(r: QubitRecord) -> str:
    match = "yes" if r.bases_match else "no"
    if r.is_kept:
        status = "kept"
    elif r.is_error:
        status = "ERROR"
    else:
        status = "discarded"
    flags = ("N" if r.is_noisy else "-") + ("E" if r.is_intercepted else "-")
    return (
        f"{r.index:>4}  {r.alice_bit}  {r.alice_basis.symbol}  {r.basis_vector_label:<3} "
        f"{r.polarization_symbol}   {r.bob_basis.symbol}  {r.bob_measurement}  "
        f"{match:<5} {flags}  {status}"
    )


def _format_table(records: List[QubitRecord]) -> str:
    header = "   #  A  A+ ket pol  B+ B  match NE  status"
    return "\n".join([header] + [_format_row(r) for r in records])


def _format_report(report: QberReport) -> str:
    verdict = (
        f"Secure: QBER {report.qber_percent:.1f}% is below the "
        f"{report.security_threshold_percent:.0f}% threshold."
        if report.is_secure else
        f"Potentially compromised: QBER {report.qber_percent:.1f}% is at or above the "
        f"{report.security_threshold_percent:.0f}% threshold; discard the key."
    )
    return "\n".join([
        f"Total bits:      {report.total_bits}",
        f"Matching bases:  {report.matching_bases}",
        f"Errors:          {report.error_count}",
        f"QBER:            {report.qber_percent:.2f}%",
        f"Final key:       {report.final_key_string or '(empty)'}",
        f"Key length:      {report.final_key_length}",
        f"Efficiency:      {report.efficiency_percent:.1f}%",
        verdict,
    ])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="keygenie", description="BB84 quantum key distribution simulator")
    parser.add_argument("--log-level", default=None, type=str.upper, choices=LOG_LEVELS,
                        help="Console log level (default: KEYGENIE_LOG_LEVEL or INFO)")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Simulate one BB84 session")
    run.add_argument("--qubits", type=int, default=config.DEFAULT_QUBIT_COUNT, help="Number of qubits to send")
    run.add_argument("--noise", type=float, default=0.0, help="Channel noise in percent (0-100)")
    run.add_argument("--eavesdropping", type=float, default=0.0, help="Eavesdropping level in percent (0-100)")
    run.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    run.add_argument("--step", action="store_true", help="Print every step of the session")
    run.add_argument("--json", action="store_true", help="Print the records and report as JSON")
    return parser


def _run(args: argparse.Namespace) -> int:
    config.check_qubit_count(args.qubits)
    noise = config.percent_to_probability(args.noise, "noise")
    eavesdropping = config.percent_to_probability(args.eavesdropping, "eavesdropping")
    session = SimulationSession(RandomSource(args.seed))

    if args.step:
        snapshot = session.start(args.qubits, noise, eavesdropping)
        while snapshot.phase is not Phase.DONE:
            if snapshot.phase is Phase.TRANSMITTING and not args.json:
                print(f"[{snapshot.cursor + 1}/{snapshot.total}] {_format_row(snapshot.current)}  "
                      f"running QBER {snapshot.running_qber_percent:.1f}%")
            elif snapshot.phase is Phase.COMPARING and not args.json:
                print("Comparing bases over the public channel...")
            snapshot = session.advance()
        report = session.report
    else:
        report = session.run_all(args.qubits, noise, eavesdropping)

    if args.json:
        print(json.dumps({
            "records": [r.to_dict() for r in session.qubits],
            "report": report.to_dict(),
        }, ensure_ascii=False, indent=2))
    else:
        print(_format_table(list(session.qubits)))
        print()
        print(_format_report(report))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(console_level=(args.log_level or config.LOG_LEVEL).upper())

    try:
        if args.command == "run":
            return _run(args)
    except KeyGenieError as exc:
        log.error("%s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2
    parser.error(f"unknown command {args.command!r}")


if __name__ == "__main__":
    sys.exit(main())
