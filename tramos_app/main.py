"""Punto de entrada CLI de la calculadora de tramos."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfoNotFoundError

from .config import DEFAULT_TIMEZONE, SEGMENT_COUNT, TRAMO_TIMES
from .engine import AllocationError, InputShapeError, compute_allocation_report
from .importer import DaySheetImporter, report_to_frame
from .ledger import DayLedger
from .models import AllocationReport
from .schedule import active_segment_index, current_minutes, parse_time

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Calculadora de metas por tramo horario.")
    parser.add_argument(
        "--archivo",
        type=Path,
        help="Planilla CSV/Excel con columnas tramo, tipo (meta/venta) y monto.",
    )
    parser.add_argument(
        "--metas",
        nargs="*",
        default=[],
        help="Meta de cada tramo, en orden (ej: --metas 200000 150000 ...).",
    )
    parser.add_argument(
        "--ventas",
        nargs="*",
        default=[],
        help='Ventas de cada tramo separadas por coma (ej: --ventas "10000,5000" "" "7000").',
    )
    parser.add_argument(
        "--tramos",
        type=int,
        default=SEGMENT_COUNT,
        help=f"Cantidad de tramos del dia (por defecto {SEGMENT_COUNT}).",
    )
    parser.add_argument(
        "--zona",
        default=DEFAULT_TIMEZONE,
        help=f"Zona horaria para detectar el tramo activo (por defecto {DEFAULT_TIMEZONE}).",
    )
    parser.add_argument(
        "--ahora",
        help="Hora a usar en lugar del reloj para el tramo activo (ej: 14:30 o 02:30 PM).",
    )
    parser.add_argument("--verbose", action="store_true", help="Muestra el detalle de los calculos.")
    return parser


def ledger_from_args(metas: list[str], ventas: list[str], segment_count: int) -> DayLedger:
    """Arma el estado del dia a partir de los valores de la linea de comandos."""
    if len(metas) > segment_count or len(ventas) > segment_count:
        raise InputShapeError(f"Se indicaron mas valores que tramos ({segment_count})")
    ledger = DayLedger(segment_count)
    for index, value in enumerate(metas):
        ledger.set_target(index, value)
    for index, text in enumerate(ventas):
        for amount in text.split(","):
            if amount.strip():
                ledger.add_sale(index, amount)
    return ledger


def load_report(args: argparse.Namespace) -> AllocationReport:
    if args.archivo is not None:
        sheet = DaySheetImporter(segment_count=args.tramos).load(args.archivo)
        targets, sales_lists = sheet.as_inputs()
        return compute_allocation_report(targets, sales_lists, expected_segments=args.tramos)
    return ledger_from_args(args.metas, args.ventas, args.tramos).report()


def resolve_active_segment(args: argparse.Namespace, times: Optional[tuple[str, ...]]) -> Optional[int]:
    if times is None:
        return None
    minutes = parse_time(args.ahora) if args.ahora else current_minutes(args.zona)
    return active_segment_index(minutes, times)


def render_report(report: AllocationReport, times: Optional[tuple[str, ...]], active: Optional[int]) -> str:
    """Texto plano con la tabla de tramos, los traspasos y el resumen del dia."""
    frame = report_to_frame(report, times)
    frame.insert(0, "activo", ["*" if index == active else "" for index in range(len(frame))])
    lines = [frame.to_string(index=False, float_format=lambda value: f"{value:.2f}")]

    transfers = report.transfers()
    lines.append("")
    if transfers:
        lines.append("Traspasos de superavit:")
        for donor, receiver, amount in transfers:
            lines.append(f"  Tramo {donor + 1} -> Tramo {receiver + 1}: {amount:.2f}")
    else:
        lines.append("Sin traspasos de superavit.")
    for segment in report.segments:
        if segment.recovered:
            lines.append(f"  Tramo {segment.index + 1} recuperado.")

    totals = report.totals
    lines.extend(
        [
            "",
            f"Total de ventas: {totals.total_sales:.2f}",
            f"Meta diaria (suma de tramos): {totals.total_base_target:.2f}",
            f"Meta real (140%): {totals.inflated_target:.2f}",
            f"Cumplimiento meta diaria: {totals.percent_of_base:.2f}%",
            f"Cumplimiento meta real: {totals.percent_of_inflated:.2f}%",
            f"Falta para la meta diaria: {totals.remaining_for_base:.2f}",
        ]
    )
    if active is not None:
        lines.append(f"Deficit pendiente de tramos anteriores: {report.pending_deficit_before(active):.2f}")
    if totals.achieved_real_goal:
        lines.append("Meta real alcanzada!")
    elif totals.achieved_base_goal:
        lines.append("Meta diaria alcanzada.")
    return "\n".join(lines)


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    times = TRAMO_TIMES if args.tramos == len(TRAMO_TIMES) else None
    try:
        report = load_report(args)
        active = resolve_active_segment(args, times)
    except (AllocationError, OSError, ValueError, ZoneInfoNotFoundError) as exc:
        logger.debug("Fallo al calcular el reporte", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print(render_report(report, times, active))
    return 0


if __name__ == "__main__":
    sys.exit(main())
