"""Motor de asignacion de metas por tramo.

El calculo se hace en tres etapas, siempre en este orden:

1. Agregacion: total vendido, deficit y superavit bruto de cada tramo.
2. Redistribucion: el superavit de un tramo cubre deficits de tramos
   anteriores, empezando por el mas cercano (``i-1`` hacia ``0``).
3. Consolidado: totales del dia, meta base, meta real (base * 1.40) y
   porcentajes de cumplimiento.

Todas las funciones son puras: no modifican sus entradas ni guardan estado.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from typing import Any, Optional

from .config import REAL_TARGET_MULTIPLIER
from .models import (
    AllocationReport,
    Contribution,
    ReportTotals,
    SegmentFigures,
    SegmentReport,
)

logger = logging.getLogger(__name__)


class AllocationError(ValueError):
    """Error base del motor de tramos."""


class InputShapeError(AllocationError):
    """Las listas de metas y ventas no tienen la forma esperada."""


class InvalidAmountError(AllocationError):
    """Monto de venta o meta invalido al momento de registrarlo."""


class SegmentIndexError(AllocationError, IndexError):
    """Indice de tramo fuera del rango configurado."""


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return None
    if not math.isfinite(number):
        return None
    return number


def _safe_target(value: Any, index: int) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        # Meta sin asignar.
        return 0.0
    number = _as_number(value)
    if number is None or number < 0:
        logger.warning("Meta invalida en tramo %d (%r); se usa 0", index, value)
        return 0.0
    return number


def _safe_amount(value: Any, index: int) -> float:
    raw = getattr(value, "amount", value)
    number = _as_number(raw)
    if number is None or number <= 0:
        logger.warning("Venta invalida en tramo %d (%r); se usa 0", index, raw)
        return 0.0
    return number


def _percent(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator * 100


def validate_shape(
    targets: Sequence[Any],
    sales_lists: Sequence[Sequence[Any]],
    expected_segments: Optional[int] = None,
) -> int:
    """Verifica que ambas entradas tengan un elemento por tramo y devuelve ``n``."""
    for name, value in (("targets", targets), ("sales_lists", sales_lists)):
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise InputShapeError(f"{name} debe ser una secuencia, se recibio {type(value).__name__}")
    if len(targets) != len(sales_lists):
        raise InputShapeError(
            f"Cantidad de metas ({len(targets)}) distinta a cantidad de listas de ventas ({len(sales_lists)})"
        )
    if expected_segments is not None and len(targets) != expected_segments:
        raise InputShapeError(
            f"Se esperaban {expected_segments} tramos y se recibieron {len(targets)}"
        )
    for index, sales in enumerate(sales_lists):
        if isinstance(sales, (str, bytes)) or not isinstance(sales, Sequence):
            raise InputShapeError(f"Las ventas del tramo {index} deben ser una secuencia")
    return len(targets)


def aggregate_segments(
    targets: Sequence[Any],
    sales_lists: Sequence[Sequence[Any]],
) -> list[SegmentFigures]:
    """Reduce cada tramo a su meta, total vendido, deficit y superavit brutos.

    Un tramo sin meta (``target == 0``) no tiene deficit ni superavit, pero
    sus ventas siguen contando en el total. Si las listas no tienen el mismo
    largo levanta ``InputShapeError``.
    """
    validate_shape(targets, sales_lists)
    figures: list[SegmentFigures] = []
    for index, (raw_target, sales) in enumerate(zip(targets, sales_lists)):
        target = _safe_target(raw_target, index)
        total = sum((_safe_amount(sale, index) for sale in sales), 0.0)
        if target > 0:
            deficit = max(0.0, target - total)
            surplus = max(0.0, total - target)
        else:
            deficit = surplus = 0.0
        figures.append(
            SegmentFigures(
                index=index,
                target=target,
                total_sales=total,
                raw_deficit=deficit,
                raw_surplus=surplus,
            )
        )
    return figures


def redistribute_surplus(figures: Sequence[SegmentFigures]) -> list[SegmentReport]:
    """Cubre deficits de tramos anteriores con el superavit de cada tramo.

    Se recorre cada tramo en orden cronologico; si tiene superavit, se revisan
    los tramos anteriores desde el mas cercano (``i-1``) hacia el primero. Lo
    que sobra queda como excedente del tramo y no se arrastra a tramos
    posteriores.
    """
    deficits = [item.raw_deficit for item in figures]
    retained = [item.raw_surplus for item in figures]
    received: list[list[Contribution]] = [[] for _ in figures]
    given: list[list[Contribution]] = [[] for _ in figures]

    for donor in range(len(figures)):
        for receiver in range(donor - 1, -1, -1):
            if retained[donor] <= 0:
                break
            if deficits[receiver] <= 0:
                continue
            amount = min(retained[donor], deficits[receiver])
            retained[donor] -= amount
            deficits[receiver] -= amount
            given[donor].append(Contribution(segment_index=receiver, amount=amount))
            received[receiver].append(Contribution(segment_index=donor, amount=amount))
            logger.debug("Tramo %d cubre %.2f del tramo %d", donor, amount, receiver)

    return [
        SegmentReport(
            index=item.index,
            target=item.target,
            total_sales=item.total_sales,
            raw_deficit=item.raw_deficit,
            raw_surplus=item.raw_surplus,
            remaining_deficit=deficits[item.index],
            surplus_retained=retained[item.index],
            received=tuple(received[item.index]),
            given=tuple(given[item.index]),
        )
        for item in figures
    ]


def rollup_totals(segments: Sequence[SegmentReport]) -> ReportTotals:
    """Suma los tramos y calcula los porcentajes del dia (sin recortar a 100%)."""
    total_sales = sum((segment.total_sales for segment in segments), 0.0)
    base_target = sum((segment.target for segment in segments if segment.target > 0), 0.0)
    inflated_target = base_target * REAL_TARGET_MULTIPLIER
    return ReportTotals(
        total_sales=total_sales,
        total_base_target=base_target,
        inflated_target=inflated_target,
        percent_of_base=_percent(total_sales, base_target),
        percent_of_inflated=_percent(total_sales, inflated_target),
        remaining_for_base=max(0.0, base_target - total_sales),
        remaining_for_inflated=max(0.0, inflated_target - total_sales),
    )


def compute_allocation_report(
    targets: Sequence[Any],
    sales_lists: Sequence[Sequence[Any]],
    *,
    expected_segments: Optional[int] = None,
) -> AllocationReport:
    """Calcula el reporte completo de un dia.

    ``targets`` y ``sales_lists`` deben tener un elemento por tramo. Si se
    indica ``expected_segments`` tambien se exige esa cantidad exacta. Una
    forma incorrecta levanta ``InputShapeError``; los montos ilegibles se
    toman como 0 y se registran como advertencia.
    """
    validate_shape(targets, sales_lists, expected_segments)
    figures = aggregate_segments(targets, sales_lists)
    segments = redistribute_surplus(figures)
    totals = rollup_totals(segments)
    logger.debug(
        "Reporte: %d tramos, ventas %.2f, meta base %.2f (%.2f%%)",
        len(segments),
        totals.total_sales,
        totals.total_base_target,
        totals.percent_of_base,
    )
    return AllocationReport(segments=tuple(segments), totals=totals)
