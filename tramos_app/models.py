"""Estructuras de datos compartidas por la calculadora de tramos."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass(frozen=True, slots=True)
class Sale:
    """Una venta registrada dentro de un tramo."""

    id: int
    amount: float
    recorded_at: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class SegmentFigures:
    """Cifras brutas de un tramo, antes de redistribuir superavit."""

    index: int
    target: float
    total_sales: float
    raw_deficit: float
    raw_surplus: float


@dataclass(frozen=True, slots=True)
class Contribution:
    """Aporte entre tramos.

    En ``SegmentReport.received`` el indice es el tramo que dona; en
    ``SegmentReport.given`` es el tramo que recibe.
    """

    segment_index: int
    amount: float


@dataclass(frozen=True, slots=True)
class SegmentReport:
    """Resultado final de un tramo despues de la redistribucion."""

    index: int
    target: float
    total_sales: float
    raw_deficit: float
    raw_surplus: float
    remaining_deficit: float
    surplus_retained: float
    received: tuple[Contribution, ...] = ()
    given: tuple[Contribution, ...] = ()

    @property
    def amount_received(self) -> float:
        return sum(item.amount for item in self.received)

    @property
    def amount_given(self) -> float:
        return sum(item.amount for item in self.given)

    @property
    def percent_achieved(self) -> float:
        """Cumplimiento del tramo contra su propia meta (sin recortar a 100)."""
        if self.target <= 0:
            return 0.0
        return self.total_sales / self.target * 100

    @property
    def recovered(self) -> bool:
        """True si el tramo quedo corto pero otro tramo cubrio todo el faltante."""
        return self.raw_deficit > 0 and self.remaining_deficit == 0


@dataclass(frozen=True, slots=True)
class ReportTotals:
    """Acumulados del dia completo."""

    total_sales: float
    total_base_target: float
    inflated_target: float
    percent_of_base: float
    percent_of_inflated: float
    remaining_for_base: float
    remaining_for_inflated: float

    @property
    def achieved_base_goal(self) -> bool:
        return self.total_base_target > 0 and self.percent_of_base >= 100

    @property
    def achieved_real_goal(self) -> bool:
        return self.inflated_target > 0 and self.percent_of_inflated >= 100


@dataclass(frozen=True, slots=True)
class AllocationReport:
    """Reporte completo que consume la capa de presentacion."""

    segments: tuple[SegmentReport, ...]
    totals: ReportTotals

    def transfers(self) -> list[tuple[int, int, float]]:
        """Devuelve los traspasos ``(desde, hacia, monto)`` en el orden en que se hicieron."""
        edges: list[tuple[int, int, float]] = []
        for segment in self.segments:
            for item in segment.given:
                edges.append((segment.index, item.segment_index, item.amount))
        return edges

    def pending_deficit_before(self, active_index: Optional[int]) -> float:
        """Suma lo que sigue faltando en los tramos anteriores al tramo activo."""
        if active_index is None or active_index <= 0:
            return 0.0
        return sum(
            segment.remaining_deficit
            for segment in self.segments[:active_index]
        )
