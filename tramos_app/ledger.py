"""Estado del formulario del dia: metas y ventas por tramo.

Valida lo que ingresa el usuario antes de que llegue al motor.
"""

from __future__ import annotations

import itertools
import math
import re
from datetime import datetime
from typing import Any, Optional

from .config import SEGMENT_COUNT
from .engine import InvalidAmountError, SegmentIndexError, compute_allocation_report
from .models import AllocationReport, Sale

# Solo digitos y un punto decimal opcional, igual que el campo de la pantalla.
_NUMERIC_INPUT = re.compile(r"^\d*\.?\d*$")


def parse_amount(value: Any) -> Optional[float]:
    """Convierte lo ingresado a numero; devuelve None si esta vacio."""
    if isinstance(value, bool):
        raise InvalidAmountError(f"Monto invalido: {value!r}")
    if isinstance(value, (int, float)):
        number = float(value)
        if not math.isfinite(number):
            raise InvalidAmountError(f"Monto invalido: {value!r}")
        return number
    text = str(value).strip() if value is not None else ""
    if not text or text == ".":
        return None
    if not _NUMERIC_INPUT.match(text):
        raise InvalidAmountError(f"Monto invalido: {value!r}")
    return float(text)


class DayLedger:
    """Metas y ventas registradas durante el dia, una entrada por tramo."""

    def __init__(self, segment_count: int = SEGMENT_COUNT) -> None:
        if segment_count <= 0:
            raise ValueError("Se necesita al menos un tramo")
        self.segment_count = segment_count
        self._targets: list[float] = [0.0] * segment_count
        self._sales: list[list[Sale]] = [[] for _ in range(segment_count)]
        self._ids = itertools.count(1)

    def _check_index(self, index: int) -> None:
        if not 0 <= index < self.segment_count:
            raise SegmentIndexError(f"Tramo fuera de rango: {index}")

    def set_target(self, index: int, value: Any) -> float:
        """Asigna la meta de un tramo. Un valor vacio deja el tramo sin meta (0)."""
        self._check_index(index)
        number = parse_amount(value)
        if number is None:
            number = 0.0
        if number < 0:
            raise InvalidAmountError(f"La meta no puede ser negativa: {value!r}")
        self._targets[index] = number
        return number

    def add_sale(self, index: int, amount: Any, recorded_at: Optional[datetime] = None) -> Sale:
        """Registra una venta; solo se aceptan montos mayores a cero."""
        self._check_index(index)
        number = parse_amount(amount)
        if number is None or number <= 0:
            raise InvalidAmountError(f"La venta debe ser mayor a cero: {amount!r}")
        sale = Sale(id=next(self._ids), amount=number, recorded_at=recorded_at)
        self._sales[index].append(sale)
        return sale

    def delete_sale(self, index: int, sale_id: int) -> bool:
        """Elimina una venta por id. Devuelve False si no existia."""
        self._check_index(index)
        current = self._sales[index]
        remaining = [sale for sale in current if sale.id != sale_id]
        if len(remaining) == len(current):
            return False
        self._sales[index] = remaining
        return True

    def sales(self, index: int) -> tuple[Sale, ...]:
        self._check_index(index)
        return tuple(self._sales[index])

    def targets(self) -> tuple[float, ...]:
        return tuple(self._targets)

    def as_inputs(self) -> tuple[tuple[float, ...], tuple[tuple[float, ...], ...]]:
        """Entradas inmutables para el motor: ``(metas, montos por tramo)``."""
        amounts = tuple(tuple(sale.amount for sale in sales) for sales in self._sales)
        return self.targets(), amounts

    def report(self) -> AllocationReport:
        targets, sales_lists = self.as_inputs()
        return compute_allocation_report(
            targets, sales_lists, expected_segments=self.segment_count
        )
