"""Lectura de planillas del dia (CSV o Excel) y exportacion del reporte a tabla."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pandas as pd

from .config import SEGMENT_COUNT, TRAMO_TIMES
from .engine import InputShapeError, InvalidAmountError
from .models import AllocationReport

# Encabezados aceptados para cada columna requerida.
COLUMN_ALIASES = {
    "tramo": "tramo",
    "segmento": "tramo",
    "tipo": "tipo",
    "monto": "monto",
    "importe": "monto",
}

KIND_ALIASES = {
    "meta": "meta",
    "objetivo": "meta",
    "venta": "venta",
    "ventas": "venta",
}

REQUIRED_COLUMNS = ("tramo", "tipo", "monto")

REPORT_COLUMNS = [
    "tramo",
    "horario",
    "meta",
    "ventas",
    "cumplimiento",
    "deficit",
    "deficit_restante",
    "superavit",
    "excedente",
    "recibido",
    "entregado",
]


@dataclass
class DaySheet:
    """Metas y ventas de un dia leidas desde una planilla."""

    source_file: Path
    targets: list[float]
    sales_lists: list[list[float]] = field(default_factory=list)

    def as_inputs(self) -> tuple[tuple[float, ...], tuple[tuple[float, ...], ...]]:
        return tuple(self.targets), tuple(tuple(sales) for sales in self.sales_lists)


class DaySheetImporter:
    """Lee una planilla con columnas ``tramo``, ``tipo`` (meta/venta) y ``monto``."""

    def __init__(self, segment_count: int = SEGMENT_COUNT, sheet_name: str | int | None = 0) -> None:
        self.segment_count = segment_count
        self.sheet_name = sheet_name

    def load(self, path: Path) -> DaySheet:
        """Carga la planilla y la deja lista para el motor."""
        path = Path(path)
        df = self._read(path)
        df = self._normalize_columns(df)
        targets = [0.0] * self.segment_count
        sales_lists: list[list[float]] = [[] for _ in range(self.segment_count)]

        for row_number, row in enumerate(df.itertuples(index=False), start=2):
            if self._is_blank_row(row):
                continue
            index = self._segment_index(row.tramo, row_number)
            kind = KIND_ALIASES.get(self._normalize_text(row.tipo))
            if kind is None:
                raise InvalidAmountError(f"Fila {row_number}: tipo desconocido {row.tipo!r}")
            amount = self._to_number(row.monto)
            if kind == "meta":
                if amount is None or amount < 0:
                    raise InvalidAmountError(f"Fila {row_number}: meta invalida {row.monto!r}")
                targets[index] = amount
            else:
                if amount is None or amount <= 0:
                    raise InvalidAmountError(f"Fila {row_number}: venta invalida {row.monto!r}")
                sales_lists[index].append(amount)
        return DaySheet(source_file=path, targets=targets, sales_lists=sales_lists)

    def _read(self, path: Path) -> pd.DataFrame:
        suffix = path.suffix.lower()
        if suffix == ".csv":
            return pd.read_csv(path, dtype=str, keep_default_na=False)
        if suffix == ".xlsx":
            return pd.read_excel(path, sheet_name=self.sheet_name)
        raise ValueError(f"Formato no soportado: {path.name}")

    def _normalize_columns(self, df: pd.DataFrame) -> pd.DataFrame:
        renamed = {
            column: COLUMN_ALIASES[self._normalize_text(column)]
            for column in df.columns
            if self._normalize_text(column) in COLUMN_ALIASES
        }
        df = df.rename(columns=renamed)
        missing = [name for name in REQUIRED_COLUMNS if name not in df.columns]
        if missing:
            raise InputShapeError(f"Faltan columnas en la planilla: {', '.join(missing)}")
        return df[list(REQUIRED_COLUMNS)]

    def _segment_index(self, value: Any, row_number: int) -> int:
        number = self._to_number(value)
        if number is None or not number.is_integer():
            raise InputShapeError(f"Fila {row_number}: tramo invalido {value!r}")
        index = int(number) - 1
        if not 0 <= index < self.segment_count:
            raise InputShapeError(
                f"Fila {row_number}: el tramo {int(number)} no existe (1..{self.segment_count})"
            )
        return index

    def _is_blank_row(self, row: Any) -> bool:
        return all(self._is_empty(value) for value in row)

    def _is_empty(self, value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and pd.isna(value):
            return True
        return isinstance(value, str) and not value.strip()

    def _normalize_text(self, value: Any) -> str:
        if not isinstance(value, str):
            return ""
        return value.strip().lower()

    def _to_number(self, value: Any) -> Optional[float]:
        if self._is_empty(value):
            return None
        if pd.api.types.is_number(value):
            return float(value)
        text = str(value).strip().replace("$", "").replace(" ", "")
        # Formato local: punto de miles, coma decimal.
        normalized = text.replace(".", "").replace(",", ".")
        try:
            number = float(normalized)
        except ValueError:
            return None
        return number if math.isfinite(number) else None


def report_to_frame(
    report: AllocationReport, times: Optional[Sequence[str]] = TRAMO_TIMES
) -> pd.DataFrame:
    """Una fila por tramo con las cifras del reporte, lista para mostrar o exportar.

    Sin ``times`` la columna ``horario`` queda como ``Tramo N``.
    """
    labels = list(times) if times is not None else []
    rows = []
    for segment in report.segments:
        rows.append(
            {
                "tramo": segment.index + 1,
                "horario": labels[segment.index] if segment.index < len(labels) else f"Tramo {segment.index + 1}",
                "meta": segment.target,
                "ventas": segment.total_sales,
                "cumplimiento": segment.percent_achieved,
                "deficit": segment.raw_deficit,
                "deficit_restante": segment.remaining_deficit,
                "superavit": segment.raw_surplus,
                "excedente": segment.surplus_retained,
                "recibido": segment.amount_received,
                "entregado": segment.amount_given,
            }
        )
    return pd.DataFrame(rows, columns=REPORT_COLUMNS)
