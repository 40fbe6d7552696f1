"""Deteccion del tramo activo segun la hora del dia.

Solo sirve para resaltar un tramo en pantalla; el motor de asignacion no lo usa.
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from .config import DEFAULT_TIMEZONE, TRAMO_TIMES

_TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?:\s*([AaPp][Mm]))?$")


def parse_time(text: str) -> int:
    """Convierte ``"02:00 PM"`` (o ``"14:00"``) a minutos desde la medianoche."""
    match = _TIME_PATTERN.match(text.strip())
    if not match:
        raise ValueError(f"Hora invalida: {text!r}")
    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = (match.group(3) or "").upper()
    if minutes > 59:
        raise ValueError(f"Hora invalida: {text!r}")
    if period:
        if not 1 <= hours <= 12:
            raise ValueError(f"Hora invalida: {text!r}")
        if period == "PM" and hours != 12:
            hours += 12
        elif period == "AM" and hours == 12:
            hours = 0
    elif hours > 23:
        raise ValueError(f"Hora invalida: {text!r}")
    return hours * 60 + minutes


def segment_start_minutes(times: Sequence[str] = TRAMO_TIMES) -> list[int]:
    """Minuto de inicio de cada tramo (``"10:00 AM - 12:00 PM"`` -> 600)."""
    return [parse_time(label.split(" - ")[0]) for label in times]


def active_segment_index(current: int, times: Sequence[str] = TRAMO_TIMES) -> Optional[int]:
    """Devuelve el indice del tramo en curso o None si aun no empieza el primero.

    Un tramo esta activo desde su hora de inicio hasta el inicio del siguiente;
    el ultimo sigue activo hasta la medianoche.
    """
    starts = segment_start_minutes(times)
    for index, start in enumerate(starts):
        if current < start:
            continue
        if index == len(starts) - 1 or current < starts[index + 1]:
            return index
    return None


def current_minutes(tz_name: str = DEFAULT_TIMEZONE, now: Optional[datetime] = None) -> int:
    """Minutos transcurridos del dia en la zona horaria indicada."""
    zone = ZoneInfo(tz_name)
    if now is None:
        local = datetime.now(zone)
    elif now.tzinfo is None:
        local = now
    else:
        local = now.astimezone(zone)
    return local.hour * 60 + local.minute
