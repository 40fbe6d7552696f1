"""Parametros fijos del negocio compartidos por todos los modulos."""

from __future__ import annotations

# Tramos horarios fijos del dia, en orden cronologico.
TRAMO_TIMES = (
    "10:00 AM - 12:00 PM",
    "12:00 PM - 02:00 PM",
    "02:00 PM - 04:00 PM",
    "04:00 PM - 06:00 PM",
    "06:00 PM - 08:00 PM",
    "08:00 PM - 10:00 PM",
)

SEGMENT_COUNT = len(TRAMO_TIMES)

# Meta real = meta base * 140%. No es configurable.
REAL_TARGET_MULTIPLIER = 1.40

# Zona horaria usada para resaltar el tramo activo.
DEFAULT_TIMEZONE = "America/Santiago"
