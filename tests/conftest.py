import pytest

from tramos_app.ledger import DayLedger


@pytest.fixture
def scenario_inputs():
    """Escenario de tres tramos: el tramo 2 cubre al 1 y el 3 queda corto."""
    return [100, 100, 100], [[60], [150], [0]]


@pytest.fixture
def ledger():
    return DayLedger()


@pytest.fixture
def write_sheet(tmp_path):
    """Escribe una planilla CSV en un directorio temporal y devuelve su ruta."""
    def _write(text, name="dia.csv"):
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write
