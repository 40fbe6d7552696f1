import pandas as pd
import pytest

from tramos_app.engine import InputShapeError, InvalidAmountError, compute_allocation_report
from tramos_app.importer import REPORT_COLUMNS, DaySheetImporter, report_to_frame


class TestDaySheetImporter:
    """Tests de lectura de planillas del dia."""

    def test_load_csv(self, write_sheet):
        path = write_sheet(
            "Tramo,Tipo,Monto\n"
            "1,meta,150.000\n"
            "1,venta,100.000\n"
            "1,venta,\"12,5\"\n"
            "2,Meta,80000\n"
            ",,\n"
            "2,ventas,$ 90.000\n"
        )

        sheet = DaySheetImporter().load(path)

        assert sheet.source_file == path
        assert sheet.targets == [150000.0, 80000.0, 0.0, 0.0, 0.0, 0.0]
        assert sheet.sales_lists[0] == [100000.0, 12.5]
        assert sheet.sales_lists[1] == [90000.0]
        assert sheet.sales_lists[5] == []

    def test_load_xlsx(self, tmp_path):
        """Planilla Excel con celdas numericas y una fila vacia."""
        path = tmp_path / "dia.xlsx"
        pd.DataFrame(
            {
                "Tramo": [1, None, 2, 2],
                "Tipo": ["meta", None, "venta", "venta"],
                "Monto": [100, None, 50, 25.5],
            }
        ).to_excel(path, index=False)

        sheet = DaySheetImporter().load(path)

        assert sheet.targets == [100.0, 0.0, 0.0, 0.0, 0.0, 0.0]
        assert sheet.sales_lists[0] == []
        assert sheet.sales_lists[1] == [50.0, 25.5]

    def test_last_target_wins(self, write_sheet):
        path = write_sheet("tramo,tipo,monto\n1,meta,100\n1,meta,200\n")

        assert DaySheetImporter(segment_count=1).load(path).targets == [200.0]

    def test_column_aliases(self, write_sheet):
        path = write_sheet("Segmento,tipo,Importe\n1,objetivo,100\n1,venta,50\n")

        sheet = DaySheetImporter(segment_count=2).load(path)

        assert sheet.targets == [100.0, 0.0]
        assert sheet.sales_lists == [[50.0], []]

    def test_feeds_the_engine(self, write_sheet):
        path = write_sheet(
            "tramo,tipo,monto\n1,meta,100\n2,meta,100\n3,meta,100\n1,venta,60\n2,venta,150\n"
        )
        targets, sales = DaySheetImporter(segment_count=3).load(path).as_inputs()

        report = compute_allocation_report(targets, sales, expected_segments=3)

        assert report.transfers() == [(1, 0, 40.0)]
        assert report.totals.percent_of_base == pytest.approx(70.0)

    def test_segment_out_of_range(self, write_sheet):
        path = write_sheet("tramo,tipo,monto\n7,venta,100\n")

        with pytest.raises(InputShapeError, match="Fila 2"):
            DaySheetImporter().load(path)

    @pytest.mark.parametrize("row", ["1,venta,0", "1,venta,-10", "1,venta,abc", "1,meta,-1", "1,otro,10"])
    def test_invalid_rows(self, write_sheet, row):
        path = write_sheet(f"tramo,tipo,monto\n{row}\n")

        with pytest.raises(InvalidAmountError):
            DaySheetImporter().load(path)

    def test_missing_columns(self, write_sheet):
        path = write_sheet("tramo,monto\n1,100\n")

        with pytest.raises(InputShapeError, match="tipo"):
            DaySheetImporter().load(path)

    def test_unsupported_format(self, write_sheet):
        path = write_sheet("tramo,tipo,monto\n", name="dia.txt")

        with pytest.raises(ValueError, match="Formato no soportado"):
            DaySheetImporter().load(path)

    def test_old_excel_format_is_rejected(self, write_sheet):
        """Los .xls se rechazan con un error legible."""
        path = write_sheet("", name="dia.xls")

        with pytest.raises(ValueError, match="Formato no soportado"):
            DaySheetImporter().load(path)


class TestReportToFrame:
    """Tests de exportacion del reporte a DataFrame."""

    def test_columns_and_values(self, scenario_inputs):
        targets, sales = scenario_inputs
        report = compute_allocation_report(targets, sales)

        frame = report_to_frame(report, ["a", "b", "c"])

        assert isinstance(frame, pd.DataFrame)
        assert list(frame.columns) == REPORT_COLUMNS
        assert frame["horario"].tolist() == ["a", "b", "c"]
        assert frame["tramo"].tolist() == [1, 2, 3]
        assert frame["deficit_restante"].tolist() == [0, 0, 100]
        assert frame["excedente"].tolist() == [0, 10, 0]
        assert frame["recibido"].tolist() == [40, 0, 0]
        assert frame["entregado"].tolist() == [0, 40, 0]
        assert frame["cumplimiento"].tolist() == pytest.approx([60.0, 150.0, 0.0])

    def test_without_times(self, scenario_inputs):
        targets, sales = scenario_inputs

        frame = report_to_frame(compute_allocation_report(targets, sales), None)

        assert frame["horario"].tolist() == ["Tramo 1", "Tramo 2", "Tramo 3"]

    def test_default_times(self):
        report = compute_allocation_report([100] * 6, [[]] * 6)

        frame = report_to_frame(report)

        assert frame["horario"].iloc[0] == "10:00 AM - 12:00 PM"
        assert frame["horario"].iloc[5] == "08:00 PM - 10:00 PM"
