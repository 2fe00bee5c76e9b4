import io

from openpyxl import load_workbook

from meal_ledger.export import XLSX_MIME_TYPE, export_filename, export_workbook_bytes, save_workbook
from meal_ledger.models import MealMarks, MonthlyLedger, SignatureDate, Student


def _ledger() -> MonthlyLedger:
    return MonthlyLedger(
        owner_id="teacher-1",
        month=3,
        year=2024,
        class_name="8C1",
        teacher_name="Vũ Văn Hùng",
        location="Suối Lừ",
        signature_date=SignatureDate(day=30, month=4, year=2024),
        students=(
            Student(id="a", name="Linh", meals={7: MealMarks(S=True), 20: MealMarks(T1=True)}),
            Student(id="b", name="Mai", meals={}),
            Student(id="c", name="Hoa", meals={1: MealMarks(S=True, T1=True, T2=True)}),
        ),
    )


def _load(ledger: MonthlyLedger):
    return load_workbook(io.BytesIO(export_workbook_bytes(ledger)))


def test_workbook_has_two_half_month_sheets():
    workbook = _load(_ledger())

    assert workbook.sheetnames == ["Trang 1", "Trang 2"]
    first, second = workbook["Trang 1"], workbook["Trang 2"]
    assert first.max_column == 50
    assert second.max_column == 50
    assert first["A1"].value == "SỔ CHẤM CƠM LỚP: 8C1 THÁNG 4/2024"
    assert first["A1"].font.name == "Times New Roman"
    assert first["A1"].font.bold


def test_merged_header_ranges():
    first = _load(_ledger())["Trang 1"]

    merged = {str(cell_range) for cell_range in first.merged_cells.ranges}
    assert {"A1:AX1", "A2:A3", "B2:B3", "A4:B4", "C2:E2", "C3:E3", "A8:B8"} <= merged


def test_marks_totals_and_sunday_fill():
    first = _load(_ledger())["Trang 1"]

    # 7 April 2024 is a Sunday: its columns start at U (21).
    assert first.cell(row=3, column=21).value == "CN"
    assert first.cell(row=5, column=21).value == "+"
    assert first.cell(row=5, column=21).fill.fgColor.rgb == "FFF9FAFB"
    assert first.cell(row=2, column=21).fill.fgColor.rgb == "FFF3F4F6"
    assert first.cell(row=6, column=3).value is None
    assert first.cell(row=7, column=3).value == "+"
    assert first.cell(row=8, column=3).value == "1"
    assert first.cell(row=8, column=21).value == "1"
    assert first.cell(row=5, column=2).alignment.horizontal == "left"
    assert first.cell(row=5, column=3).border.left.style == "thin"
    assert first.cell(row=2, column=2).border.diagonalDown


def test_second_page_footer_and_layout():
    second = _load(_ledger())["Trang 2"]

    assert second.cell(row=5, column=45).value == 1
    assert second.cell(row=5, column=46).value == 1
    assert second.cell(row=5, column=48).value == 13
    assert second.cell(row=10, column=44).value == "Suối Lừ, ngày 30 tháng 4 năm 2024"
    assert second.cell(row=11, column=44).value == "GIÁO VIÊN CHỦ NHIỆM"
    assert second.cell(row=15, column=44).value == "Vũ Văn Hùng"
    assert second.column_dimensions["B"].width == 25
    assert second.column_dimensions["AX"].width == 6
    assert second.page_setup.orientation == "landscape"


def test_filename_and_mime_type(tmp_path):
    ledger = _ledger()

    assert export_filename(ledger) == "So_Cham_Com_8C1_Thang_4_2024.xlsx"
    assert XLSX_MIME_TYPE == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

    target = save_workbook(ledger, tmp_path / "exports")
    assert target.name == "So_Cham_Com_8C1_Thang_4_2024.xlsx"
    assert target.read_bytes()[:2] == b"PK"


def test_filename_replaces_path_characters():
    ledger = MonthlyLedger(owner_id="x", month=0, year=2024, class_name="8C1/8C2")
    assert export_filename(ledger) == "So_Cham_Com_8C1_8C2_Thang_1_2024.xlsx"
