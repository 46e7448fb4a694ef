from unittest import mock

import gspread
import pytest

from quiz_bank.constants import IMAGE_TABLE, IMG_COL_PREVIEW, IMG_COL_QUESTIONS, RESULTS_TABLE
from quiz_bank.errors import StoreError, TableNotFoundError
from quiz_bank.images import ImageRegistry
from quiz_bank.links import DriveLinkResolver
from quiz_bank.schemas import Question
from quiz_bank.sheets import GoogleSheetsTableStore

PREVIEW = '=IMAGE("https://drive.google.com/thumbnail?id=XYZ&sz=w200-h200")'


class FakeWorksheet:
    def __init__(self, values=None):
        self.values = [list(row) for row in (values or [])]
        self.row_count = 1000
        self.col_count = 15
        self.update = mock.Mock(side_effect=self._update)
        self.batch_clear = mock.Mock(side_effect=self._batch_clear)
        self.update_cell = mock.Mock(side_effect=self._update_cell)

    def get_all_values(self):
        # Formula cells such as =IMAGE(...) display as blank.
        return [["" if cell.startswith("=") else cell for cell in row] for row in self.values]

    def _update_cell(self, row, col, value):
        while len(self.values) < row:
            self.values.append([])
        cells = self.values[row - 1]
        cells.extend([""] * (col - len(cells)))
        cells[col - 1] = value

    def _update(self, range_name, values, value_input_option="RAW"):
        row_number = int("".join(ch for ch in range_name if ch.isdigit()))
        while len(self.values) < row_number:
            self.values.append([])
        self.values[row_number - 1] = list(values[0])

    def _batch_clear(self, ranges):
        self.values = self.values[:1]


@pytest.fixture
def spreadsheet():
    sheets = {"Parsing Results": FakeWorksheet([["Question ID", "Text"], ["Q1", "first"]])}
    book = mock.Mock()

    def worksheet(title):
        if title not in sheets:
            raise gspread.exceptions.WorksheetNotFound(title)
        return sheets[title]

    def add_worksheet(title, rows, cols):
        sheets[title] = FakeWorksheet()
        return sheets[title]

    book.worksheet.side_effect = worksheet
    book.add_worksheet.side_effect = add_worksheet
    book.sheets = sheets
    return book


def test_read_all_skips_header(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    assert store.read_all("Parsing Results") == [["Q1", "first"]]


def test_write_row_targets_sheet_row_offset(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    store.write_row("Parsing Results", 0, ["Q1", "edited"])

    sheet = spreadsheet.sheets["Parsing Results"]
    sheet.update.assert_called_with(range_name="A2", values=[["Q1", "edited"]], value_input_option="USER_ENTERED")
    assert store.read_all("Parsing Results") == [["Q1", "edited"]]


def test_append_row_goes_after_last_row(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    store.append_row("Parsing Results", ["Q2", "second"])
    assert store.read_all("Parsing Results") == [["Q1", "first"], ["Q2", "second"]]


def test_create_table_adds_worksheet_with_header(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    store.create_table("Image Library", ["Image ID", "URL"])
    store.create_table("Image Library", ["Image ID", "URL"])

    assert spreadsheet.add_worksheet.call_count == 1
    assert spreadsheet.sheets["Image Library"].values == [["Image ID", "URL"]]


def test_missing_worksheet_maps_to_table_not_found(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    assert not store.has_table("Admin Log")
    with pytest.raises(TableNotFoundError):
        store.read_all("Admin Log")


def test_clear_keeps_header(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    store.clear("Parsing Results")
    assert spreadsheet.sheets["Parsing Results"].values == [["Question ID", "Text"]]


def test_connect_requires_settings():
    with pytest.raises(StoreError):
        GoogleSheetsTableStore().connect()


def test_connect_wraps_auth_failures(tmp_path):
    store = GoogleSheetsTableStore(spreadsheet_id="abc", service_account_path=str(tmp_path / "missing.json"))
    with pytest.raises(StoreError, match="Failed to connect"):
        store.connect()


def test_write_cell_targets_single_cell(spreadsheet):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    store.write_cell("Parsing Results", 0, 1, "edited")

    sheet = spreadsheet.sheets["Parsing Results"]
    sheet.update_cell.assert_called_once_with(2, 2, "edited")
    assert sheet.values[1] == ["Q1", "edited"]


@pytest.fixture
def sheet_images(spreadsheet, clock):
    store = GoogleSheetsTableStore(spreadsheet=spreadsheet)
    for qid, text in [("Q2", "How do you build a pivot table?"), ("Q3", "How do you sort a column?")]:
        store.append_row(RESULTS_TABLE, Question(id=qid, text=text, topic="Excel", topic_emoji="📊").to_row())
    return ImageRegistry(store, DriveLinkResolver(), clock=clock)


def test_linking_second_question_keeps_preview_formula(sheet_images, spreadsheet):
    sheet_images.register_image("https://drive.google.com/file/d/XYZ/view", "Q2")
    sheet_images.register_image("https://drive.google.com/open?id=XYZ", "Q3")

    row = spreadsheet.sheets[IMAGE_TABLE].values[1]
    assert row[IMG_COL_PREVIEW] == PREVIEW
    assert row[IMG_COL_QUESTIONS] == "Q2, Q3"


def test_duplicate_cleanup_rewrites_preview_formula(sheet_images, spreadsheet):
    sheet_images.register_image("https://drive.google.com/file/d/XYZ/view", "Q2")
    sheet = spreadsheet.sheets[IMAGE_TABLE]
    sheet.values.append(["IMG_002", "https://drive.google.com/uc?export=view&id=XYZ", "", "Q3", "", "", ""])

    assert sheet_images.cleanup_duplicates() == 1
    assert len(sheet.values) == 2
    assert sheet.values[1][IMG_COL_PREVIEW] == PREVIEW
    assert sheet.values[1][IMG_COL_QUESTIONS] == "Q2, Q3"
