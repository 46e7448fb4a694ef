import pytest

from quiz_bank.errors import StoreError, TableNotFoundError
from quiz_bank.storage import InMemoryTableStore, SQLiteTableStore, build_store
from quiz_bank.config import AppConfig


@pytest.fixture(params=["memory", "sqlite"])
def table_store(request, tmp_path):
    if request.param == "memory":
        yield InMemoryTableStore()
    else:
        db = SQLiteTableStore(str(tmp_path / "store.db"))
        yield db
        db.close()


def test_create_table_is_idempotent(table_store):
    table_store.create_table("Results", ["ID", "Text"])
    table_store.append_row("Results", ["Q1", "first"])
    table_store.create_table("Results", ["ID", "Text"])
    assert table_store.read_all("Results") == [["Q1", "first"]]


def test_append_and_write_rows(table_store):
    table_store.create_table("Results", ["ID", "Text"])
    table_store.append_row("Results", ["Q1", "first"])
    table_store.append_row("Results", ["Q2", None])
    table_store.write_row("Results", 0, ["Q1", "edited"])

    assert table_store.read_all("Results") == [["Q1", "edited"], ["Q2", ""]]


def test_write_past_end_pads_with_empty_rows(table_store):
    table_store.create_table("Log", ["When"])
    table_store.write_row("Log", 2, ["later"])
    assert table_store.read_all("Log") == [[], [], ["later"]]
    table_store.append_row("Log", ["next"])
    assert table_store.read_all("Log")[3] == ["next"]


def test_missing_table_raises(table_store):
    assert not table_store.has_table("Nope")
    with pytest.raises(TableNotFoundError):
        table_store.read_all("Nope")
    with pytest.raises(TableNotFoundError):
        table_store.append_row("Nope", ["x"])


def test_negative_index_rejected(table_store):
    table_store.create_table("Results", ["ID"])
    with pytest.raises(StoreError):
        table_store.write_row("Results", -1, ["x"])


def test_clear_keeps_table(table_store):
    table_store.create_table("Results", ["ID"])
    table_store.append_row("Results", ["Q1"])
    table_store.clear("Results")
    assert table_store.has_table("Results")
    assert table_store.read_all("Results") == []


def test_sqlite_persists_between_connections(tmp_path):
    path = str(tmp_path / "persist.db")
    first = SQLiteTableStore(path)
    first.create_table("Results", ["ID", "Topic"])
    first.append_row("Results", ["Q1", "📚 QBO"])
    first.close()

    second = SQLiteTableStore(path)
    assert second.header("Results") == ["ID", "Topic"]
    assert second.read_all("Results") == [["Q1", "📚 QBO"]]
    second.close()


def test_build_store_selects_backend(tmp_path):
    memory = build_store(AppConfig.from_dict({"storage": {"backend": "memory"}}))
    assert isinstance(memory, InMemoryTableStore)

    sqlite_cfg = AppConfig.from_dict(
        {"storage": {"backend": "sqlite"}, "paths": {"sqlite_path": "db/quiz.db"}},
        base_dir=tmp_path,
    )
    sqlite_store = build_store(sqlite_cfg)
    assert isinstance(sqlite_store, SQLiteTableStore)
    sqlite_store.close()

    with pytest.raises(ValueError):
        build_store(AppConfig.from_dict({"storage": {"backend": "csv"}}))


def test_write_cell_leaves_other_cells(table_store):
    table_store.create_table("Images", ["ID", "Preview", "Questions"])
    table_store.append_row("Images", ["IMG_001", '=IMAGE("x")', "Q1"])
    table_store.write_cell("Images", 0, 2, "Q1, Q2")
    table_store.write_cell("Images", 1, 1, "late")

    assert table_store.read_all("Images") == [["IMG_001", '=IMAGE("x")', "Q1, Q2"], ["", "late"]]
    with pytest.raises(StoreError):
        table_store.write_cell("Images", 0, -1, "x")
