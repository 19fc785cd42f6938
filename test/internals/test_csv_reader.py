"""Tests for CsvReader.

Tests focus on:
- Lazy initialization and the failure-once contract
- Header handling and field coercion
- Flexible vs strict handling of mismatched rows
- Delimiter selection
"""
import csv
import logging
from pathlib import Path
from unittest import mock

import pytest

from record_stream.config import CsvReaderConfig, JsonStreamReaderConfig
from record_stream.csv_reader import CsvReader
from record_stream.errors import CsvError, IoError
from record_stream.reader import ReaderState


def make_reader(path, delimiter=",", flexible=False) -> CsvReader:
    return CsvReader(CsvReaderConfig(file_path=str(path), delimiter=delimiter, flexible=flexible))


def read_all(reader):
    results = []
    while True:
        try:
            results.append(reader.read_item())
        except StopIteration:
            return results
        except CsvError as e:
            results.append(e)


@pytest.fixture
def csv_file(tmp_path):
    def _write(text: str, name: str = "data.csv") -> Path:
        path = tmp_path / name
        path.write_text(text, encoding="utf-8")
        return path
    return _write


def test_reads_rows_in_order(csv_file):
    path = csv_file("Name,Age,City\nJohn,30,New York\nAlice,25,Boston\nBob,40,Chicago\n")
    reader = make_reader(path)

    results = read_all(reader)

    assert results == [
        {"Name": "John", "Age": 30, "City": "New York"},
        {"Name": "Alice", "Age": 25, "City": "Boston"},
        {"Name": "Bob", "Age": 40, "City": "Chicago"},
    ]


def test_end_of_stream_is_sticky(csv_file):
    reader = make_reader(csv_file("a\n1\n"))

    assert reader.read_item() == {"a": 1}
    for _ in range(3):
        with pytest.raises(StopIteration):
            reader.read_item()
    assert reader.state is ReaderState.EXHAUSTED


def test_file_opened_lazily(csv_file):
    path = csv_file("a,b\n1,2\n")
    reader = make_reader(path)

    assert reader.state is ReaderState.UNINITIALIZED
    path.unlink()

    with pytest.raises(IoError):
        reader.read_item()


def test_coercion_of_field_types(csv_file):
    path = csv_file("City,State,Population,Latitude,IsActive,Note\nNew York,NY,8419000,40.7,true,\n")
    record = make_reader(path).read_item()

    assert record == {
        "City": "New York",
        "State": "NY",
        "Population": 8419000,
        "Latitude": 40.7,
        "IsActive": True,
        "Note": "",
    }
    assert record["Note"] is not None


def test_quoted_fields(csv_file):
    path = csv_file('name,comment\n"Smith, John","said ""hi"""\n"007",true\n')

    assert read_all(make_reader(path)) == [
        {"name": "Smith, John", "comment": 'said "hi"'},
        {"name": 7, "comment": True},
    ]


def test_tab_delimiter(csv_file):
    path = csv_file(
        "City\tState\tPopulation\nNew York\tNY\t8419000\nLos Angeles\tCA\t3971000\n",
        name="data.tsv",
    )
    results = read_all(make_reader(path, delimiter="\t"))

    assert len(results) == 2
    assert results[0] == {"City": "New York", "State": "NY", "Population": 8419000}


def test_only_first_delimiter_character_used(csv_file):
    path = csv_file("a,b\n1,x\n")
    results = read_all(make_reader(path, delimiter=",x"))

    assert results == [{"a": 1, "b": "x"}]


def test_empty_delimiter_defaults_to_comma(csv_file):
    path = csv_file("a,b\n1,2\n")
    assert read_all(make_reader(path, delimiter="")) == [{"a": 1, "b": 2}]


def test_flexible_reader_keeps_every_row(csv_file):
    path = csv_file(
        "Name,Age,City\n"
        "John,30,New York\n"
        "Alice,25\n"            # missing field
        "Bob,40,Chicago,IL\n"   # extra field
    )
    results = read_all(make_reader(path, flexible=True))

    assert len(results) == 3
    assert results[1] == {"Name": "Alice", "Age": 25}
    assert results[2] == {"Name": "Bob", "Age": 40, "City": "Chicago"}


def test_strict_reader_reports_mismatched_rows_and_continues(csv_file):
    path = csv_file(
        "Name,Age,City\n"
        "John,30,New York\n"
        "Alice,25\n"
        "Bob,40,Chicago,IL\n"
        "Carol,35,Denver\n"
    )
    results = read_all(make_reader(path))

    assert len(results) == 4
    assert results[0] == {"Name": "John", "Age": 30, "City": "New York"}
    assert isinstance(results[1], CsvError)
    assert results[1].fatal is False
    assert results[1].line == 3
    assert "found record with 2 fields, but the header has 3 fields" in str(results[1])
    assert isinstance(results[2], CsvError)
    assert results[3] == {"Name": "Carol", "Age": 35, "City": "Denver"}


def test_blank_lines_skipped(csv_file):
    path = csv_file("\na,b\n\n1,2\n\n3,4\n")
    assert read_all(make_reader(path)) == [{"a": 1, "b": 2}, {"a": 3, "b": 4}]


def test_header_only_file(csv_file):
    assert read_all(make_reader(csv_file("a,b,c\n"))) == []


def test_empty_file(csv_file):
    reader = make_reader(csv_file(""))

    assert read_all(reader) == []
    assert reader.state is ReaderState.EXHAUSTED


def test_utf8_bom_stripped_from_header(tmp_path):
    path = tmp_path / "bom.csv"
    path.write_bytes("\ufeffid,name\n1,Zoë\n".encode("utf-8"))

    assert read_all(make_reader(path)) == [{"id": 1, "name": "Zoë"}]


def test_invalid_utf8_row_is_recoverable(tmp_path):
    path = tmp_path / "latin.csv"
    path.write_bytes(b"a,b\n1,2\n\xff\xfe,3\n4,5\n")

    results = read_all(make_reader(path))

    assert len(results) == 3
    assert results[0] == {"a": 1, "b": 2}
    assert isinstance(results[1], CsvError)
    assert results[1].fatal is False
    assert results[1].line == 3
    assert "invalid UTF-8" in str(results[1])
    assert results[2] == {"a": 4, "b": 5}


def test_invalid_utf8_among_many_rows(tmp_path):
    rows = [f"{i},row {i}\n".encode("utf-8") for i in range(2000)]
    rows[1000] = b"1000,caf\xe9\n"
    path = tmp_path / "big.csv"
    path.write_bytes(b"id,text\n" + b"".join(rows))

    results = read_all(make_reader(path))

    assert len(results) == 2000
    errors = [r for r in results if isinstance(r, CsvError)]
    assert len(errors) == 1
    assert errors[0].line == 1002
    ids = [r["id"] for r in results if not isinstance(r, CsvError)]
    assert ids == [i for i in range(2000) if i != 1000]


def test_invalid_utf8_header_still_names_fields(tmp_path):
    path = tmp_path / "header.csv"
    path.write_bytes(b"id,caf\xe9\n1,2\n")
    reader = make_reader(path)

    with pytest.raises(CsvError) as exc_info:
        reader.read_item()
    assert exc_info.value.line == 1
    assert reader.read_item() == {"id": 1, "caf\ufffd": 2}


def test_tokenizer_error_is_recoverable(csv_file):
    path = csv_file("a,b\n1,2\n" + "x" * 50 + ",3\n4,5\n")

    old_limit = csv.field_size_limit(20)
    try:
        results = read_all(make_reader(path))
    finally:
        csv.field_size_limit(old_limit)

    assert results[0] == {"a": 1, "b": 2}
    assert isinstance(results[1], CsvError)
    assert results[1].fatal is False
    assert isinstance(results[1].cause, csv.Error)
    assert results[-1] == {"a": 4, "b": 5}


def test_nonexistent_file_fails_once(caplog):
    reader = make_reader("nonexistent_file.csv")

    with caplog.at_level(logging.ERROR):
        with pytest.raises(IoError) as exc_info:
            reader.read_item()

    assert exc_info.value.fatal is True
    assert isinstance(exc_info.value.cause, FileNotFoundError)
    assert "CsvReader initialization error" in caplog.text
    assert reader.state is ReaderState.FAILED

    with mock.patch("builtins.open") as mock_open:
        for _ in range(3):
            with pytest.raises(StopIteration):
                reader.read_item()
        mock_open.assert_not_called()


def test_iteration_protocol(csv_file):
    path = csv_file("a\n1\n2\n3\n")
    with make_reader(path) as reader:
        assert [record["a"] for record in reader] == [1, 2, 3]


def test_close_releases_file(csv_file):
    reader = make_reader(csv_file("a\n1\n2\n"))
    reader.read_item()
    cursor = reader._handle

    reader.close()

    assert cursor.file.closed
    assert reader.state is ReaderState.EXHAUSTED
    with pytest.raises(StopIteration):
        reader.read_item()


def test_exhaustion_releases_file(csv_file):
    reader = make_reader(csv_file("a\n1\n"))
    reader.read_item()
    cursor = reader._handle

    with pytest.raises(StopIteration):
        reader.read_item()

    assert cursor.file.closed
    assert reader._handle is None


def test_rejects_wrong_config_type():
    with pytest.raises(TypeError, match="expects CsvReaderConfig"):
        CsvReader(JsonStreamReaderConfig(file_path="products.json"))
