"""
CSVBatchReader end-to-end: test_csv_reader.py

Construction:
  - No source → ConfigurationError naming content/file/path
  - Several sources, unsupported types, bad options → ConfigurationError
  - Separator detected eagerly; header and rows lazily

Behaviour:
  - Invalid bytes removed from the header
  - Windows / old-Mac / mixed line endings
  - Comma, semicolon, tab files; semicolon file with comma-heavy values
  - Custom quote character and custom SOURCE:TARGET encodings
  - Text content under BOM-writing source encodings parses without stray BOMs
  - header() is memoized and never drives the source past the window
  - rows() is lazy, forward-only, and returns the same iterator twice
  - Malformed data lines are skipped and counted
  - Empty source: header raises HeaderParseError, rows is empty
  - Handles are closed on exhaustion, close() and context exit
  - Breaking out of rows() keeps the handle open until close()
  - File paths and strict file handles are read in chunks only
"""

from __future__ import annotations

import io
from typing import Iterator

import pytest

import sys, pathlib
_root = str(pathlib.Path(__file__).parent.parent)
if _root not in sys.path:
    sys.path.insert(0, _root)

from tests.fixtures.strict_io import StrictFileIO, StrictIO

from batchcsv.configs.config import ReaderConfig
from batchcsv.configs.exceptions import ConfigurationError, HeaderParseError
from batchcsv.discovery.base import AbstractSource
from batchcsv.discovery.csv_reader import CSVBatchReader, ReaderStats


MIXED = (
    "email,first_name,last_name\n"
    "john@example.com,John,Doe\r"        # old Mac
    "jane@example.com,Jane,Doe\r\n"      # Windows
    "bob@example.com,Bob,Smith"
)


# ============================================================================
# Construction
# ============================================================================

class TestConstruction:
    def test_no_source(self):
        with pytest.raises(ConfigurationError, match="Please provide content, file, or path"):
            CSVBatchReader()

    def test_several_sources(self):
        with pytest.raises(ConfigurationError):
            CSVBatchReader(content="a", file=io.BytesIO(b"a"))

    def test_unsupported_content(self):
        with pytest.raises(ConfigurationError):
            CSVBatchReader(content=["a,b"])

    def test_bad_quote_char(self):
        with pytest.raises(ConfigurationError):
            CSVBatchReader(content="a,b", quote_char="")

    def test_bad_encoding(self):
        with pytest.raises(ConfigurationError):
            CSVBatchReader(content="a,b", encoding="nope:utf-8")

    def test_is_abstract_source(self):
        assert isinstance(CSVBatchReader(content="a,b"), AbstractSource)

    def test_overrides_do_not_mutate_config(self):
        cfg = ReaderConfig(quote_char='"')
        reader = CSVBatchReader(content="a,b", quote_char="'", config=cfg)
        assert reader.quote_char == "'"
        assert cfg.quote_char == '"'

    def test_separator_detected_eagerly(self):
        handle = StrictIO(b"a;b\n1;2\n")
        reader = CSVBatchReader(file=handle)
        assert handle.read_sizes  # window sampled at construction
        assert reader.separator == ";"


# ============================================================================
# Header
# ============================================================================

class TestHeader:
    def test_removes_invalid_byte_sequences(self):
        reader = CSVBatchReader(content=b"email,first_name,\xfflast_name\x81")
        assert reader.header() == ["email", "first_name", "last_name"]

    def test_windows_line_separators(self):
        reader = CSVBatchReader(
            content="email,first_name,last_name\r\r\n      mark@example.com,mark,example"
        )
        assert reader.header() == ["email", "first_name", "last_name"]
        assert list(reader.rows()) == [["mark@example.com", "mark", "example"]]

    @pytest.mark.parametrize("content, separator", [
        ("email,first_name,last_name", ","),
        ("email;first_name;last_name", ";"),
        ("email\tfirst_name\tlast_name", "\t"),
    ])
    def test_separators(self, content, separator):
        reader = CSVBatchReader(content=content)
        assert reader.separator == separator
        assert reader.header() == ["email", "first_name", "last_name"]

    def test_semicolon_with_many_commas(self):
        ids = ",".join(str(i) for i in range(1, 15))
        reader = CSVBatchReader(
            content=f"email;first_name;last_name;letter_ids\n\n    peter@example.com;Peter;Stone;{ids}"
        )
        assert reader.header() == ["email", "first_name", "last_name", "letter_ids"]
        assert list(reader.rows()) == [["peter@example.com", "Peter", "Stone", ids]]

    def test_custom_encoding(self):
        reader = CSVBatchReader(content="メール,氏名".encode("shift_jis"), encoding="shift_jis:utf-8")
        assert reader.header() == ["メール", "氏名"]

    def test_header_memoized(self):
        handle = StrictIO(("email,first_name,last_name\n" + "john@example.com,John,Doe\n" * 100).encode())
        reader = CSVBatchReader(file=handle, config=ReaderConfig(chunk_size=64))
        reads = len(handle.read_sizes)
        first = reader.header()
        assert reader.header() is first
        assert len(handle.read_sizes) == reads

    def test_header_without_reading_whole_file(self):
        content = "email,first_name,last_name\n" + "john@example.com,John,Doe\n" * 100
        reader = CSVBatchReader(file=StrictIO(content.encode()))
        assert reader.header() == ["email", "first_name", "last_name"]

    def test_empty_source(self):
        reader = CSVBatchReader(content="")
        assert reader.separator == ","
        with pytest.raises(HeaderParseError):
            reader.header()
        assert list(reader.rows()) == []

    def test_malformed_header(self):
        reader = CSVBatchReader(content='"email,name\na,b')
        with pytest.raises(HeaderParseError):
            reader.header()


# ============================================================================
# Rows
# ============================================================================

class TestRows:
    def test_end_to_end(self):
        reader = CSVBatchReader(content="email,first_name,last_name\njohn@example.com,John,Doe")
        assert reader.header() == ["email", "first_name", "last_name"]
        assert list(reader.rows()) == [["john@example.com", "John", "Doe"]]

    def test_rows_is_iterator(self):
        reader = CSVBatchReader(content=StrictIO(MIXED.encode()))
        assert isinstance(reader.rows(), Iterator)

    def test_mixed_line_endings(self):
        reader = CSVBatchReader(content=StrictIO(MIXED.encode()))
        assert reader.header() == ["email", "first_name", "last_name"]
        assert list(reader.rows()) == [
            ["john@example.com", "John", "Doe"],
            ["jane@example.com", "Jane", "Doe"],
            ["bob@example.com", "Bob", "Smith"],
        ]

    def test_lazy_first_row(self):
        reader = CSVBatchReader(content=StrictIO(MIXED.encode()))
        for row in reader.rows():
            assert row == ["john@example.com", "John", "Doe"]
            break

    def test_custom_quote_character(self):
        reader = CSVBatchReader(content="first_name,last_name\n'bob','the builder'", quote_char="'")
        assert list(reader.rows()) == [["bob", "the builder"]]

    def test_header_then_rows_or_rows_then_header(self):
        a = CSVBatchReader(content=MIXED)
        b = CSVBatchReader(content=MIXED)
        a.header()
        rows_a = list(a.rows())
        rows_b = list(b.rows())
        assert b.header() == ["email", "first_name", "last_name"]
        assert rows_a == rows_b

    def test_second_call_continues(self):
        reader = CSVBatchReader(content=MIXED)
        first = next(reader.rows())
        rest = list(reader.rows())
        assert reader.rows() is reader.rows()
        assert first == ["john@example.com", "John", "Doe"]
        assert [r[0] for r in rest] == ["jane@example.com", "bob@example.com"]

    def test_missing_fields_not_enforced(self):
        reader = CSVBatchReader(content="a,b,c\n1\n1,2,3,4\n1,,3")
        assert list(reader.rows()) == [["1"], ["1", "2", "3", "4"], ["1", "", "3"]]

    def test_malformed_lines_skipped_and_counted(self):
        content = 'a,b\n1,2\n"broken,3\n   \n4,"x"y\n5,6'
        reader = CSVBatchReader(content=content)
        assert list(reader.rows()) == [["1", "2"], ["5", "6"]]
        assert reader.stats == ReaderStats(lines_read=6, rows_yielded=2, lines_skipped=3)
        assert reader.stats.lines_read == 1 + reader.stats.rows_yielded + reader.stats.lines_skipped

    def test_target_encoding(self):
        reader = CSVBatchReader(content="name,city\ncafé,Zürich", encoding="utf-8:ascii")
        assert list(reader.rows()) == [["caf", "Zrich"]]

    def test_latin1_source(self):
        reader = CSVBatchReader(content="name;city\nJosé;Málaga".encode("latin-1"), encoding="latin-1")
        assert list(reader.rows()) == [["José", "Málaga"]]

    @pytest.mark.parametrize("encoding", ["utf-8-sig:utf-8", "utf-16:utf-8"])
    def test_text_content_with_bom_writing_source_encoding(self, encoding):
        content = "email,first_name\n" + "".join(
            f"user{i}@example.com,User{i}\n" for i in range(20)
        )
        reader = CSVBatchReader(
            content=content, encoding=encoding, config=ReaderConfig(chunk_size=16),
        )
        assert reader.header() == ["email", "first_name"]
        rows = list(reader.rows())
        assert rows == [[f"user{i}@example.com", f"User{i}"] for i in range(20)]
        assert not any("\ufeff" in cell for row in rows for cell in row)

    def test_rows_beyond_window(self):
        lines = ["id"] + [str(i) for i in range(50)]
        reader = CSVBatchReader(content="\n".join(lines), config=ReaderConfig(window_size=5))
        assert [r[0] for r in reader.rows()] == [str(i) for i in range(50)]
        assert len(reader.line_cache.cached) == 5


# ============================================================================
# Resources
# ============================================================================

class TestResources:
    def test_handle_closed_on_exhaustion(self):
        handle = io.BytesIO(MIXED.encode())
        reader = CSVBatchReader(file=handle)
        list(reader.rows())
        assert handle.closed

    def test_close_mid_stream(self):
        handle = io.BytesIO(("h\n" + "r\n" * 10_000).encode())
        reader = CSVBatchReader(file=handle, config=ReaderConfig(chunk_size=16))
        next(reader.rows())
        assert not handle.closed
        reader.close()
        assert handle.closed

    def test_context_manager(self):
        handle = io.BytesIO(MIXED.encode())
        with CSVBatchReader(file=handle) as reader:
            assert reader.header() == ["email", "first_name", "last_name"]
        assert handle.closed

    def test_break_keeps_handle_until_close(self):
        handle = io.BytesIO(("h\n" + "r\n" * 100).encode())
        reader = CSVBatchReader(file=handle, config=ReaderConfig(chunk_size=16))
        for _ in reader.rows():
            break
        assert not handle.closed
        reader.close()
        assert handle.closed

    def test_close_before_rows(self):
        handle = io.BytesIO(MIXED.encode())
        reader = CSVBatchReader(file=handle)
        reader.close()
        assert handle.closed

    def test_path(self, tmp_path):
        p = tmp_path / "contacts.csv"
        p.write_bytes(MIXED.encode())
        reader = CSVBatchReader(path=p)
        assert reader.header() == ["email", "first_name", "last_name"]
        assert len(list(reader.rows())) == 3

    def test_strict_file_in_batches(self, tmp_path):
        p = tmp_path / "users.csv"
        with open(p, "w", encoding="utf-8", newline="") as f:
            f.write("email,first_name,last_name\n")
            for i in range(100):
                f.write(f"user{i}@example.com,User,{i}\n")

        handle = StrictFileIO(str(p), "r")
        reader = CSVBatchReader(file=handle)
        assert reader.header() == ["email", "first_name", "last_name"]

        processed = 0
        for row in reader.rows():
            assert row[0] == f"user{processed}@example.com"
            assert row[1] == "User"
            processed += 1
        assert processed == 100
        assert handle.closed

    def test_independent_readers(self):
        a = CSVBatchReader(content="a;b\n1;2")
        b = CSVBatchReader(content="a,b\n3,4")
        assert (a.separator, b.separator) == (";", ",")
        assert list(a.rows()) == [["1", "2"]]
        assert list(b.rows()) == [["3", "4"]]
