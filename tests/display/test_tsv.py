#
#  Copyright (C) 2017-2025 Dremio Corporation
#
#  Licensed under the Apache License, Version 2.0 (the "License");
#  you may not use this file except in compliance with the License.
#  You may obtain a copy of the License at
#
#      http://www.apache.org/licenses/LICENSE-2.0
#
#  Unless required by applicable law or agreed to in writing, software
#  distributed under the License is distributed on an "AS IS" BASIS,
#  WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#  See the License for the specific language governing permissions and
#  limitations under the License.
#

"""
Unit tests for tab separated export and import
"""

import pytest

from querycanvas.display import tsv
from querycanvas.display.directives import ResultSet


class TestFields:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("a\tb", "a\\tb"),
            ("x\r\ny", "x\\r\\ny"),
            (None, "NULL"),
            (3.0, "3"),
            ("plain", "plain"),
        ],
    )
    def test_escape(self, value, expected):
        assert tsv.escape_field(value) == expected

    def test_escaped_values_read_back(self):
        text = "a\tb\nc\rd"
        assert tsv.unescape_field(tsv.escape_field(text)) == text

    def test_null_marker(self):
        assert tsv.escape_field(None, null_marker="") == ""
        assert tsv.unescape_field("NULL") is None
        assert tsv.unescape_field("NULL", null_marker=None) == "NULL"


class TestDocument:
    def test_saved_result_reads_back(self):
        result = ResultSet.from_rows(
            ["name", "note"], [["a\tb", None], ["c", "multi\nline"]]
        )
        text = tsv.dumps(result)
        assert text == "name\tnote\na\\tb\tNULL\nc\tmulti\\nline"

        loaded = tsv.loads(text)
        assert loaded.columns == ("name", "note")
        assert [dict(r) for r in loaded.rows] == [
            {"name": "a\tb", "note": None},
            {"name": "c", "note": "multi\nline"},
        ]

    def test_blank_lines_are_skipped(self):
        loaded = tsv.loads("a\tb\n\n1\t2\n")
        assert loaded.row_count == 1
        assert dict(loaded.rows[0]) == {"a": "1", "b": "2"}

    def test_single_column_blank_line_is_an_empty_value(self):
        result = ResultSet.from_records([{"c": ""}, {"c": "x"}, {"c": None}])
        text = tsv.dumps(result)
        assert text == "c\n\nx\nNULL"
        loaded = tsv.loads(text + "\n")
        assert [r["c"] for r in loaded.rows] == ["", "x", None]

    @pytest.mark.parametrize("text", ["", "\n\n"])
    def test_empty_input(self, text):
        loaded = tsv.loads(text)
        assert loaded.columns == () and loaded.row_count == 0

    def test_header_only(self):
        loaded = tsv.dumps(ResultSet(columns=("a", "b")))
        assert loaded == "a\tb"
        assert tsv.loads(loaded).columns == ("a", "b")
