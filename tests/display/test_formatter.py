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
Unit tests for value formatting
"""

from datetime import date, datetime

import pytest

from querycanvas.display.directives import ColumnDirective, FormatKind
from querycanvas.display.formatter import (
    ValueFormatter,
    format_datetime,
    format_number,
    group_thousands,
    to_number,
    to_text,
)


def number(**kw) -> ColumnDirective:
    return ColumnDirective(column_name="n", format=FormatKind.NUMBER, **kw)


def datetime_col(pattern) -> ColumnDirective:
    return ColumnDirective(column_name="d", format=FormatKind.DATETIME, pattern=pattern)


class TestNumberFormat:
    @pytest.mark.parametrize(
        "value,kw,expected",
        [
            (1234567.5, dict(comma=True, decimal=2), "1,234,567.50"),
            ("1234567.5", dict(comma=True, decimal=2), "1,234,567.50"),
            (2000000, dict(comma=True), "2,000,000"),
            (2000000.0, dict(), "2000000"),
            (1234.5678, dict(decimal=2), "1234.57"),
            (1234.5678, dict(comma=True), "1,234.5678"),
            (-9876543, dict(comma=True), "-9,876,543"),
            (0.456, dict(decimal=1), "0.5"),
            (12, dict(decimal=3), "12.000"),
            (999, dict(comma=True), "999"),
        ],
    )
    def test_format(self, value, kw, expected):
        assert ValueFormatter().format(value, number(**kw)) == expected

    @pytest.mark.parametrize(
        "value", ["abc", "", "12px", True, "nan", "1_000", "Infinity", "-inf", "0x1F"]
    )
    def test_unparseable_returns_original(self, value):
        assert ValueFormatter().format(value, number(comma=True, decimal=2)) == str(
            value
        )

    def test_fraction_is_not_grouped(self):
        assert group_thousands("1234.56789") == "1,234.56789"

    def test_format_number_helper(self):
        assert format_number("42", decimal=1) == "42.0"


class TestDatetimeFormat:
    def test_pattern_substitution(self):
        fmt = ValueFormatter()
        assert (
            fmt.format("2025-12-28T14:30:00", datetime_col("yyyy/MM/dd_HH:mm:ss"))
            == "2025/12/28_14:30:00"
        )

    def test_repeated_token_substitutes_first_occurrence_only(self):
        assert format_datetime("2025-12-28T14:30:00", "dd-dd") == "28-dd"
        assert format_datetime("2025-01-02T03:04:05", "yyyy yyyy MM") == "2025 yyyy 01"

    @pytest.mark.parametrize(
        "value",
        [
            datetime(2024, 3, 5, 7, 8, 9),
            "2024-03-05 07:08:09",
            "2024/03/05 07:08:09",
        ],
    )
    def test_accepted_inputs(self, value):
        assert format_datetime(value, "yyyy-MM-dd HH:mm:ss") == "2024-03-05 07:08:09"

    def test_date_object(self):
        assert format_datetime(date(2024, 3, 5), "dd/MM/yyyy HH") == "05/03/2024 00"

    @pytest.mark.parametrize("value", ["not a date", "2024-13-45", 12345])
    def test_unparseable_returns_original(self, value):
        assert ValueFormatter().format(value, datetime_col("yyyy")) == str(value)

    def test_missing_pattern_returns_text(self):
        assert ValueFormatter().format("2024-03-05", datetime_col(None)) == "2024-03-05"


class TestNulls:
    def test_null_uses_caller_marker(self):
        assert ValueFormatter(null_text="NULL").format(None, number()) == "NULL"
        assert ValueFormatter().format(None, number()) == ""

    def test_no_directive(self):
        assert ValueFormatter().format(3.0, None) == "3"
        assert ValueFormatter().format("x", None) == "x"


class TestCoercion:
    @pytest.mark.parametrize(
        "value,expected",
        [
            (1, 1),
            ("2.5", 2.5),
            (" 7 ", 7.0),
            ("-.5", -0.5),
            ("1e3", 1000.0),
            (None, None),
            (False, None),
            ("x", None),
            ("1_000", None),
            ("infinity", None),
        ],
    )
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize(
        "value,expected", [(1.0, "1"), (1.25, "1.25"), ("a", "a"), (10, "10")]
    )
    def test_to_text(self, value, expected):
        assert to_text(value) == expected
