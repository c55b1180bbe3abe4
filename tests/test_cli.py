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
Tests for the querycanvas command line
"""

import json

import pytest
import yaml
from typer.testing import CliRunner

from querycanvas.cli import app

QUERY = """/**
 * @column sales align=right format=number comma=true
 * @row region == "west" bg=#ffdddd
 * @chart type=pie x=region y=sales
 */
SELECT region, sales FROM report
"""

DATA = "region\tsales\neast\t2000000\nwest\t1000000\nnorth\tNULL\n"


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def files(tmp_path):
    query = tmp_path / "report.sql"
    query.write_text(QUERY)
    data = tmp_path / "report.tsv"
    data.write_text(DATA)
    return str(query), str(data)


def test_render_table(runner, files):
    result = runner.invoke(app, ["render", *files])
    assert result.exit_code == 0, result.output
    assert "region" in result.stdout
    assert "2,000,000" in result.stdout
    assert "NULL" in result.stdout


def test_render_html(runner, files):
    result = runner.invoke(app, ["render", *files, "-o", "html"])
    assert result.exit_code == 0, result.output
    assert '<td style="text-align: right">2,000,000</td>' in result.stdout
    assert '<tr style="background-color: #ffdddd">' in result.stdout


def test_render_tsv(runner, files):
    result = runner.invoke(app, ["render", *files, "--output", "tsv"])
    assert result.exit_code == 0, result.output
    assert "region\tsales\neast\t2000000\nwest\t1000000\nnorth\t\n" in result.stdout


def test_render_clipboard(runner, files):
    result = runner.invoke(app, ["render", *files, "-o", "clipboard"])
    assert result.exit_code == 0, result.output
    assert result.stdout.startswith('<table style="border-collapse: collapse">')


def test_render_chart(runner, files):
    result = runner.invoke(app, ["render", *files, "-o", "chart"])
    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["chart"]["type"] == "pie"
    assert payload["chart"]["data"]["labels"] == ["east", "west", "north"]
    assert payload["chart"]["data"]["datasets"][0]["data"] == [
        2000000.0,
        1000000.0,
        0.0,
    ]
    # three drawing steps per label
    assert len(payload["labels"]) == 9
    texts = [step["text"] for step in payload["labels"] if step["op"] == "text"]
    assert texts == ["east (66.7%)", "west (33.3%)", "north (0.0%)"]


def test_render_chart_without_directive(runner, tmp_path, files):
    query = tmp_path / "plain.sql"
    query.write_text("SELECT region, sales FROM report")
    result = runner.invoke(app, ["render", str(query), files[1], "-o", "chart"])
    assert result.exit_code == 1


def test_render_with_config(runner, files, tmp_path):
    cfg = tmp_path / "config.yaml"
    cfg.write_text(yaml.dump({"display": {"null_marker": "(missing)"}}))
    result = runner.invoke(app, ["render", *files, "-o", "html", "-c", str(cfg)])
    assert result.exit_code == 0, result.output
    assert "(missing)" in result.stdout


def test_render_with_overrides(runner, files):
    result = runner.invoke(
        app,
        [
            "render",
            *files,
            "-o",
            "clipboard",
            "--set",
            "display.header_background=#000000",
            "--set",
            "display.border=2px dashed red",
        ],
    )
    assert result.exit_code == 0, result.output
    assert "background-color: #000000" in result.stdout
    assert "border: 2px dashed red" in result.stdout


@pytest.mark.parametrize("override", ["display.null_marker", "=x", "chart.width=wide"])
def test_render_rejects_bad_overrides(runner, files, override):
    result = runner.invoke(app, ["render", *files, "--set", override])
    assert result.exit_code == 2


def test_config_create_dry_run(runner, mock_config_dir):
    result = runner.invoke(app, ["config", "create", "--dry-run"])
    assert result.exit_code == 0, result.output
    assert "null_marker" in result.stdout
    assert "width: 800" in result.stdout
    assert not (mock_config_dir / "querycanvas" / "config.yaml").exists()


def test_config_create(runner, mock_config_dir):
    result = runner.invoke(app, ["config", "create"])
    assert result.exit_code == 0, result.output
    cfg = mock_config_dir / "querycanvas" / "config.yaml"
    assert yaml.safe_load(cfg.read_text())["display"]["null_marker"] == "NULL"


def test_config_list(runner, mock_config_dir):
    result = runner.invoke(app, ["config", "list", "--show-filename"])
    assert result.exit_code == 0, result.output
    assert "Default config file:" in result.stdout
    assert "Default log file:" in result.stdout
