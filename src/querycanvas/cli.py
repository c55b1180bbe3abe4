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
import logging
from enum import StrEnum, auto
from json import dumps as jdumps
from pathlib import Path
from typing import Annotated, Dict, List, Optional

from click import Choice
from pydantic import ValidationError
from rich import print as pp
from rich.console import Console
from rich.errors import StyleSyntaxError
from rich.style import Style
from rich.table import Table
from rich.text import Text
from typer import Argument, BadParameter, Exit, Option, Typer
from yaml import dump

from querycanvas import log
from querycanvas.config import settings
from querycanvas.display import tsv
from querycanvas.display.directives import StylePatch
from querycanvas.display.results import DisplayProcessor, DisplayResult
from querycanvas.display.surface import ChartRenderError, ChartSurface

app = Typer(
    no_args_is_help=True,
    name="querycanvas",
    help="Render query results with their display directives",
    context_settings=dict(help_option_names=["-h", "--help"]),
)


class Output(StrEnum):
    table = auto()
    html = auto()
    tsv = auto()
    clipboard = auto()
    chart = auto()


def _rich_style(patch: StylePatch) -> Optional[Style]:
    parts = [
        "bold" if patch.font_weight == "bold" else None,
        patch.color,
        f"on {patch.background_color}" if patch.background_color else None,
    ]
    if not (definition := " ".join(p for p in parts if p)):
        return None
    try:
        return Style.parse(definition)
    except StyleSyntaxError:
        # css colours rich does not know are shown unstyled
        return None


def _print_table(display: DisplayResult, console: Console):
    t = Table()
    for header in display.table.headers:
        t.add_column(
            header.name, justify=header.align.value if header.align else "left"
        )
    for row in display.table.rows:
        t.add_row(
            *(Text(c.text, style=_rich_style(c.style) or "") for c in row.cells),
            style=_rich_style(row.style),
        )
    console.print(t)


def _parse_overrides(values: Optional[List[str]]) -> Dict[str, str]:
    overrides = {}
    for item in values or []:
        key, sep, value = item.partition("=")
        if not sep or not key.strip():
            raise BadParameter(
                f"expected section.name=value, got {item!r}", param_hint="--set"
            )
        overrides[key.strip()] = value
    return overrides


@app.command("render", help="Render a saved TSV result with the query's directives")
def render(
    query_file: Annotated[Path, Argument(help="File holding the query text")],
    data_file: Annotated[Path, Argument(help="TSV result file, NULL marks nulls")],
    output: Annotated[
        Output, Option("-o", "--output", help="What to render")
    ] = Output.table,
    config_file: Annotated[
        Optional[Path],
        Option("-c", "--cfg", help="The config yaml for various options"),
    ] = None,
    set_values: Annotated[
        Optional[List[str]],
        Option(
            "--set",
            help="Override a setting for this run, e.g. display.null_marker=-",
        ),
    ] = None,
    log_to_file: Annotated[Optional[bool], Option(help="Log to file")] = False,
    enable_json_logging: Annotated[
        Optional[bool], Option(help="Enable JSON logs")
    ] = False,
    log_level: Annotated[
        Optional[str],
        Option(
            help="The log level", click_type=Choice(list(logging._nameToLevel.keys()))
        ),
    ] = "WARNING",
):
    log.configure(enable_json_logging=enable_json_logging, to_file=log_to_file)
    log.set_level(log_level)
    if config_file is not None:
        settings.configure(config_file, force=True)
    if overrides := _parse_overrides(set_values):
        try:
            settings.instance().with_overrides(overrides)
        except ValidationError as e:
            raise BadParameter(str(e), param_hint="--set")

    result = tsv.loads(data_file.read_text(encoding="utf-8"))
    surface = ChartSurface() if output == Output.chart else None
    try:
        display = DisplayProcessor(surface=surface).process(
            query_file.read_text(encoding="utf-8"), result
        )
    except ChartRenderError as e:
        log.logger("render").error("chart_render_failed", error=str(e))
        pp(f"[red]Chart could not be rendered:[/red] {e}")
        raise Exit(code=1)

    match output:
        case Output.table:
            _print_table(display, Console())
        case Output.html:
            print(display.html)
        case Output.tsv:
            print(display.tsv)
        case Output.clipboard:
            print(display.clipboard.html)
        case Output.chart:
            if display.chart is None:
                pp("[yellow]No @chart directive found in the query[/yellow]")
                raise Exit(code=1)
            payload = {"chart": display.chart.to_dict()}
            if display.rendered_chart and display.rendered_chart.labels:
                payload["labels"] = display.rendered_chart.instructions()
            print(jdumps(payload, indent=2))


tc = Typer(
    context_settings=dict(help_option_names=["-h", "--help"]),
    name="config",
    help="Configuration management",
)
app.add_typer(tc)


@tc.command("list", help="Show default configuration, if it exists")
def show_default_config(
    show_filename: Annotated[
        bool, Option(help="Show the filename for default config file")
    ] = False,
):
    dc = settings.default_config()
    pp(f"Default config file: {dc!s} (exists = {dc.exists()!s})")
    if not show_filename:
        settings.configure(dc, force=True)
        pp(dump(settings.instance().model_dump(exclude_none=True, mode="json")))
    pp(f"Default log file: {log.get_log_file()!s}")


@tc.command("create", help="Write the default configuration file")
def create_default_config(
    dry_run: Annotated[
        bool, Option(help="Dry run, do not overwrite the config file. Just print it")
    ] = False,
):
    # every default is written out, not only values set explicitly
    defaults = settings.Settings().model_dump(mode="json")
    inst = settings.Settings.model_validate(defaults)
    if (d := settings.write_settings(inst=inst, dry_run=dry_run)) and dry_run:
        pp(d)
    elif not dry_run:
        pp(f"Created default config file: {settings.default_config()!s}")


def cli():
    app()


if __name__ == "__main__":
    cli()
