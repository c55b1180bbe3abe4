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
from pydantic import (
    Field,
    AfterValidator,
    BaseModel,
    ConfigDict,
)
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import (
    Optional,
    Union,
    Annotated,
    Self,
    List,
    Dict,
    Any,
)
from pathlib import Path
from yaml import safe_load, dump
from contextvars import ContextVar
from os import environ
from importlib.util import find_spec

# Chart.js default dataset colours
DEFAULT_PALETTE = [
    "#36a2eb",
    "#ff6384",
    "#4bc0c0",
    "#ff9f40",
    "#9966ff",
    "#ffcd56",
    "#c9cbcf",
]


def _resolve_palette(palette: Union[str, List[str]]) -> List[str]:
    if isinstance(palette, str):
        palette = [c.strip() for c in palette.split(",")]
    palette = [c for c in palette if c]
    if not palette:
        raise ValueError("palette must contain at least one colour")
    return palette


class Display(BaseModel):
    null_marker: Optional[str] = Field(
        default="NULL", description="Text shown for null cells in the live table"
    )
    zebra_background: Optional[str] = Field(
        default="#f9f9f9",
        description="Background of odd body rows in clipboard markup",
    )
    header_background: Optional[str] = Field(default="#f0f0f0")
    border: Optional[str] = Field(default="1px solid #cccccc")
    model_config = ConfigDict(validate_assignment=True)


class LabelLayout(BaseModel):
    """Geometry constants for pie chart label placement"""

    extension: Optional[float] = Field(
        default=15.0, description="Distance of the leader elbow beyond the pie"
    )
    right_offset: Optional[float] = Field(
        default=20.0, description="Gap between the pie and right-side labels"
    )
    left_gap: Optional[float] = Field(
        default=30.0, description="Gap between left-side label text and the pie"
    )
    text_gap: Optional[float] = Field(default=4.0)
    swatch_size: Optional[float] = Field(default=10.0)
    margin_top: Optional[float] = Field(default=10.0)
    margin_bottom: Optional[float] = Field(default=10.0)
    font_size: Optional[float] = Field(default=12.0)
    model_config = ConfigDict(validate_assignment=True)


class Chart(BaseModel):
    width: Optional[int] = Field(default=800)
    height: Optional[int] = Field(default=400)
    palette: Annotated[Union[str, List[str]], AfterValidator(_resolve_palette)] = (
        Field(default_factory=lambda: list(DEFAULT_PALETTE))
    )
    label_layout: Optional[LabelLayout] = Field(default_factory=LabelLayout)
    model_config = ConfigDict(validate_assignment=True)


class Settings(BaseSettings):
    display: Optional[Display] = Field(default_factory=Display)
    chart: Optional[Chart] = Field(default_factory=Chart)
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_prefix="QUERYCANVAS_",
        extra="ignore",
        use_enum_values=True,
    )

    def with_overrides(self, overrides: Dict[str, Any]) -> Self:
        def set_values(aparts: List[str], value: Any, obj: Any):
            if len(aparts) == 1 and hasattr(obj, aparts[0]):
                setattr(obj, aparts[0], value)
            elif hasattr(obj, aparts[0]):
                set_values(aparts[1:], value, getattr(obj, aparts[0]))

        for aparts, value in [
            (attr.split("."), value)
            for attr, value in overrides.items()
            if value is not None
        ]:
            set_values(aparts, value, self)

        return self


_settings: ContextVar[Settings] = ContextVar("settings", default=None)


# the default config is ~/.config/querycanvas/config.yaml, use it if it exists
def default_config() -> Path:
    _top = "querycanvas"
    if (_spec := find_spec(__name__)) and _spec.name:
        _top = _spec.name.split(".")[0]
    return (
        Path(environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))
        / _top
        / "config.yaml"
    )


# configures the settings using the given config file and overwrites the global
# settings instance if force is True
def configure(cfg: Union[str, Path] = None, force=False) -> ContextVar[Settings]:
    global _settings
    if force and isinstance(_settings.get(), Settings):
        old = _settings.get()
        try:
            _settings.set(None)
            configure(cfg, force=False)
        except Exception:
            # don't replace the old if there is an issue setting the new value
            _settings.set(old)
            raise

    if isinstance(cfg, str):
        cfg = Path(cfg)

    if cfg is None:
        cfg = default_config()

    if not cfg.exists():
        cfg.parent.mkdir(parents=True, exist_ok=True)
        cfg.touch()

    with cfg.open() as f:
        s = safe_load(f)
        _settings.set(Settings.model_validate(s if s else {}))

    return _settings


# Get the current settings instance if one has been configured. If not try
# to configure it using the default config file. If that fails, create a new
# empty settings instance.
def instance() -> Settings | None:
    global _settings
    if not isinstance(_settings.get(), Settings):
        try:
            configure()  # use default config, if exists
        except (FileNotFoundError, PermissionError):
            _settings.set(Settings())
    return _settings.get()


def write_settings(
    cfg: Path = None, inst: Settings = None, dry_run: bool = False
) -> str | None:
    if cfg is None:
        cfg = default_config()

    if not isinstance(inst, Settings):
        inst = instance()

    d = inst.model_dump(exclude_none=True, mode="json", exclude_unset=True)
    if dry_run:
        return dump(d)

    if not cfg.exists() or not cfg.parent.exists():
        cfg.parent.mkdir(parents=True, exist_ok=True)

    with cfg.open("w") as f:
        dump(d, f)
