"""Per-invocation configuration.

A single immutable ``Config`` is built once by the CLI and passed to every
service. Defaults can be adjusted by an optional ``mrbwasm.toml`` in the
working directory and by the ``MRBWASM_ASSETS_DIR`` environment variable.
"""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

__all__ = [
    "APP_NAME",
    "ASSETS_ENV_VAR",
    "CONFIG_FILENAME",
    "DEFAULT_HOST",
    "INTERMEDIATE_NAME",
    "LOADER_NAME",
    "MODULE_NAME",
    "OUTPUT_DIRNAME",
    "PAGE_NAME",
    "SERVE_PORT",
    "Config",
    "ConfigError",
    "default_assets_dir",
    "load_config",
]


CONFIG_FILENAME = "mrbwasm.toml"
ASSETS_ENV_VAR = "MRBWASM_ASSETS_DIR"

OUTPUT_DIRNAME = "build"
APP_NAME = "app"
SERVE_PORT = 8000
DEFAULT_HOST = "127.0.0.1"

# Artifact names inside the output directory
INTERMEDIATE_NAME = f"{APP_NAME}.c"
LOADER_NAME = f"{APP_NAME}.js"
MODULE_NAME = f"{APP_NAME}.wasm"
PAGE_NAME = "index.html"

# Bundled asset names inside the assets directory
RUNTIME_STUB_NAME = "runtime_init.c"
PAGE_TEMPLATE_NAME = "index.html"
INCLUDE_DIRNAME = "include"
STATIC_LIB_PATH = Path("lib") / "libmruby.a"


class ConfigError(Exception):
    """Raised when the project file cannot be used."""


def default_assets_dir() -> Path:
    return Path(__file__).resolve().parents[1] / "assets"


@dataclass(frozen=True, slots=True)
class Config:
    output_dir: Path
    assets_dir: Path
    optimize: bool = False
    app_name: str = APP_NAME
    port: int = SERVE_PORT
    host: str = DEFAULT_HOST

    # Output artifacts

    @property
    def intermediate_path(self) -> Path:
        return self.output_dir / INTERMEDIATE_NAME

    @property
    def loader_path(self) -> Path:
        return self.output_dir / LOADER_NAME

    @property
    def module_path(self) -> Path:
        return self.output_dir / MODULE_NAME

    @property
    def page_path(self) -> Path:
        return self.output_dir / PAGE_NAME

    @property
    def staged_paths(self) -> tuple[Path, ...]:
        """Artifacts removed before every build."""
        return (self.intermediate_path, self.loader_path, self.module_path, self.page_path)

    # Bundled assets

    @property
    def runtime_stub(self) -> Path:
        return self.assets_dir / RUNTIME_STUB_NAME

    @property
    def page_template(self) -> Path:
        return self.assets_dir / PAGE_TEMPLATE_NAME

    @property
    def include_dir(self) -> Path:
        return self.assets_dir / INCLUDE_DIRNAME

    @property
    def static_lib(self) -> Path:
        return self.assets_dir / STATIC_LIB_PATH

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}/{PAGE_NAME}"


def load_config(
    cwd: Path | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> Config:
    """Build the configuration for one invocation.

    Precedence for the assets directory: environment variable, then
    ``[paths] assets`` in the project file, then the bundled directory.
    """
    root = (cwd or Path.cwd()).resolve()
    environ = os.environ if env is None else env

    optimize = False
    assets_dir = default_assets_dir()

    project_file = root / CONFIG_FILENAME
    if project_file.is_file():
        data = _read_toml(project_file)

        build = _table(data, "build", project_file)
        value = build.get("optimize", False)
        if not isinstance(value, bool):
            raise ConfigError(f"{project_file}: build.optimize must be a boolean")
        optimize = value

        paths = _table(data, "paths", project_file)
        assets = paths.get("assets")
        if assets is not None:
            if not isinstance(assets, str) or not assets:
                raise ConfigError(f"{project_file}: paths.assets must be a non-empty string")
            assets_dir = (root / Path(assets).expanduser()).resolve()

    override = environ.get(ASSETS_ENV_VAR, "").strip()
    if override:
        assets_dir = Path(override).expanduser().resolve()

    return Config(
        output_dir=root / OUTPUT_DIRNAME,
        assets_dir=assets_dir,
        optimize=optimize,
    )


def _read_toml(path: Path) -> dict[str, object]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"{path}: invalid TOML ({e})") from e
    except OSError as e:
        raise ConfigError(f"{path}: cannot read ({e})") from e


def _table(data: dict[str, object], key: str, path: Path) -> dict[str, object]:
    value = data.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{path}: [{key}] must be a table")
    return value
