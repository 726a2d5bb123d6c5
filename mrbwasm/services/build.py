"""Build service: Ruby script to WebAssembly.

Pipeline, in order:
- validate the input script
- gate on the toolchain doctor and on the bundled assets
- stage a clean ``build/`` directory
- mrbc: script -> ``app.c`` (bytecode embedded as a C array)
- append the runtime-initialization stub to ``app.c``
- emcc: ``app.c`` + libmruby -> ``app.js`` + ``app.wasm``
- copy the host page, remove ``app.c``

Every tool's exit status is checked; the first failure stops the pipeline
before the host page is copied.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from mrbwasm.core.result import Err, Ok, Result
from mrbwasm.output.console import Style
from mrbwasm.services.base import BaseService
from mrbwasm.services.doctor import DoctorService
from mrbwasm.toolchain.adapter import SubprocessToolchain, ToolRun, emcc_args, mrbc_args

if TYPE_CHECKING:
    from mrbwasm.core.config import Config
    from mrbwasm.output.console import ConsoleProtocol
    from mrbwasm.platform.detection import Platform
    from mrbwasm.toolchain.adapter import Toolchain


__all__ = ["BuildArtifacts", "BuildError", "BuildRequest", "BuildService"]

BuildErrorKind = Literal[
    "no_input",
    "input_missing",
    "toolchain_missing",
    "assets_missing",
    "compile_failed",
    "intermediate_missing",
    "output_missing",
    "io_error",
]


@dataclass(frozen=True, slots=True)
class BuildRequest:
    source: Path | None
    dry_run: bool = False


@dataclass(frozen=True, slots=True)
class BuildArtifacts:
    output_dir: Path
    module: Path
    loader: Path
    page: Path


@dataclass(frozen=True, slots=True)
class BuildError:
    """Error from the build pipeline."""

    kind: BuildErrorKind
    message: str
    hint: str | None = None
    run: ToolRun | None = None


class BuildService(BaseService):
    def __init__(
        self,
        *,
        config: Config,
        console: ConsoleProtocol,
        platform: Platform | None = None,
        doctor: DoctorService | None = None,
        toolchain: Toolchain | None = None,
    ) -> None:
        super().__init__(config=config, console=console, platform=platform)
        self._doctor = doctor or DoctorService(
            config=config, console=console, platform=self._platform
        )
        self._toolchain = toolchain or SubprocessToolchain()

    def build(self, request: BuildRequest) -> Result[BuildArtifacts, BuildError]:
        """Run the whole pipeline for one script."""
        checked = self._validate_input(request.source)
        if isinstance(checked, Err):
            return checked
        source = checked.value

        if self._doctor.check(gate=True).has_errors:
            return Err(
                BuildError(
                    "toolchain_missing",
                    "toolchain errors found",
                    hint="Resolve the toolchain errors above, then run the build again",
                )
            )

        assets = self._check_assets()
        if isinstance(assets, Err):
            return assets

        cfg = self._config
        if request.dry_run:
            self._console.print(" ".join(mrbc_args(cfg, source)), Style.DIM)
            self._console.print(" ".join(emcc_args(cfg)), Style.DIM)
            self._console.print("Dry-run: nothing staged or compiled", Style.DIM)
            return Ok(self._artifacts())

        staged = self._stage()
        if isinstance(staged, Err):
            return staged

        compiled = self._compile_bytecode(source)
        if isinstance(compiled, Err):
            return compiled

        injected = self._inject_runtime_stub()
        if isinstance(injected, Err):
            return injected

        linked = self._compile_web()
        if isinstance(linked, Err):
            return linked

        try:
            shutil.copyfile(cfg.page_template, cfg.page_path)
            cfg.intermediate_path.unlink(missing_ok=True)
        except OSError as e:
            return Err(self._io_failed("cannot install host page", e))

        return Ok(self._artifacts())

    # -------------------------------------------------------------------------
    # Pipeline stages
    # -------------------------------------------------------------------------

    def _validate_input(self, source: Path | None) -> Result[Path, BuildError]:
        if source is None:
            return Err(
                BuildError("no_input", "no input file given", hint="Usage: mrbwasm build <file>")
            )
        if not source.exists():
            return Err(BuildError("input_missing", f"input file not found: {source}"))
        if not source.is_file():
            return Err(BuildError("input_missing", f"input is not a file: {source}"))
        return Ok(source.resolve())

    def _check_assets(self) -> Result[None, BuildError]:
        cfg = self._config
        required = (cfg.runtime_stub, cfg.page_template, cfg.include_dir, cfg.static_lib)
        missing = [p for p in required if not p.exists()]
        if not missing:
            return Ok(None)
        return Err(
            BuildError(
                "assets_missing",
                "bundled assets not found: " + ", ".join(str(p) for p in missing),
                hint="Set MRBWASM_ASSETS_DIR (or [paths] assets in mrbwasm.toml) "
                "to an mruby build for Emscripten",
            )
        )

    def _stage(self) -> Result[None, BuildError]:
        """Remove stale artifacts, then make sure the output directory exists."""
        try:
            for path in self._config.staged_paths:
                path.unlink(missing_ok=True)
            self._config.output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            return Err(self._io_failed("cannot prepare output directory", e))
        return Ok(None)

    def _compile_bytecode(self, source: Path) -> Result[None, BuildError]:
        self._console.print(" ".join(mrbc_args(self._config, source)), Style.DIM)
        run = self._toolchain.compile_bytecode(self._config, source)
        if not run.ok:
            return Err(self._tool_failed(run))

        intermediate = self._config.intermediate_path
        if not intermediate.is_file() or intermediate.stat().st_size == 0:
            return Err(
                BuildError(
                    "intermediate_missing",
                    f"{run.tool} produced no output: {intermediate}",
                    run=run,
                )
            )
        return Ok(None)

    def _inject_runtime_stub(self) -> Result[None, BuildError]:
        try:
            stub = self._config.runtime_stub.read_text(encoding="utf-8")
            with self._config.intermediate_path.open("a", encoding="utf-8") as f:
                f.write("\n\n")
                f.write(stub)
        except OSError as e:
            return Err(self._io_failed("cannot append runtime stub", e))
        return Ok(None)

    def _compile_web(self) -> Result[None, BuildError]:
        self._console.print(" ".join(emcc_args(self._config)), Style.DIM)
        run = self._toolchain.compile_web(self._config)
        if not run.ok:
            return Err(self._tool_failed(run))

        cfg = self._config
        missing = [p for p in (cfg.loader_path, cfg.module_path) if not p.is_file()]
        if missing:
            return Err(
                BuildError(
                    "output_missing",
                    f"{run.tool} output not found: " + ", ".join(str(p) for p in missing),
                    run=run,
                )
            )
        return Ok(None)

    # -------------------------------------------------------------------------
    # Internal helpers
    # -------------------------------------------------------------------------

    def _tool_failed(self, run: ToolRun) -> BuildError:
        return BuildError(
            "compile_failed",
            f"{run.tool} failed with code {run.returncode}",
            run=run,
        )

    def _io_failed(self, what: str, exc: OSError) -> BuildError:
        return BuildError(
            "io_error",
            f"{what}: {exc}",
            hint=f"Check that {self._config.output_dir} is a writable directory",
        )

    def _artifacts(self) -> BuildArtifacts:
        cfg = self._config
        return BuildArtifacts(
            output_dir=cfg.output_dir,
            module=cfg.module_path,
            loader=cfg.loader_path,
            page=cfg.page_path,
        )
