from __future__ import annotations

import dataclasses
from pathlib import Path

import pytest
from conftest import STUB, TEMPLATE, FakeToolchain, make_doctor

from mrbwasm.core.config import Config
from mrbwasm.core.errors import ErrorCode
from mrbwasm.core.result import Err, Ok
from mrbwasm.output.console import MockConsole, Style
from mrbwasm.output.errors import build_error_exit_code
from mrbwasm.platform.detection import Platform
from mrbwasm.services.build import BuildRequest, BuildService


def _service(
    config: Config,
    console: MockConsole,
    toolchain: FakeToolchain,
    present: tuple[str, ...] = ("mrbc", "emcc", "emar"),
) -> BuildService:
    return BuildService(
        config=config,
        console=console,
        platform=Platform.LINUX,
        doctor=make_doctor(config, console, present),
        toolchain=toolchain,
    )


def _snapshot(directory: Path) -> dict[str, bytes]:
    if not directory.exists():
        return {}
    return {p.name: p.read_bytes() for p in sorted(directory.iterdir())}


def test_build_produces_module_loader_and_page_only(config: Config, script: Path) -> None:
    toolchain = FakeToolchain()
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Ok)
    artifacts = result.value
    assert artifacts.module == config.output_dir / "app.wasm"
    assert artifacts.loader == config.output_dir / "app.js"
    assert artifacts.page == config.output_dir / "index.html"
    assert sorted(p.name for p in config.output_dir.iterdir()) == [
        "app.js",
        "app.wasm",
        "index.html",
    ]
    assert config.page_path.read_text(encoding="utf-8") == TEMPLATE


def test_build_twice_leaves_same_output(config: Config, script: Path) -> None:
    service = _service(config, MockConsole(), FakeToolchain())

    assert service.build(BuildRequest(source=script)).is_ok()
    first = _snapshot(config.output_dir)
    assert service.build(BuildRequest(source=script)).is_ok()

    assert _snapshot(config.output_dir) == first


def test_build_removes_stale_artifacts_before_compiling(config: Config, script: Path) -> None:
    config.output_dir.mkdir()
    config.page_path.write_text("stale", encoding="utf-8")
    config.module_path.write_bytes(b"stale")

    # emcc "succeeds" without writing anything: stale files must not satisfy the check
    toolchain = FakeToolchain(write_outputs=False)
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "output_missing"
    assert not config.page_path.exists()
    assert not config.module_path.exists()


def test_build_appends_runtime_stub_after_blank_line(config: Config, script: Path) -> None:
    toolchain = FakeToolchain()
    _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert toolchain.intermediate_at_link is not None
    assert toolchain.intermediate_at_link.endswith("};\n\n" + STUB)


def test_build_invokes_mrbc_with_app_tag_and_output(config: Config, script: Path) -> None:
    toolchain = FakeToolchain()
    _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    mrbc, emcc = toolchain.calls
    assert mrbc == ["mrbc", "-Bapp", "-o", str(config.intermediate_path), str(script.resolve())]
    assert emcc[:3] == ["emcc", "-s", "WASM=1"]
    assert str(config.static_lib) in emcc
    assert emcc[emcc.index("-I") + 1] == str(config.include_dir)
    assert emcc[emcc.index("-o") + 1] == str(config.loader_path)


@pytest.mark.parametrize("optimize", [True, False])
def test_optimize_toggles_both_switches_together(
    config: Config, script: Path, optimize: bool
) -> None:
    toolchain = FakeToolchain()
    cfg = dataclasses.replace(config, optimize=optimize)
    _service(cfg, MockConsole(), toolchain).build(BuildRequest(source=script))

    emcc = toolchain.calls[-1]
    assert ("-Os" in emcc) is optimize
    assert ("--closure" in emcc) is optimize
    if optimize:
        assert emcc[3] == "-Os"
        assert emcc[-2:] == ["--closure", "1"]


def test_build_without_input_is_usage_error(config: Config) -> None:
    toolchain = FakeToolchain()
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=None))

    assert isinstance(result, Err)
    assert result.error.kind == "no_input"
    assert toolchain.calls == []
    assert not config.output_dir.exists()


def test_build_missing_input_leaves_output_untouched(config: Config, tmp_path: Path) -> None:
    config.output_dir.mkdir()
    config.page_path.write_text("previous build", encoding="utf-8")
    before = _snapshot(config.output_dir)

    toolchain = FakeToolchain()
    result = _service(config, MockConsole(), toolchain).build(
        BuildRequest(source=tmp_path / "missing.rb")
    )

    assert isinstance(result, Err)
    assert result.error.kind == "input_missing"
    assert _snapshot(config.output_dir) == before
    assert toolchain.calls == []


def test_build_rejects_directory_input(config: Config, tmp_path: Path) -> None:
    (tmp_path / "src").mkdir()
    result = _service(config, MockConsole(), FakeToolchain()).build(
        BuildRequest(source=tmp_path / "src")
    )

    assert isinstance(result, Err)
    assert result.error.kind == "input_missing"


def test_missing_tool_blocks_staging_and_compilers(config: Config, script: Path) -> None:
    console = MockConsole()
    toolchain = FakeToolchain()
    result = _service(config, console, toolchain, present=("mrbc", "emar")).build(
        BuildRequest(source=script)
    )

    assert isinstance(result, Err)
    assert result.error.kind == "toolchain_missing"
    assert toolchain.calls == []
    assert not config.output_dir.exists()
    assert "emcc: missing" in console.lines(Style.ERROR)


def test_missing_assets_reported_before_staging(tmp_path: Path, script: Path) -> None:
    cfg = Config(output_dir=tmp_path / "build", assets_dir=tmp_path / "nowhere")
    toolchain = FakeToolchain()
    result = _service(cfg, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "assets_missing"
    assert "libmruby.a" in result.error.message
    assert toolchain.calls == []
    assert not cfg.output_dir.exists()


def test_mrbc_failure_stops_before_emcc(config: Config, script: Path) -> None:
    toolchain = FakeToolchain(mrbc_code=1)
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "compile_failed"
    assert result.error.run is not None
    assert result.error.run.tool == "mrbc"
    assert "syntax error" in result.error.run.stderr
    assert len(toolchain.calls) == 1
    assert not config.page_path.exists()


def test_mrbc_without_output_is_reported(config: Config, script: Path) -> None:
    toolchain = FakeToolchain(write_intermediate=False)
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "intermediate_missing"
    assert len(toolchain.calls) == 1


def test_emcc_failure_skips_host_page(config: Config, script: Path) -> None:
    toolchain = FakeToolchain(emcc_code=1)
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "compile_failed"
    assert result.error.run is not None
    assert result.error.run.returncode == 1
    assert not config.page_path.exists()
    # Kept for inspection; the next build stages it away
    assert config.intermediate_path.exists()


def test_dry_run_prints_commands_without_staging(config: Config, script: Path) -> None:
    console = MockConsole()
    toolchain = FakeToolchain()
    cfg = dataclasses.replace(config, optimize=True)
    result = _service(cfg, console, toolchain).build(BuildRequest(source=script, dry_run=True))

    assert result.is_ok()
    assert toolchain.calls == []
    assert not cfg.output_dir.exists()
    assert any(line.startswith("mrbc -Bapp") for line in console.lines(Style.DIM))
    assert any(line.startswith("emcc -s WASM=1 -Os") for line in console.lines(Style.DIM))


def test_output_path_taken_by_file_is_reported(config: Config, script: Path) -> None:
    config.output_dir.write_text("x", encoding="utf-8")
    toolchain = FakeToolchain()
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "io_error"
    assert build_error_exit_code(result.error) == ErrorCode.IO_ERROR
    assert toolchain.calls == []
    assert config.output_dir.read_text(encoding="utf-8") == "x"


def test_unreadable_stub_is_reported_before_emcc(
    config: Config, script: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    real_read_text = Path.read_text

    def read_text(self: Path, *args: str, **kwargs: str) -> str:
        if self == config.runtime_stub:
            raise PermissionError(13, "Permission denied", str(self))
        return real_read_text(self, *args, **kwargs)

    monkeypatch.setattr(Path, "read_text", read_text)
    toolchain = FakeToolchain()
    result = _service(config, MockConsole(), toolchain).build(BuildRequest(source=script))

    assert isinstance(result, Err)
    assert result.error.kind == "io_error"
    assert "runtime stub" in result.error.message
    assert len(toolchain.calls) == 1
    assert not config.page_path.exists()
