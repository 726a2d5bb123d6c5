from __future__ import annotations

from pathlib import Path

import pytest

from mrbwasm.core.config import Config
from mrbwasm.output.console import MockConsole
from mrbwasm.platform.detection import LinuxDistro, Platform
from mrbwasm.services.checkers.toolchain import ToolchainChecker
from mrbwasm.services.doctor import DoctorService
from mrbwasm.toolchain.adapter import ToolRun, emcc_args, mrbc_args

STUB = "int main(void) { return 0; }\n"
TEMPLATE = "<!doctype html><script src=\"app.js\"></script>\n"


class FakeToolchain:
    """Simulates mrbc/emcc by writing the files the real tools would produce."""

    def __init__(
        self,
        *,
        mrbc_code: int = 0,
        emcc_code: int = 0,
        write_intermediate: bool = True,
        write_outputs: bool = True,
    ) -> None:
        self.calls: list[list[str]] = []
        self.intermediate_at_link: str | None = None
        self._mrbc_code = mrbc_code
        self._emcc_code = emcc_code
        self._write_intermediate = write_intermediate
        self._write_outputs = write_outputs

    def compile_bytecode(self, config: Config, source: Path) -> ToolRun:
        argv = mrbc_args(config, source)
        self.calls.append(argv)
        if self._mrbc_code == 0 and self._write_intermediate:
            config.intermediate_path.write_text(
                "const uint8_t app[] = {0x52, 0x49, 0x54, 0x45};", encoding="utf-8"
            )
        stderr = "" if self._mrbc_code == 0 else "hello.rb:1: syntax error"
        return ToolRun("mrbc", argv, self._mrbc_code, stderr=stderr)

    def compile_web(self, config: Config) -> ToolRun:
        argv = emcc_args(config)
        self.calls.append(argv)
        self.intermediate_at_link = config.intermediate_path.read_text(encoding="utf-8")
        if self._emcc_code == 0 and self._write_outputs:
            config.loader_path.write_text("// loader", encoding="utf-8")
            config.module_path.write_bytes(b"\0asm\x01\0\0\0")
        stderr = "" if self._emcc_code == 0 else "emcc: error: undefined symbol: main"
        return ToolRun("emcc", argv, self._emcc_code, stderr=stderr)


def make_assets(root: Path) -> Path:
    assets = root / "assets"
    (assets / "include").mkdir(parents=True)
    (assets / "lib").mkdir()
    (assets / "lib" / "libmruby.a").write_bytes(b"!<arch>\n")
    (assets / "runtime_init.c").write_text(STUB, encoding="utf-8")
    (assets / "index.html").write_text(TEMPLATE, encoding="utf-8")
    return assets


def make_doctor(
    config: Config, console: MockConsole, present: tuple[str, ...] = ("mrbc", "emcc", "emar")
) -> DoctorService:
    checker = ToolchainChecker(
        platform=Platform.LINUX,
        distro=LinuxDistro.DEBIAN,
        which=lambda name: f"/usr/bin/{name}" if name in present else None,
    )
    return DoctorService(config=config, console=console, platform=Platform.LINUX, checker=checker)


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(output_dir=tmp_path / "build", assets_dir=make_assets(tmp_path))


@pytest.fixture
def script(tmp_path: Path) -> Path:
    path = tmp_path / "hello.rb"
    path.write_text('puts "hello"\n', encoding="utf-8")
    return path
