"""Build mruby scripts into WebAssembly modules and serve them locally."""

from __future__ import annotations

__version__ = "0.3.0"
