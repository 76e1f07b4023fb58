"""Shared sandbox for tests that need real layered directories on disk.

``create_layered_sandbox`` lays out app/host/user roots under ``tmp_path`` for
the requested platform and returns the ``GREETING_LAYER_*`` overrides that
point :class:`DefaultPathResolver` at them.
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from greeting_service.adapters.env.default import default_env_prefix


@dataclass
class LayeredSandbox:
    vendor: str
    app: str
    slug: str
    platform: str
    roots: dict[str, Path]
    env: dict[str, str]
    start_dir: Path
    base: Path = field(repr=False)

    def write(self, layer: str, relative: str, *, content: str) -> Path:
        """Write *content* below the root of *layer* and return the file path."""

        path = self.roots[layer] / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def apply(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Export the overrides and drop stray service variables from the real environment."""

        prefix = default_env_prefix(self.slug) + "_"
        for key in list(os.environ):
            if key.startswith(prefix) or key.startswith("GREETING_LAYER_"):
                monkeypatch.delenv(key, raising=False)
        for key, value in self.env.items():
            monkeypatch.setenv(key, value)


def create_layered_sandbox(
    tmp_path: Path,
    *,
    vendor: str = "Acme",
    app: str = "Greeter",
    slug: str = "greeting-service",
    platform: str | None = None,
) -> LayeredSandbox:
    platform = platform or sys.platform
    env: dict[str, str] = {}
    if platform.startswith("win"):
        program_data = tmp_path / "ProgramData"
        appdata = tmp_path / "AppData" / "Roaming"
        env["GREETING_LAYER_PROGRAMDATA"] = str(program_data)
        env["GREETING_LAYER_APPDATA"] = str(appdata)
        env["GREETING_LAYER_LOCALAPPDATA"] = str(tmp_path / "AppData" / "Local")
        app_dir = program_data / vendor / app
        user_dir = appdata / vendor / app
    elif platform == "darwin":
        app_support = tmp_path / "Library" / "Application Support"
        home_support = tmp_path / "HomeLibrary" / "Application Support"
        env["GREETING_LAYER_MAC_APP_ROOT"] = str(app_support)
        env["GREETING_LAYER_MAC_HOME_ROOT"] = str(home_support)
        app_dir = app_support / vendor / app
        user_dir = home_support / vendor / app
    else:
        etc_root = tmp_path / "etc"
        xdg_root = tmp_path / "xdg"
        env["GREETING_LAYER_ETC"] = str(etc_root)
        env["XDG_CONFIG_HOME"] = str(xdg_root)
        app_dir = etc_root / slug
        user_dir = xdg_root / slug
    roots = {"app": app_dir, "host": app_dir / "hosts", "user": user_dir}
    for root in roots.values():
        root.mkdir(parents=True, exist_ok=True)
    start_dir = tmp_path / "project"
    start_dir.mkdir(exist_ok=True)
    return LayeredSandbox(
        vendor=vendor,
        app=app,
        slug=slug,
        platform=platform,
        roots=roots,
        env=env,
        start_dir=start_dir,
        base=tmp_path,
    )
