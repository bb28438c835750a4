from __future__ import annotations

import importlib.util
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[2]


def _load_validator():
    module_spec = importlib.util.spec_from_file_location(
        "validate_code_deps", REPO_ROOT / "scripts" / "validate_code_deps.py"
    )
    mod = importlib.util.module_from_spec(module_spec)
    sys.modules[module_spec.name] = mod
    module_spec.loader.exec_module(mod)
    return mod


def test_layers_are_assigned() -> None:
    v = _load_validator()
    assert v.get_module_layer("skyfeed/core/config") == 0
    assert v.get_module_layer("skyfeed/security/gateway") == 1
    assert v.get_module_layer("skyfeed/feed/telemetry") == 2
    assert v.get_module_layer("api/routes/feed") == 3
    assert v.get_module_layer("tests/unit/test_cli") is None


def test_codebase_respects_layers(capsys) -> None:
    assert _load_validator().main() == 0


def test_upward_import_and_cycle_are_reported(tmp_path: Path) -> None:
    v = _load_validator()
    core = tmp_path / "skyfeed" / "core"
    feed = tmp_path / "skyfeed" / "feed"
    core.mkdir(parents=True)
    feed.mkdir(parents=True)
    (tmp_path / "api").mkdir()
    (core / "__init__.py").write_text("")
    (feed / "__init__.py").write_text("")
    (core / "config.py").write_text("from skyfeed.feed.skeleton import FeedSkeleton\n")
    (feed / "skeleton.py").write_text("from skyfeed.core.config import Config\n")

    modules = v.collect_modules(tmp_path)
    violations = v.layer_violations(modules)
    assert len(violations) == 1
    assert "skyfeed/core/config.py (layer 0)" in violations[0]

    cycles = v.import_cycles(modules)
    assert cycles == ["cycle: skyfeed.core.config -> skyfeed.feed.skeleton -> skyfeed.core.config"]
