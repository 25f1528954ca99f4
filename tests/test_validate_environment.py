from __future__ import annotations

import importlib.util
from pathlib import Path


SCRIPT_PATH = Path(__file__).resolve().parents[1] / "scripts" / "validate_environment.py"


def load_script():
    spec = importlib.util.spec_from_file_location("validate_environment", SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_environment_checks_pass(capsys) -> None:
    module = load_script()

    assert module.main() == 0
    output = capsys.readouterr().out
    assert "Offline submission" in output
    assert "[FAIL]" not in output
