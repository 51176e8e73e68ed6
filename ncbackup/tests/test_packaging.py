from __future__ import annotations

import re
from pathlib import Path

ROOT = Path(__file__).resolve().parents[2]


def test_readme_metadata_points_at_project_readme():
    text = (ROOT / "pyproject.toml").read_text(encoding="utf-8")
    m = re.search(r'^readme = "([^"]+)"', text, re.MULTILINE)
    assert m is not None
    assert m.group(1) == "README.md"
    assert (ROOT / m.group(1)).is_file()
