from __future__ import annotations

from pathlib import Path

import pytest

FIXTURES = Path(__file__).parent / "fixtures"


@pytest.fixture
def licenses_dir() -> Path:
    return FIXTURES / "licenses"


@pytest.fixture
def mit_text(licenses_dir: Path) -> str:
    return (licenses_dir / "MIT").read_text(encoding="utf-8")


@pytest.fixture
def bsd_text(licenses_dir: Path) -> str:
    return (licenses_dir / "BSD-3-Clause").read_text(encoding="utf-8")


@pytest.fixture
def apache_text(licenses_dir: Path) -> str:
    return (licenses_dir / "Apache-2.0").read_text(encoding="utf-8")
