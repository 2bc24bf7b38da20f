from __future__ import annotations

import pytest

from openalex_mcp.config import Settings

from .fakes import Upstream


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def settings() -> Settings:
    return Settings(openalex_email="team@example.org")
