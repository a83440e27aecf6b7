from __future__ import annotations

import pytest

from domcapture.logging.artifacts import ArtifactManager
from tests.helpers import FakeClock


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def artifacts(tmp_path):
    return ArtifactManager(tmp_path / "shots")
