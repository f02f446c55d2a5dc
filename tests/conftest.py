from __future__ import annotations

import pytest

from rsmkit.adapters.memory import InMemoryCluster
from tests.helpers.workloads import RecordingEventRecorder


@pytest.fixture(autouse=True)
def _clear_rsmkit_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "RSMKIT_API_URL",
        "RSMKIT_API_TOKEN",
        "RSMKIT_API_TIMEOUT",
        "RSMKIT_API_GROUP",
        "RSMKIT_API_VERSION",
        "RSMKIT_FINALIZER",
        "RSMKIT_FIELD_MANAGER",
        "RSMKIT_TRANSFORM_PARALLELISM",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def cluster() -> InMemoryCluster:
    return InMemoryCluster()


@pytest.fixture
def recorder() -> RecordingEventRecorder:
    return RecordingEventRecorder()
