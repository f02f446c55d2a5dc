from __future__ import annotations

import os
from typing import TYPE_CHECKING, Self

import pytest

from rsmkit import main as main_module
from rsmkit.app import PassResult
from rsmkit.domain.graph import Action
from rsmkit.domain.model import ObjectKey

if TYPE_CHECKING:
    from pathlib import Path

    from rsmkit.config import ClusterConfig


class FakeHttpClient:
    configs: list[ClusterConfig] = []  # noqa: RUF012

    def __init__(self, config: ClusterConfig) -> None:
        self.configs.append(config)
        self.closed = False

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.closed = True


@pytest.fixture
def captured(monkeypatch: pytest.MonkeyPatch) -> dict[str, object]:
    calls: dict[str, object] = {}
    FakeHttpClient.configs = []
    monkeypatch.setenv("RSMKIT_API_URL", "https://cluster.example")
    monkeypatch.setattr(main_module, "HttpClusterClient", FakeHttpClient)
    monkeypatch.setattr(main_module, "configure_logging", lambda **_: None)

    def fake_reconcile(key: ObjectKey, **kwargs: object) -> PassResult:
        calls["key"] = key
        calls.update(kwargs)
        return PassResult(key=key, dispatched={Action.CREATE: 2, Action.STATUS: 1})

    monkeypatch.setattr(main_module, "reconcile_workload", fake_reconcile)
    return calls


def test_main_cli_defaults(
    captured: dict[str, object], capsys: pytest.CaptureFixture[str]
) -> None:
    main_module.main(["web"])

    assert captured["key"] == ObjectKey("Workload", "default", "web")
    assert isinstance(captured["client"], FakeHttpClient)
    assert FakeHttpClient.configs[0].api_url == "https://cluster.example"
    assert capsys.readouterr().out.strip() == "Workload/default/web: create=2, status=1"


def test_main_cli_with_namespace(captured: dict[str, object]) -> None:
    main_module.main(["db", "--namespace", "prod", "-v"])

    assert captured["key"] == ObjectKey("Workload", "prod", "db")


def test_main_cli_reports_missing_and_up_to_date(
    monkeypatch: pytest.MonkeyPatch,
    captured: dict[str, object],
    capsys: pytest.CaptureFixture[str],
) -> None:
    del captured
    monkeypatch.setattr(
        main_module, "reconcile_workload", lambda key, **_: PassResult(key=key, found=False)
    )
    main_module.main(["web"])
    monkeypatch.setattr(main_module, "reconcile_workload", lambda key, **_: PassResult(key=key))
    main_module.main(["web"])

    assert capsys.readouterr().out.splitlines() == [
        "Workload/default/web not found",
        "Workload/default/web is up to date",
    ]


def test_main_cli_missing_configuration(
    monkeypatch: pytest.MonkeyPatch, captured: dict[str, object]
) -> None:
    monkeypatch.delenv("RSMKIT_API_URL")

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["web"])

    assert excinfo.value.code == 2
    assert "key" not in captured


def test_main_cli_requires_a_name(captured: dict[str, object]) -> None:
    del captured
    with pytest.raises(SystemExit) as excinfo:
        main_module.main([])

    assert excinfo.value.code == 2


def test_main_cli_pass_failure_exits_nonzero(
    monkeypatch: pytest.MonkeyPatch,
    captured: dict[str, object],
    capsys: pytest.CaptureFixture[str],
) -> None:
    del captured

    def failing(key: ObjectKey, **_: object) -> PassResult:
        raise RuntimeError(f"cluster unreachable for {key}")

    monkeypatch.setattr(main_module, "reconcile_workload", failing)

    with pytest.raises(SystemExit) as excinfo:
        main_module.main(["web"])

    assert excinfo.value.code == 1
    assert "cluster unreachable" in capsys.readouterr().err


def test_console_script_reads_dotenv_from_working_directory(
    monkeypatch: pytest.MonkeyPatch,
    request: pytest.FixtureRequest,
    tmp_path: Path,
    captured: dict[str, object],
) -> None:
    monkeypatch.delenv("RSMKIT_API_URL")
    (tmp_path / ".env").write_text("RSMKIT_API_URL=https://dotenv.example\n")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(main_module, "signal", lambda *_: None)
    request.addfinalizer(lambda: os.environ.pop("RSMKIT_API_URL", None))

    main_module.cli(["web"])

    assert captured["key"] == ObjectKey("Workload", "default", "web")
    assert FakeHttpClient.configs[0].api_url == "https://dotenv.example"
