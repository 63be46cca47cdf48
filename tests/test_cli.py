from unittest.mock import AsyncMock, MagicMock

import pytest
from docker.errors import APIError

from appsnet import cli
from appsnet.docker_ops import RuntimeUnavailable


@pytest.fixture(autouse=True)
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "init_logging", lambda level: None)


def test_help_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(["--help"])
    assert exc.value.code == 0
    assert "apps-internal" in capsys.readouterr().out


def test_unreachable_daemon_exits_nonzero(monkeypatch):
    monkeypatch.setattr(cli.DockerRuntime, "from_env", MagicMock(side_effect=RuntimeUnavailable("no daemon")))
    assert cli.main([]) == 1


def test_network_creation_failure_exits_nonzero(monkeypatch, runtime):
    runtime.create_network = AsyncMock(side_effect=APIError("pool overlaps with other one on this address space"))
    monkeypatch.setattr(cli.DockerRuntime, "from_env", MagicMock(return_value=runtime))
    assert cli.main([]) == 1


def test_invalid_alias_exits_before_touching_docker(monkeypatch, caplog):
    monkeypatch.setenv("HOST_GATEWAY_ALIASES", "gw$HOME.local")
    from_env = MagicMock()
    monkeypatch.setattr(cli.DockerRuntime, "from_env", from_env)
    assert cli.main([]) == 1
    from_env.assert_not_called()
    assert "Invalid host gateway alias 'gw$HOME.local'" in caplog.text
