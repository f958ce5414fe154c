import logging

import pytest

from aoss_setup import main as cli
from aoss_setup.services.setup.collection_setup_service import CollectionTimeoutError
from aoss_setup.services.setup.opensearch_setup_service import SetupReport


@pytest.fixture(autouse=True)
def _aws_env(monkeypatch):
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "AKIDEXAMPLE")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "secret")
    monkeypatch.delenv("AWS_PROFILE", raising=False)
    monkeypatch.delenv("AOSS_POLL_INTERVAL_SECONDS", raising=False)
    monkeypatch.delenv("AOSS_MAX_POLL_ATTEMPTS", raising=False)


def test_exit_zero_on_completion(monkeypatch):
    seen = {}

    async def fake_run(*, aws, config, plan):
        seen.update(aws=aws, config=config, plan=plan)
        return SetupReport(endpoint="https://x.us-east-1.aoss.amazonaws.com")

    monkeypatch.setattr(cli, "run", fake_run)

    assert cli.main(["--poll-interval", "10", "--max-attempts", "0"]) == 0
    assert seen["config"].poll_interval_seconds == 10.0
    assert seen["config"].max_poll_attempts is None
    assert seen["plan"].collection.name == "action-movies"
    assert seen["aws"].region_name == "us-east-1"


def test_exit_one_on_fatal_error(monkeypatch, caplog):
    async def fake_run(*, aws, config, plan):
        raise CollectionTimeoutError("Timed out waiting for collection to become ACTIVE: action-movies")

    monkeypatch.setattr(cli, "run", fake_run)

    with caplog.at_level(logging.ERROR):
        assert cli.main([]) == 1
    assert "Timed out waiting" in caplog.text


def test_exit_one_without_region(monkeypatch):
    monkeypatch.delenv("AWS_DEFAULT_REGION")
    monkeypatch.delenv("AWS_REGION", raising=False)

    assert cli.main([]) == 1


def test_principal_flag_reaches_access_policy(monkeypatch):
    seen = {}

    async def fake_run(*, aws, config, plan):
        seen["plan"] = plan
        return SetupReport()

    monkeypatch.setattr(cli, "run", fake_run)

    cli.main(["--principal", "arn:aws:iam::123456789012:role/writer"])

    access = seen["plan"].policies[2]
    assert access.policy[0].principal == ["arn:aws:iam::123456789012:role/writer"]
