import json
from pathlib import Path

import boto3
import pytest
from conftest import FakeStackDeployer
from moto import mock_aws
from mypy_boto3_dynamodb.client import DynamoDBClient
from pytest_mock import MockerFixture

from alarm_stacker import cli, core
from alarm_stacker.generator import GroupStatus


@pytest.fixture()
def dynamodb_client():
    """Create mock dynamodb client for tests

    Yields:
        DynamoDBClient : mocked by moto
    """
    with mock_aws():
        client = boto3.client("dynamodb")
        for name, read, write in [("first-dynamo-table", 100, 200), ("second-dynamo-table", 1000, 2000)]:
            client.create_table(
                TableName=name,
                KeySchema=[{"AttributeName": "id", "KeyType": "HASH"}],
                AttributeDefinitions=[{"AttributeName": "id", "AttributeType": "S"}],
                ProvisionedThroughput={"ReadCapacityUnits": read, "WriteCapacityUnits": write},
            )
        yield client


@pytest.fixture()
def deployer(mocker: MockerFixture) -> FakeStackDeployer:
    """Replace the CloudFormation deployer with an in-memory one

    Args:
        mocker (MockerFixture): mocker

    Returns:
        FakeStackDeployer: deployer
    """
    fake = FakeStackDeployer()
    mocker.patch("alarm_stacker.core.CloudFormationDeployer", return_value=fake)
    return fake


def _write_config(tmp_path: Path, resources: list) -> str:
    conf = {
        "globals": {"group_defaults": {"alarm_actions": ["arn:aws:sns:ap-northeast-1:123456789012:alarms"]}},
        "groups": {
            "test": {"service_type": "dynamodb", "resources": resources},
        },
    }
    config_path = tmp_path / "config.json"
    with open(config_path, "w") as f:
        json.dump(conf, f)
    return str(config_path)


def test_end_to_end_exec(
    tmp_path: Path,
    capfd: pytest.CaptureFixture[str],
    dynamodb_client: DynamoDBClient,
    deployer: FakeStackDeployer,
):
    """Tests end-to-end functionality

    Args:
        tmp_path (Path): temporary directory path
        capfd (CaptureFixture): capture
        dynamodb_client (DynamoDBClient): dynamodb client
        deployer (FakeStackDeployer): deployer
    """
    config_path = _write_config(tmp_path, [{"name": "first-dynamo-table"}, {"pattern": "second"}])
    opts = core.CommandOpts(config_file=config_path, preview=False, delete_stale_alarms=False, max_workers=None)

    report = core.main(opts)

    assert report.succeeded
    assert report.result_of("test").status is GroupStatus.DEPLOYED
    alarms_by_table = deployer.alarms_by_dimension("AlarmStacker-test", "TableName")
    assert set(alarms_by_table) == {"first-dynamo-table", "second-dynamo-table"}
    for alarms in alarms_by_table.values():
        for alarm in alarms:
            assert alarm["AlarmActions"] == ["arn:aws:sns:ap-northeast-1:123456789012:alarms"]

    out, _ = capfd.readouterr()
    assert "deployed   AlarmStacker-test (6 alarms)" in out

    # nothing changed since
    report = core.main(opts)
    assert report.result_of("test").status is GroupStatus.UNCHANGED
    assert len(deployer.deploy_calls) == 1


def test_end_to_end_preview(
    tmp_path: Path,
    capfd: pytest.CaptureFixture[str],
    dynamodb_client: DynamoDBClient,
    deployer: FakeStackDeployer,
):
    """Tests preview never deploys

    Args:
        tmp_path (Path): temporary directory path
        capfd (CaptureFixture): capture
        dynamodb_client (DynamoDBClient): dynamodb client
        deployer (FakeStackDeployer): deployer
    """
    config_path = _write_config(tmp_path, [{"pattern": "dynamo"}])
    opts = core.CommandOpts(config_file=config_path, preview=True, delete_stale_alarms=False, max_workers=2)

    report = core.main(opts)

    assert report.result_of("test").status is GroupStatus.PREVIEWED
    assert deployer.stacks == {}
    out, _ = capfd.readouterr()
    assert "previewed" in out


def test_cli_exits_nonzero_on_failed_group(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    capfd: pytest.CaptureFixture[str],
    dynamodb_client: DynamoDBClient,
    deployer: FakeStackDeployer,
):
    """Tests the command fails when a group fails

    Args:
        tmp_path (Path): temporary directory path
        monkeypatch (pytest.MonkeyPatch): monkeypatch
        capfd (CaptureFixture): capture
        dynamodb_client (DynamoDBClient): dynamodb client
        deployer (FakeStackDeployer): deployer
    """
    config_path = _write_config(tmp_path, [{"name": "first-dynamo-table", "pattern": "first"}])
    monkeypatch.setattr("sys.argv", ["alarm-stacker", "-c", config_path])

    with pytest.raises(SystemExit) as e:
        cli.run()

    assert e.value.code == 1
    out, _ = capfd.readouterr()
    assert "failed" in out
    assert deployer.deploy_calls == []


def test_cli_no_alarms(
    tmp_path: Path,
    monkeypatch: pytest.MonkeyPatch,
    dynamodb_client: DynamoDBClient,
    deployer: FakeStackDeployer,
):
    """Tests a run matching nothing succeeds without deploying

    Args:
        tmp_path (Path): temporary directory path
        monkeypatch (pytest.MonkeyPatch): monkeypatch
        dynamodb_client (DynamoDBClient): dynamodb client
        deployer (FakeStackDeployer): deployer
    """
    config_path = _write_config(tmp_path, [{"name": "non-existent-table"}])
    monkeypatch.setattr("sys.argv", ["alarm-stacker", "-c", config_path, "--delete-stale-alarms"])

    cli.run()

    assert deployer.deploy_calls == []
