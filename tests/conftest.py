from typing import Optional

import pytest

from alarm_stacker.errors import DeploymentError, DiscoveryError
from alarm_stacker.models import ResourceDescriptor
from alarm_stacker.template import Template


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch: pytest.MonkeyPatch):
    """Fake credentials so no test reaches a real account

    Args:
        monkeypatch (pytest.MonkeyPatch): monkeypatch
    """
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "ap-northeast-1")


class FakeInventory:
    """In-memory inventory

    Names in `vanished` are listed but gone by the time they are described.
    """

    def __init__(
        self,
        resources: dict[str, list[ResourceDescriptor]],
        failing: Optional[set[str]] = None,
        vanished: Optional[set[str]] = None,
    ) -> None:
        self.resources = resources
        self.failing = failing or set()
        self.vanished = vanished or set()
        self.described: list[tuple[str, str]] = []

    def list(self, service_type: str) -> list[str]:
        if service_type in self.failing:
            raise DiscoveryError(f"cannot list {service_type} resources")
        return [r.name for r in self.resources.get(service_type, [])]

    def describe(self, service_type: str, resource_name: str) -> Optional[ResourceDescriptor]:
        self.described.append((service_type, resource_name))
        if resource_name in self.vanished:
            return None
        return next(r for r in self.resources[service_type] if r.name == resource_name)


class FakeStackDeployer:
    """In-memory deployer keeping deployed template bodies"""

    def __init__(self, failing: Optional[set[str]] = None) -> None:
        self.stacks: dict[str, str] = {}
        self.deploy_calls: list[tuple[str, bool]] = []
        self.failing = failing or set()

    def current_template(self, stack_name: str) -> Optional[Template]:
        body = self.stacks.get(stack_name)
        if body is None:
            return None
        return Template.from_body(stack_name, body)

    def deploy(self, stack_name: str, template_body: str, dry_run: bool) -> None:
        self.deploy_calls.append((stack_name, dry_run))
        if stack_name in self.failing:
            raise DeploymentError(f"cannot deploy {stack_name}")
        if not dry_run:
            self.stacks[stack_name] = template_body

    def stack_was_deployed(self, stack_name: str) -> bool:
        return any(name == stack_name and not dry_run for name, dry_run in self.deploy_calls)

    def alarms_by_dimension(self, stack_name: str, dimension_name: str) -> dict[str, list[dict]]:
        template = Template.from_body(stack_name, self.stacks[stack_name])
        by_dimension: dict[str, list[dict]] = {}
        for resource in template.resources.values():
            for dim in resource["Properties"]["Dimensions"]:
                if dim["Name"] == dimension_name:
                    by_dimension.setdefault(dim["Value"], []).append(resource["Properties"])
        return by_dimension


@pytest.fixture()
def stack_deployer() -> FakeStackDeployer:
    """Create an in-memory deployer

    Returns:
        FakeStackDeployer: deployer
    """
    return FakeStackDeployer()
