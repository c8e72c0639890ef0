import logging
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Union

import boto3
from botocore.exceptions import ClientError, WaiterError

from .errors import DeploymentError
from .template import Template

logger = logging.getLogger(__name__)

# stacks in these states hold no deployed template and must be deleted before creating again
REPLACEABLE_STACK_STATUSES = ("ROLLBACK_COMPLETE", "REVIEW_IN_PROGRESS")


@dataclass(frozen=True)
class Skip:
    """No deploy call is needed"""

    reason: str


@dataclass(frozen=True)
class Deploy:
    """A deploy call is needed with the given template body"""

    template_body: str


Decision = Union[Skip, Deploy]


def decide(candidate: Template, previously_deployed: Optional[Template]) -> Decision:
    """Decides whether the candidate template needs deploying

    Args:
        candidate (Template): merged template of this run
        previously_deployed (Optional[Template]): currently deployed template, or None

    Returns:
        Decision: Skip or Deploy
    """
    if not candidate.generated_ids:
        return Skip("no alarms generated")
    if previously_deployed is not None and candidate.to_document() == previously_deployed.to_document():
        return Skip("template unchanged")

    return Deploy(candidate.serialize())


class Deployer(Protocol):
    """Reads and writes stack templates"""

    def current_template(self, stack_name: str) -> Optional[Template]:
        """Gets the deployed template of a stack

        Args:
            stack_name (str): stack name

        Returns:
            Optional[Template]: deployed template, or None if the stack does not exist
        """
        ...

    def deploy(self, stack_name: str, template_body: str, dry_run: bool) -> None:
        """Deploys a template

        Args:
            stack_name (str): stack name
            template_body (str): serialized template
            dry_run (bool): if True, never changes the stack
        """
        ...


class CloudFormationDeployer:
    """Deployer on AWS CloudFormation"""

    def __init__(self, client: Any = None) -> None:
        """Constructor

        Args:
            client (Any): CloudFormation client, created from the default session if omitted
        """
        self.cloudformation = client or boto3.client("cloudformation")

    def current_template(self, stack_name: str) -> Optional[Template]:
        """Gets the deployed template of a stack

        Args:
            stack_name (str): stack name

        Raises:
            DeploymentError: CloudFormation API failed

        Returns:
            Optional[Template]: deployed template, or None if the stack does not exist or was never created successfully
        """
        try:
            status = self._stack_status(stack_name)
            if status is None or status in REPLACEABLE_STACK_STATUSES:
                return None
            resp = self.cloudformation.get_template(StackName=stack_name, TemplateStage="Original")
        except ClientError as e:
            raise DeploymentError(f"cannot get the template of {stack_name}: {e}") from e

        return Template.from_body(stack_name, resp["TemplateBody"])

    def deploy(self, stack_name: str, template_body: str, dry_run: bool) -> None:
        """Creates or updates a stack, and waits for completion

        Args:
            stack_name (str): stack name
            template_body (str): serialized template
            dry_run (bool): if True, only validates the template

        Raises:
            DeploymentError: CloudFormation API failed, or the stack did not complete
        """
        try:
            if dry_run:
                self.cloudformation.validate_template(TemplateBody=template_body)
                logger.info("dry run: %s validated, not deployed", stack_name)
                return

            status = self._stack_status(stack_name)
            if status is None or status in REPLACEABLE_STACK_STATUSES:
                if status is not None:
                    self._delete_stack(stack_name, status)
                logger.info("creating stack %s", stack_name)
                self.cloudformation.create_stack(StackName=stack_name, TemplateBody=template_body)
                self.cloudformation.get_waiter("stack_create_complete").wait(StackName=stack_name)
            else:
                self._update_stack(stack_name, template_body)

        except (ClientError, WaiterError) as e:
            raise DeploymentError(f"cannot deploy {stack_name}: {e}") from e

        logger.info("deployed stack %s", stack_name)

    def _update_stack(self, stack_name: str, template_body: str) -> None:
        logger.info("updating stack %s", stack_name)
        try:
            self.cloudformation.update_stack(StackName=stack_name, TemplateBody=template_body)
        except ClientError as e:
            if "No updates are to be performed" in str(e):
                logger.info("stack %s is already up to date", stack_name)
                return
            raise

        self.cloudformation.get_waiter("stack_update_complete").wait(StackName=stack_name)

    def _delete_stack(self, stack_name: str, status: str) -> None:
        logger.info("deleting stack %s in %s before creating it again", stack_name, status)
        self.cloudformation.delete_stack(StackName=stack_name)
        self.cloudformation.get_waiter("stack_delete_complete").wait(StackName=stack_name)

    def _stack_status(self, stack_name: str) -> Optional[str]:
        try:
            stacks = self.cloudformation.describe_stacks(StackName=stack_name)["Stacks"]
        except ClientError as e:
            if "does not exist" in str(e):
                return None
            raise

        live = [s["StackStatus"] for s in stacks if s["StackStatus"] != "DELETE_COMPLETE"]
        return live[0] if live else None
