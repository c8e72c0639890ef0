import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Sequence, Union

import yaml

from .errors import DeploymentError
from .models import ALARM_RESOURCE_TYPE, GENERATOR_METADATA_KEY, AlarmDefinition, StaleAlarmPolicy

logger = logging.getLogger(__name__)

TEMPLATE_FORMAT_VERSION = "2010-09-09"


class _CloudFormationLoader(yaml.SafeLoader):
    """Safe loader reading CloudFormation YAML

    Short-form intrinsic functions (`!Ref`, `!Sub`, ...) become their long form,
    and timestamps stay as text the way CloudFormation reads them.
    """


def _construct_intrinsic(loader: yaml.SafeLoader, tag_suffix: str, node: yaml.Node) -> dict[str, Any]:
    key = tag_suffix if tag_suffix in ("Ref", "Condition") else f"Fn::{tag_suffix}"
    value: Any
    if isinstance(node, yaml.ScalarNode):
        value = loader.construct_scalar(node)
        if tag_suffix == "GetAtt":
            value = value.split(".", 1)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)  # type: ignore[arg-type]
    return {key: value}


_CloudFormationLoader.add_multi_constructor("!", _construct_intrinsic)
_CloudFormationLoader.add_constructor("tag:yaml.org,2002:timestamp", _CloudFormationLoader.construct_yaml_str)


@dataclass(frozen=True)
class Template:
    """A deployable stack template

    `resources` maps logical ids to resource definitions. `sections` holds every
    other top-level key of the document. `generated_ids` are the alarms this run
    produced and take no part in equality.
    """

    stack_name: str
    resources: Mapping[str, Mapping[str, Any]]
    sections: Mapping[str, Any] = field(default_factory=dict)
    generated_ids: frozenset[str] = field(default=frozenset(), compare=False)

    def to_document(self) -> dict[str, Any]:
        """Gets the template document

        Returns:
            dict[str, Any]: template document
        """
        doc = copy.deepcopy(dict(self.sections))
        doc["Resources"] = copy.deepcopy(dict(self.resources))
        return doc

    def serialize(self) -> str:
        """Serializes the template as JSON

        Returns:
            str: template body
        """
        return json.dumps(self.to_document(), indent=2, sort_keys=True)

    def alarm_ids(self) -> set[str]:
        """Gets logical ids of the alarm resources

        Returns:
            set[str]: alarm logical ids
        """
        return {k for k, v in self.resources.items() if v.get("Type") == ALARM_RESOURCE_TYPE}

    @classmethod
    def from_document(cls, stack_name: str, doc: Mapping[str, Any]) -> "Template":
        """Creates a template from a document

        Args:
            stack_name (str): stack name
            doc (Mapping[str, Any]): template document

        Returns:
            Template: template
        """
        sections = {k: v for k, v in doc.items() if k != "Resources"}
        return cls(
            stack_name=stack_name,
            resources=copy.deepcopy(dict(doc.get("Resources") or {})),
            sections=copy.deepcopy(sections),
        )

    @classmethod
    def from_body(cls, stack_name: str, body: Union[str, Mapping[str, Any]]) -> "Template":
        """Creates a template from a body as CloudFormation returns it

        Args:
            stack_name (str): stack name
            body (Union[str, Mapping[str, Any]]): JSON/YAML text, or an already parsed document

        Raises:
            DeploymentError: the body is not a template document

        Returns:
            Template: template
        """
        if isinstance(body, str):
            try:
                body = yaml.load(body, Loader=_CloudFormationLoader)
            except yaml.YAMLError as e:
                raise DeploymentError(f"cannot parse the template of {stack_name}: {e}") from e
        if not isinstance(body, Mapping):
            raise DeploymentError(f"the template of {stack_name} is not a mapping")

        return cls.from_document(stack_name, body)


def new_template(stack_name: str, alarms: Sequence[AlarmDefinition]) -> Template:
    """Creates a template holding exactly the given alarms

    Args:
        stack_name (str): stack name
        alarms (Sequence[AlarmDefinition]): alarms

    Returns:
        Template: template
    """
    return Template(
        stack_name=stack_name,
        resources={alm.identifier: alm.to_resource() for alm in alarms},
        sections={
            "AWSTemplateFormatVersion": TEMPLATE_FORMAT_VERSION,
            "Description": f"CloudWatch alarms of {stack_name}",
        },
        generated_ids=frozenset(alm.identifier for alm in alarms),
    )


def merge(
    existing: Optional[Template],
    new_alarms: Sequence[AlarmDefinition],
    stack_name: str,
    stale_policy: StaleAlarmPolicy = StaleAlarmPolicy.RETAIN,
) -> Template:
    """Merges new alarms into the currently deployed template

    Resources of `existing` that are not regenerated survive untouched, unless
    `stale_policy` is DELETE and they are alarms this tool generated before.

    Args:
        existing (Optional[Template]): deployed template, or None
        new_alarms (Sequence[AlarmDefinition]): alarms generated by this run
        stack_name (str): stack name
        stale_policy (StaleAlarmPolicy): policy for generated alarms not regenerated

    Returns:
        Template: merged template
    """
    if existing is None:
        return new_template(stack_name, new_alarms)

    new_ids = {alm.identifier for alm in new_alarms}
    resources: dict[str, Mapping[str, Any]] = {}
    for logical_id, resource in existing.resources.items():
        if logical_id in new_ids:
            continue
        if stale_policy is StaleAlarmPolicy.DELETE and _is_generated_alarm(resource):
            logger.info("remove stale alarm %s from %s", logical_id, stack_name)
            continue
        resources[logical_id] = copy.deepcopy(resource)

    for alm in new_alarms:
        resources[alm.identifier] = alm.to_resource()

    return Template(
        stack_name=stack_name,
        resources=resources,
        sections=copy.deepcopy(dict(existing.sections)),
        generated_ids=frozenset(new_ids),
    )


def _is_generated_alarm(resource: Mapping[str, Any]) -> bool:
    metadata = resource.get("Metadata") or {}
    return resource.get("Type") == ALARM_RESOURCE_TYPE and GENERATOR_METADATA_KEY in metadata
