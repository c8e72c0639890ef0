from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, TypedDict, Union

Number = Union[int, float]

STACK_NAME_PREFIX = "AlarmStacker-"
ALARM_RESOURCE_TYPE = "AWS::CloudWatch::Alarm"
GENERATOR_METADATA_KEY = "AlarmStacker"


class RunMode(Enum):
    """Run Mode"""

    GENERATE = "generate"
    PREVIEW = "preview"


class StaleAlarmPolicy(Enum):
    """What to do with generated alarms that no run regenerates any more"""

    RETAIN = "retain"
    DELETE = "delete"


class Dimension(TypedDict):
    """Metric Dimension

    Args:
        TypedDict (_type_): typed dict
    """

    Name: str
    Value: str


class AlarmPropsRequired(TypedDict):
    """Metric Alarm Properties with required keys

    Args:
        TypedDict (_type_): typed dict
    """

    AlarmName: str
    MetricName: str
    Namespace: str
    Statistic: str
    Period: int
    EvaluationPeriods: int
    Threshold: Number
    ComparisonOperator: str
    Dimensions: Sequence[Dimension]


class AlarmProps(AlarmPropsRequired, total=False):
    """Metric Alarm Properties, as an `AWS::CloudWatch::Alarm` resource takes them

    Args:
        AlarmPropsRequired (_type_): AlarmPropsRequired
    """

    AlarmDescription: str
    TreatMissingData: str
    AlarmActions: Sequence[str]
    OKActions: Sequence[str]


@dataclass(frozen=True)
class ThresholdOverride:
    """Per-metric alarm parameters set in config"""

    threshold: Optional[Number] = None
    comparison_operator: Optional[str] = None
    statistic: Optional[str] = None
    period: Optional[int] = None
    evaluation_periods: Optional[int] = None


@dataclass(frozen=True)
class ResourceSelector:
    """One configured monitoring intent, by exact name or regex pattern"""

    name: Optional[str] = None
    pattern: Optional[str] = None
    overrides: Mapping[str, ThresholdOverride] = field(default_factory=dict)

    def describe(self) -> str:
        """Gets a readable form of the selector

        Returns:
            str: `name=...` or `pattern=...`
        """
        if self.name is not None:
            return f"name={self.name}"
        return f"pattern={self.pattern}"


@dataclass(frozen=True)
class ResourceDescriptor:
    """A discovered live resource"""

    name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ResolvedTarget:
    """A selector with the resources it matched, possibly none"""

    selector: ResourceSelector
    resources: tuple[ResourceDescriptor, ...] = ()


@dataclass(frozen=True)
class ResolvedMetric:
    """Alarm parameters of one metric, after defaults and overrides"""

    metric_name: str
    comparison_operator: Optional[str]
    statistic: Optional[str]
    period: Optional[int]
    threshold: Optional[Number]
    evaluation_periods: int = 1
    treat_missing_data: str = "notBreaching"


@dataclass(frozen=True)
class AlarmDefinition:
    """A fully parameterized alarm on one metric of one resource"""

    identifier: str
    resource_name: str
    metric_name: str
    properties: AlarmProps

    def to_resource(self) -> dict[str, Any]:
        """Renders the alarm as a template resource

        Returns:
            dict[str, Any]: `AWS::CloudWatch::Alarm` resource definition
        """
        return {
            "Type": ALARM_RESOURCE_TYPE,
            "Metadata": {GENERATOR_METADATA_KEY: {"Resource": self.resource_name}},
            "Properties": dict(self.properties),
        }


@dataclass(frozen=True)
class Group:
    """A named set of selectors on one service type, deployed as one stack"""

    name: str
    service_type: str
    selectors: Sequence[ResourceSelector]
    alarm_actions: Sequence[str] = ()
    alarm_name_suffix: Optional[str] = None

    @property
    def stack_name(self) -> str:
        """Gets the name of the stack holding this group's alarms

        Returns:
            str: stack name
        """
        return STACK_NAME_PREFIX + self.name
