import logging
import re
from typing import Iterable, Optional, Sequence

from .catalogs import MetricCatalog
from .errors import DuplicateAlarmIdentifierError
from .models import AlarmDefinition, AlarmProps, Group, ResolvedMetric, ResourceDescriptor

logger = logging.getLogger(__name__)

_non_alphanumeric = re.compile("[^A-Za-z0-9]")


def direction(comparison_operator: str) -> Optional[str]:
    """Gets the direction suffix of a comparison operator

    Args:
        comparison_operator (str): CloudWatch comparison operator

    Returns:
        Optional[str]: "High", "Low", or None for operators without a single direction
    """
    if comparison_operator in ("GreaterThanOrEqualToThreshold", "GreaterThanThreshold"):
        return "High"
    if comparison_operator in ("LessThanOrEqualToThreshold", "LessThanThreshold"):
        return "Low"
    return None


def alarm_identifier(resource_name: str, metric_name: str, direction_suffix: str) -> str:
    """Gets the template logical id of an alarm

    Args:
        resource_name (str): resource name
        metric_name (str): metric name
        direction_suffix (str): "High" or "Low"

    Returns:
        str: alphanumeric logical id
    """
    return _non_alphanumeric.sub("", f"{resource_name}{metric_name}{direction_suffix}")


def build(
    resource: ResourceDescriptor, metrics: Sequence[ResolvedMetric], catalog: MetricCatalog, group: Group
) -> list[AlarmDefinition]:
    """Builds alarm definitions of one resource

    Args:
        resource (ResourceDescriptor): resource
        metrics (Sequence[ResolvedMetric]): resolved metrics of the resource
        catalog (MetricCatalog): metric catalog, for namespace and dimension key
        group (Group): group, for alarm actions and name suffix

    Returns:
        list[AlarmDefinition]: one alarm per well-formed metric
    """
    alarms = []
    for metric in metrics:
        alarm = _build_alarm(resource, metric, catalog, group)
        if alarm:
            alarms.append(alarm)

    return alarms


def _build_alarm(
    resource: ResourceDescriptor, metric: ResolvedMetric, catalog: MetricCatalog, group: Group
) -> Optional[AlarmDefinition]:
    missing = [
        field
        for field, value in (
            ("comparison_operator", metric.comparison_operator),
            ("statistic", metric.statistic),
            ("period", metric.period),
            ("threshold", metric.threshold),
        )
        if value is None
    ]
    if missing:
        logger.error("exclude %s alarm of %s: missing %s", metric.metric_name, resource.name, ", ".join(missing))
        return None

    suffix = direction(metric.comparison_operator)  # type: ignore
    if suffix is None:
        logger.error(
            "exclude %s alarm of %s: unsupported comparison operator %s",
            metric.metric_name,
            resource.name,
            metric.comparison_operator,
        )
        return None

    alarm_name = f"{resource.name}-{metric.metric_name}{suffix}"
    if group.alarm_name_suffix:
        alarm_name = f"{alarm_name}-{group.alarm_name_suffix}"

    props: AlarmProps = {
        "AlarmName": alarm_name,
        "AlarmDescription": f"Metric Alarm for `{metric.metric_name}` of {resource.name}",
        "MetricName": metric.metric_name,
        "Namespace": catalog.namespace,
        "Dimensions": [{"Name": catalog.dimension_key, "Value": resource.name}],
        "Statistic": metric.statistic,  # type: ignore
        "Period": metric.period,  # type: ignore
        "EvaluationPeriods": metric.evaluation_periods,
        "Threshold": metric.threshold,  # type: ignore
        "ComparisonOperator": metric.comparison_operator,  # type: ignore
        "TreatMissingData": metric.treat_missing_data,
    }
    if group.alarm_actions:
        props["AlarmActions"] = list(group.alarm_actions)
        props["OKActions"] = list(group.alarm_actions)

    return AlarmDefinition(
        identifier=alarm_identifier(resource.name, metric.metric_name, suffix),
        resource_name=resource.name,
        metric_name=metric.metric_name,
        properties=props,
    )


def collect(alarms: Iterable[AlarmDefinition]) -> list[AlarmDefinition]:
    """Collects alarms of a group, rejecting identifier collisions

    The same alarm reached through two selectors is kept once.

    Args:
        alarms (Iterable[AlarmDefinition]): alarms of a group

    Raises:
        DuplicateAlarmIdentifierError: two different alarms share an identifier

    Returns:
        list[AlarmDefinition]: unique alarms, in first-seen order
    """
    collected: dict[str, AlarmDefinition] = {}
    for alarm in alarms:
        seen = collected.get(alarm.identifier)
        if seen is None:
            collected[alarm.identifier] = alarm
        elif seen != alarm:
            raise DuplicateAlarmIdentifierError(alarm.identifier)

    return list(collected.values())
