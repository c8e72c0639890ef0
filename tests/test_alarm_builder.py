import itertools

import pytest

from alarm_stacker.alarm_builder import alarm_identifier, build, collect, direction
from alarm_stacker.catalogs import DYNAMODB
from alarm_stacker.errors import DuplicateAlarmIdentifierError
from alarm_stacker.models import Group, ResolvedMetric, ResourceDescriptor


def _group(**kwargs) -> Group:
    return Group(name="test", service_type="dynamodb", selectors=(), **kwargs)


def _metric(
    metric_name: str = "ThrottledRequests",
    comparison_operator="GreaterThanOrEqualToThreshold",
    threshold=5,
    statistic="Sum",
    period=60,
) -> ResolvedMetric:
    return ResolvedMetric(
        metric_name=metric_name,
        comparison_operator=comparison_operator,
        statistic=statistic,
        period=period,
        threshold=threshold,
    )


@pytest.mark.parametrize(
    "operator, expected",
    [
        ("GreaterThanOrEqualToThreshold", "High"),
        ("GreaterThanThreshold", "High"),
        ("LessThanOrEqualToThreshold", "Low"),
        ("LessThanThreshold", "Low"),
        ("LessThanLowerOrGreaterThanUpperThreshold", None),
    ],
)
def test_direction(operator, expected):
    """Tests direction suffixes of comparison operators

    Args:
        operator (str): comparison operator
        expected (str): expected suffix
    """
    assert direction(operator) == expected


def test_build_alarm_properties():
    """Tests an alarm carries name, namespace, dimension and parameters"""
    resource = ResourceDescriptor(name="first-dynamo-table")
    alarms = build(resource, [_metric()], DYNAMODB, _group())

    assert len(alarms) == 1
    alarm = alarms[0]
    assert alarm.identifier == "firstdynamotableThrottledRequestsHigh"
    assert alarm.resource_name == "first-dynamo-table"
    props = alarm.properties
    assert props["AlarmName"] == "first-dynamo-table-ThrottledRequestsHigh"
    assert props["MetricName"] == "ThrottledRequests"
    assert props["Namespace"] == "AWS/DynamoDB"
    assert props["Dimensions"] == [{"Name": "TableName", "Value": "first-dynamo-table"}]
    assert props["Threshold"] == 5
    assert props["Period"] == 60
    assert props["Statistic"] == "Sum"
    assert props["ComparisonOperator"] == "GreaterThanOrEqualToThreshold"
    assert props["EvaluationPeriods"] == 1
    assert props["TreatMissingData"] == "notBreaching"
    assert "AlarmActions" not in props


def test_build_low_direction_and_group_settings():
    """Tests a low alarm with group suffix and actions"""
    topic = "arn:aws:sns:ap-northeast-1:123456789012:alarms"
    group = _group(alarm_actions=(topic,), alarm_name_suffix="prod")
    metric = _metric("ConsumedReadCapacityUnits", "LessThanThreshold", 1)

    alarm = build(ResourceDescriptor(name="tbl"), [metric], DYNAMODB, group)[0]

    assert alarm.identifier == "tblConsumedReadCapacityUnitsLow"
    assert alarm.properties["AlarmName"] == "tbl-ConsumedReadCapacityUnitsLow-prod"
    assert alarm.properties["AlarmActions"] == [topic]
    assert alarm.properties["OKActions"] == [topic]


def test_build_is_deterministic():
    """Tests the same input builds equal alarms"""
    resource = ResourceDescriptor(name="tbl")
    metrics = [_metric("A"), _metric("B", "LessThanThreshold")]

    assert build(resource, metrics, DYNAMODB, _group()) == build(resource, metrics, DYNAMODB, _group())


def test_build_excludes_malformed_metric_only():
    """Tests a malformed metric is excluded while the others build"""
    metrics = [
        _metric("NoThreshold", threshold=None),
        _metric("NoPeriod", period=None),
        _metric("Band", "LessThanLowerOrGreaterThanUpperThreshold"),
        _metric("Fine"),
    ]
    alarms = build(ResourceDescriptor(name="tbl"), metrics, DYNAMODB, _group())

    assert [a.metric_name for a in alarms] == ["Fine"]


def test_build_alarm_to_resource():
    """Tests rendering an alarm as a template resource"""
    alarm = build(ResourceDescriptor(name="tbl"), [_metric()], DYNAMODB, _group())[0]

    resource = alarm.to_resource()

    assert resource["Type"] == "AWS::CloudWatch::Alarm"
    assert resource["Metadata"] == {"AlarmStacker": {"Resource": "tbl"}}
    assert resource["Properties"] == dict(alarm.properties)


def test_collect_drops_identical_duplicates():
    """Tests one resource reached by two selectors yields its alarms once"""
    resource = ResourceDescriptor(name="tbl")
    alarms = build(resource, [_metric("A"), _metric("B")], DYNAMODB, _group())

    collected = collect(itertools.chain(alarms, alarms))

    assert collected == alarms


def test_collect_rejects_divergent_duplicates():
    """Tests resources whose names differ only in punctuation collide"""
    first = build(ResourceDescriptor(name="a-b"), [_metric()], DYNAMODB, _group())
    second = build(ResourceDescriptor(name="ab"), [_metric()], DYNAMODB, _group())
    assert first[0].identifier == second[0].identifier == alarm_identifier("ab", "ThrottledRequests", "High")

    with pytest.raises(DuplicateAlarmIdentifierError) as e:
        collect(first + second)

    assert e.value.identifier == "abThrottledRequestsHigh"
