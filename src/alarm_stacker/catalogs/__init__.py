from .catalog_dynamodb import DYNAMODB
from .catalog_lambda import LAMBDA
from .catalog_sqs import SQS
from .metric_catalog import (
    GREATER_THAN_OR_EQUAL,
    LESS_THAN_OR_EQUAL,
    FixedThreshold,
    FractionOfAttribute,
    MetricCatalog,
    MetricSpec,
    ThresholdStrategy,
    get_catalog,
    service_types,
)

__all__ = [
    "DYNAMODB",
    "LAMBDA",
    "SQS",
    "GREATER_THAN_OR_EQUAL",
    "LESS_THAN_OR_EQUAL",
    "FixedThreshold",
    "FractionOfAttribute",
    "MetricCatalog",
    "MetricSpec",
    "ThresholdStrategy",
    "get_catalog",
    "service_types",
]
