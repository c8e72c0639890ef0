from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import ROUND_FLOOR, ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Final, Literal, Optional, Sequence, Union

from alarm_stacker.errors import AttributeMissingError, ConfigurationError
from alarm_stacker.models import Number, ResourceDescriptor

GREATER_THAN_OR_EQUAL: Final[str] = "GreaterThanOrEqualToThreshold"
LESS_THAN_OR_EQUAL: Final[str] = "LessThanOrEqualToThreshold"


class ThresholdStrategy(ABC):
    """Computes the default threshold of a metric for a resource"""

    @abstractmethod
    def threshold(self, resource: ResourceDescriptor) -> Number:
        """Gets the default threshold

        Args:
            resource (ResourceDescriptor): resource

        Raises:
            AttributeMissingError: the resource lacks a required attribute

        Returns:
            Number: threshold
        """
        pass


@dataclass(frozen=True)
class FixedThreshold(ThresholdStrategy):
    """A constant threshold"""

    value: Number

    def threshold(self, resource: ResourceDescriptor) -> Number:
        """Gets the constant

        Args:
            resource (ResourceDescriptor): resource, unused

        Returns:
            Number: threshold
        """
        return self.value


@dataclass(frozen=True)
class FractionOfAttribute(ThresholdStrategy):
    """A fraction of one of the resource's own attributes

    `scale` converts units (e.g. seconds to milliseconds). Without `rounding`
    the exact decimal result is kept.
    """

    attribute: str
    fraction: Number
    scale: Number = 1
    rounding: Optional[Literal["floor", "round"]] = None

    def threshold(self, resource: ResourceDescriptor) -> Number:
        """Gets `fraction * scale * attribute`

        Args:
            resource (ResourceDescriptor): resource

        Raises:
            AttributeMissingError: the attribute is absent or not numeric

        Returns:
            Number: threshold
        """
        raw = resource.attributes.get(self.attribute)
        if raw is None:
            raise AttributeMissingError(resource.name, self.attribute)
        try:
            value = Decimal(str(raw))
        except InvalidOperation as e:
            raise AttributeMissingError(resource.name, self.attribute) from e

        result = Decimal(str(self.fraction)) * Decimal(str(self.scale)) * value
        if self.rounding == "floor":
            result = result.to_integral_value(rounding=ROUND_FLOOR)
        elif self.rounding == "round":
            result = result.to_integral_value(rounding=ROUND_HALF_UP)

        return _to_number(result)


def _to_number(value: Decimal) -> Union[int, float]:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


@dataclass(frozen=True)
class MetricSpec:
    """Default alarm parameters of one monitored metric"""

    metric_name: str
    strategy: ThresholdStrategy
    comparison_operator: str = GREATER_THAN_OR_EQUAL
    statistic: str = "Sum"
    period: int = 60
    evaluation_periods: int = 1
    treat_missing_data: str = "notBreaching"


@dataclass(frozen=True)
class MetricCatalog:
    """Monitored metrics of one service type"""

    service_type: str
    namespace: str
    dimension_key: str
    metrics: Sequence[MetricSpec]

    def metric_names(self) -> list[str]:
        """Gets metric names

        Returns:
            list[str]: metric names in catalog order
        """
        return [m.metric_name for m in self.metrics]


#
# Registry
#

_catalogs: dict[str, MetricCatalog] = {}


def register(catalog: MetricCatalog) -> MetricCatalog:
    """Registers a catalog under its service type

    Args:
        catalog (MetricCatalog): catalog

    Returns:
        MetricCatalog: the given catalog
    """
    assert catalog.service_type not in _catalogs, f"duplicated service type: {catalog.service_type}"
    _catalogs[catalog.service_type] = catalog
    return catalog


def get_catalog(service_type: str) -> MetricCatalog:
    """Gets the catalog of a service type

    Args:
        service_type (str): service type tag

    Raises:
        ConfigurationError: no such service type

    Returns:
        MetricCatalog: catalog
    """
    catalog = _catalogs.get(service_type)
    if catalog is None:
        raise ConfigurationError(f"no such service type: {service_type}")
    return catalog


def service_types() -> list[str]:
    """Gets registered service types

    Returns:
        list[str]: service type tags
    """
    return sorted(_catalogs)
