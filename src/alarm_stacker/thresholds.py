import logging
from typing import Any, Optional

from .catalogs import MetricCatalog, MetricSpec
from .errors import AttributeMissingError
from .models import Number, ResolvedMetric, ResolvedTarget, ResourceDescriptor, ResourceSelector, ThresholdOverride

logger = logging.getLogger(__name__)


def resolve(target: ResolvedTarget, catalog: MetricCatalog) -> list[tuple[ResourceDescriptor, list[ResolvedMetric]]]:
    """Resolves alarm parameters for every resource of a target

    Args:
        target (ResolvedTarget): selector with its matched resources
        catalog (MetricCatalog): metric catalog of the group's service type

    Returns:
        list[tuple[ResourceDescriptor, list[ResolvedMetric]]]: resolved metrics per resource
    """
    _warn_unknown_overrides(target.selector, catalog)
    return [(res, resolve_for_resource(target.selector, res, catalog)) for res in target.resources]


def resolve_for_resource(
    selector: ResourceSelector, resource: ResourceDescriptor, catalog: MetricCatalog
) -> list[ResolvedMetric]:
    """Resolves alarm parameters of one resource

    An override replaces the catalog default of each field it sets. A metric
    whose default threshold needs an attribute the resource lacks is skipped.

    Args:
        selector (ResourceSelector): selector that matched the resource
        resource (ResourceDescriptor): resource
        catalog (MetricCatalog): metric catalog

    Returns:
        list[ResolvedMetric]: resolved metrics, in catalog order
    """
    resolved = []
    for spec in catalog.metrics:
        override = selector.overrides.get(spec.metric_name, ThresholdOverride())
        try:
            threshold = _threshold(spec, override, resource)
        except AttributeMissingError as e:
            logger.warning("skip %s of %s: %s", spec.metric_name, resource.name, e)
            continue

        resolved.append(
            ResolvedMetric(
                metric_name=spec.metric_name,
                comparison_operator=_pick(override.comparison_operator, spec.comparison_operator),
                statistic=_pick(override.statistic, spec.statistic),
                period=_pick(override.period, spec.period),
                threshold=threshold,
                evaluation_periods=_pick(override.evaluation_periods, spec.evaluation_periods),
                treat_missing_data=spec.treat_missing_data,
            )
        )

    return resolved


def _threshold(spec: MetricSpec, override: ThresholdOverride, resource: ResourceDescriptor) -> Number:
    if override.threshold is not None:
        return override.threshold
    return spec.strategy.threshold(resource)


def _pick(override_value: Optional[Any], default: Any) -> Any:
    return default if override_value is None else override_value


def _warn_unknown_overrides(selector: ResourceSelector, catalog: MetricCatalog) -> None:
    known = set(catalog.metric_names())
    for metric_name in selector.overrides:
        if metric_name not in known:
            logger.warning(
                "ignore override of %s on selector %s: not a %s metric",
                metric_name,
                selector.describe(),
                catalog.service_type,
            )
