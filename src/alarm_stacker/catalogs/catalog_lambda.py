from .metric_catalog import FixedThreshold, FractionOfAttribute, MetricCatalog, MetricSpec, register

LAMBDA = register(
    MetricCatalog(
        service_type="lambda",
        namespace="AWS/Lambda",
        dimension_key="FunctionName",
        metrics=(
            MetricSpec("Errors", FixedThreshold(3)),
            MetricSpec("Throttles", FixedThreshold(5)),
            # Timeout is in seconds, Duration in milliseconds
            MetricSpec(
                "Duration",
                FractionOfAttribute("Timeout", 0.5, scale=1000, rounding="round"),
                statistic="Maximum",
            ),
        ),
    )
)
