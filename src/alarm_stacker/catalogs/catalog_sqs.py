from .metric_catalog import FixedThreshold, FractionOfAttribute, MetricCatalog, MetricSpec, register

SQS = register(
    MetricCatalog(
        service_type="sqs",
        namespace="AWS/SQS",
        dimension_key="QueueName",
        metrics=(
            MetricSpec(
                "ApproximateNumberOfMessagesVisible",
                FixedThreshold(100),
                statistic="Maximum",
                period=300,
            ),
            MetricSpec(
                "ApproximateAgeOfOldestMessage",
                FractionOfAttribute("MessageRetentionPeriod", 0.5, rounding="floor"),
                statistic="Maximum",
                period=300,
            ),
        ),
    )
)
