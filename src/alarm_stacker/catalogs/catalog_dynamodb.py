from .metric_catalog import FixedThreshold, FractionOfAttribute, MetricCatalog, MetricSpec, register

DYNAMODB = register(
    MetricCatalog(
        service_type="dynamodb",
        namespace="AWS/DynamoDB",
        dimension_key="TableName",
        metrics=(
            MetricSpec("ConsumedReadCapacityUnits", FractionOfAttribute("ReadCapacityUnits", 0.8)),
            MetricSpec("ConsumedWriteCapacityUnits", FractionOfAttribute("WriteCapacityUnits", 0.8)),
            MetricSpec("ThrottledRequests", FixedThreshold(5)),
        ),
    )
)
