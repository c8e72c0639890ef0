from alarm_stacker.models import ResourceDescriptor

from .resource_source import ResourceSource, resource_source


@resource_source("dynamodb", "dynamodb")
class DynamoDbResourceSource(ResourceSource):
    """DynamoDB table source"""

    not_found_error_codes = ("ResourceNotFoundException",)

    def list_names(self) -> list[str]:
        """Lists table names

        Returns:
            list[str]: table names
        """
        paginator = self.client.get_paginator("list_tables")
        return [name for page in paginator.paginate() for name in page["TableNames"]]

    def describe(self, name: str) -> ResourceDescriptor:
        """Describes a table

        On-demand tables have no capacity attributes.

        Args:
            name (str): table name

        Returns:
            ResourceDescriptor: table with its attributes
        """
        table = self.client.describe_table(TableName=name)["Table"]
        billing_mode = table.get("BillingModeSummary", {}).get("BillingMode", "PROVISIONED")

        attributes = {
            "BillingMode": billing_mode,
            "ItemCount": table.get("ItemCount"),
            "TableSizeBytes": table.get("TableSizeBytes"),
        }
        if billing_mode == "PROVISIONED":
            throughput = table.get("ProvisionedThroughput", {})
            attributes["ReadCapacityUnits"] = throughput.get("ReadCapacityUnits")
            attributes["WriteCapacityUnits"] = throughput.get("WriteCapacityUnits")

        return ResourceDescriptor(name=table["TableName"], attributes=attributes)
