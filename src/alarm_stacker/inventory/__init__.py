from .facade import AwsInventory, Inventory
from .resource_source import ResourceSource
from .resource_source_dynamodb import DynamoDbResourceSource
from .resource_source_lambda import LambdaResourceSource
from .resource_source_sqs import SqsResourceSource

__all__ = [
    "AwsInventory",
    "Inventory",
    "ResourceSource",
    "DynamoDbResourceSource",
    "LambdaResourceSource",
    "SqsResourceSource",
]
