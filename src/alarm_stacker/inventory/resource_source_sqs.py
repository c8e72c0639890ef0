from alarm_stacker.models import ResourceDescriptor

from .resource_source import ResourceSource, resource_source

# queue attributes come back as strings
_int_attributes = ("MessageRetentionPeriod", "VisibilityTimeout", "DelaySeconds", "MaximumMessageSize")


@resource_source("sqs", "sqs")
class SqsResourceSource(ResourceSource):
    """SQS queue source"""

    not_found_error_codes = ("AWS.SimpleQueueService.NonExistentQueue", "QueueDoesNotExist")

    def list_names(self) -> list[str]:
        """Lists queue names

        Returns:
            list[str]: queue names
        """
        paginator = self.client.get_paginator("list_queues")
        return [url.rsplit("/", 1)[-1] for page in paginator.paginate() for url in page.get("QueueUrls", [])]

    def describe(self, name: str) -> ResourceDescriptor:
        """Describes a queue

        Args:
            name (str): queue name

        Returns:
            ResourceDescriptor: queue with its attributes
        """
        url = self.client.get_queue_url(QueueName=name)["QueueUrl"]
        attrs = self.client.get_queue_attributes(QueueUrl=url, AttributeNames=["All"])["Attributes"]

        attributes = {k: int(attrs[k]) for k in _int_attributes if k in attrs}
        attributes["FifoQueue"] = attrs.get("FifoQueue") == "true"
        return ResourceDescriptor(name=name, attributes=attributes)
