from alarm_stacker.models import ResourceDescriptor

from .resource_source import ResourceSource, resource_source


@resource_source("lambda", "lambda")
class LambdaResourceSource(ResourceSource):
    """Lambda function source"""

    not_found_error_codes = ("ResourceNotFoundException",)

    def list_names(self) -> list[str]:
        """Lists function names

        Returns:
            list[str]: function names
        """
        paginator = self.client.get_paginator("list_functions")
        return [fn["FunctionName"] for page in paginator.paginate() for fn in page["Functions"]]

    def describe(self, name: str) -> ResourceDescriptor:
        """Describes a function

        Args:
            name (str): function name

        Returns:
            ResourceDescriptor: function with its attributes
        """
        conf = self.client.get_function_configuration(FunctionName=name)
        return ResourceDescriptor(
            name=conf["FunctionName"],
            attributes={
                "Timeout": conf.get("Timeout"),
                "MemorySize": conf.get("MemorySize"),
                "Runtime": conf.get("Runtime"),
            },
        )
