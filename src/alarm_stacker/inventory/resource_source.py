from abc import ABC, abstractmethod
from typing import Any, Final

from alarm_stacker.models import ResourceDescriptor


class ResourceSource(ABC):
    """Lists and describes resources of one service type"""

    service_type: str

    # error codes of a describe call on a resource deleted since listing
    not_found_error_codes: tuple[str, ...] = ()

    def __init__(self, client: Any) -> None:
        """Constructor

        Args:
            client (Any): boto3 client of the service
        """
        self.client = client

    @abstractmethod
    def list_names(self) -> list[str]:
        """Lists resource names

        Returns:
            list[str]: resource names
        """
        pass

    @abstractmethod
    def describe(self, name: str) -> ResourceDescriptor:
        """Describes a resource

        Args:
            name (str): resource name

        Returns:
            ResourceDescriptor: resource with its attributes
        """
        pass


#
# Decorator declaration
#

source_module_name_prefix: Final[str] = __package__ + ".resource_source_"

source_class_name_postfix: Final[str] = "ResourceSource"

_sources: dict[str, tuple[str, type[ResourceSource]]] = {}


def resource_source(service_type: str, boto3_service_name: str):  # type: ignore
    """Decorator for ResourceSource class.

    Args:
        service_type (str): service type tag
        boto3_service_name (str): service name to create the boto3 client with
    """

    def _inner_decorator(source_cls: type[ResourceSource]):  # type: ignore
        # validation
        assert source_cls.__module__.startswith(source_module_name_prefix)
        assert source_cls.__name__.endswith(source_class_name_postfix)

        setattr(source_cls, "service_type", service_type)
        _sources[service_type] = (boto3_service_name, source_cls)
        return source_cls

    return _inner_decorator


def registered_sources() -> dict[str, tuple[str, type[ResourceSource]]]:
    """Gets registered sources

    Returns:
        dict[str, tuple[str, type[ResourceSource]]]: service type to (boto3 service name, source class)
    """
    return dict(_sources)
