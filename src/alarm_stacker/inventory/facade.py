import logging
from typing import Optional, Protocol

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from alarm_stacker.errors import ConfigurationError, DiscoveryError
from alarm_stacker.models import ResourceDescriptor

from .resource_source import ResourceSource, registered_sources

logger = logging.getLogger(__name__)


class Inventory(Protocol):
    """Discovers live resources"""

    def list(self, service_type: str) -> list[str]:
        """Lists resource names of a service type

        Args:
            service_type (str): service type tag

        Returns:
            list[str]: resource names
        """
        ...

    def describe(self, service_type: str, resource_name: str) -> Optional[ResourceDescriptor]:
        """Describes a resource

        Args:
            service_type (str): service type tag
            resource_name (str): resource name

        Returns:
            Optional[ResourceDescriptor]: resource with its attributes, or None if it no longer exists
        """
        ...


class AwsInventory:
    """Inventory on the AWS APIs

    Clients are created up front, boto3 clients are safe to share between threads.
    """

    def __init__(self, session: Optional[boto3.session.Session] = None) -> None:
        """Constructor

        Args:
            session (Optional[boto3.session.Session]): boto3 session, the default session if omitted
        """
        session = session or boto3.session.Session()
        self.sources: dict[str, ResourceSource] = {
            service_type: source_cls(session.client(boto3_service_name))
            for service_type, (boto3_service_name, source_cls) in registered_sources().items()
        }

    def list(self, service_type: str) -> list[str]:
        """Lists resource names of a service type

        Args:
            service_type (str): service type tag

        Raises:
            DiscoveryError: AWS API failed

        Returns:
            list[str]: resource names
        """
        source = self._source(service_type)
        try:
            names = source.list_names()
        except (BotoCoreError, ClientError) as e:
            raise DiscoveryError(f"cannot list {service_type} resources: {e}") from e

        logger.debug("%d %s resources listed", len(names), service_type)
        return names

    def describe(self, service_type: str, resource_name: str) -> Optional[ResourceDescriptor]:
        """Describes a resource

        A resource deleted since it was listed is skipped.

        Args:
            service_type (str): service type tag
            resource_name (str): resource name

        Raises:
            DiscoveryError: AWS API failed

        Returns:
            Optional[ResourceDescriptor]: resource with its attributes, or None if it no longer exists
        """
        source = self._source(service_type)
        try:
            return source.describe(resource_name)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in source.not_found_error_codes:
                logger.info("%s resource %s no longer exists, skipped", service_type, resource_name)
                return None
            raise DiscoveryError(f"cannot describe {service_type} resource {resource_name}: {e}") from e
        except BotoCoreError as e:
            raise DiscoveryError(f"cannot describe {service_type} resource {resource_name}: {e}") from e

    def _source(self, service_type: str) -> ResourceSource:
        source = self.sources.get(service_type)
        if source is None:
            raise ConfigurationError(f"no such service type: {service_type}")
        return source
