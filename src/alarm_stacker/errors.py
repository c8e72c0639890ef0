class AlarmStackerError(Exception):
    """Base error of alarm-stacker"""


class ConfigurationError(AlarmStackerError):
    """Malformed group or selector configuration"""


class AttributeMissingError(AlarmStackerError):
    """A threshold strategy needs an attribute the resource does not have"""

    def __init__(self, resource_name: str, attribute: str) -> None:
        """Constructor

        Args:
            resource_name (str): resource name
            attribute (str): missing attribute name
        """
        super().__init__(f"{resource_name} has no attribute `{attribute}`")
        self.resource_name = resource_name
        self.attribute = attribute


class DuplicateAlarmIdentifierError(AlarmStackerError):
    """Two different alarm definitions share one identifier"""

    def __init__(self, identifier: str) -> None:
        """Constructor

        Args:
            identifier (str): the colliding alarm identifier
        """
        super().__init__(f"alarm identifier collides with a different definition: {identifier}")
        self.identifier = identifier


class DiscoveryError(AlarmStackerError):
    """Resource discovery failed"""


class DeploymentError(AlarmStackerError):
    """Stack deployment failed"""


class GenerationCancelled(AlarmStackerError):
    """The run was cancelled before the group completed"""
