"""Error taxonomy for a deployment run.

Every error here is fatal to the run: nothing is retried or masked locally,
because a swallowed failure could leave the database reachable from more
sources than intended.
"""


class DeploymentError(Exception):
    """Base exception for deployment failures."""

    pass


class ConfigurationMissing(DeploymentError):
    """A required configuration value is absent."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} environment variable is not set.")


class ProviderError(DeploymentError):
    """Opaque failure reported by an external provider."""

    pass


class SubnetNotFound(ProviderError):
    """The network provider has no subnet with the given id."""

    def __init__(self, subnet_id: str):
        self.subnet_id = subnet_id
        super().__init__(f"Subnet not found: {subnet_id}")


class ResolutionFailure(DeploymentError):
    """A subnet could not be resolved to its CIDR block."""

    def __init__(self, subnet_id: str, cause: BaseException):
        self.subnet_id = subnet_id
        self.cause = cause
        super().__init__(
            f"Failed to resolve CIDR block for subnet {subnet_id}: "
            f"{type(cause).__name__}: {cause}"
        )
