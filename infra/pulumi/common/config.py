"""Deployment configuration using Pydantic Settings."""

import logging
import re

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from common.exceptions import ConfigurationMissing

logger = logging.getLogger(__name__)

# Fields that must be non-blank before any resource is declared
REQUIRED_SETTINGS = ("owner_tag", "web_app_image")


class DeploymentSettings(BaseSettings):
    """Deployment settings loaded from environment variables.

    OWNER_TAG and WEB_APP_IMAGE have no usable default; use
    :func:`load_settings` to get an instance with those checked.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Ownership
    owner_tag: str = ""  # Required: prefixes resource names, sets the Owner tag

    # Web application
    web_app_image: str = ""  # Required: e.g. ghcr.io/acme/webapp:1.2.3
    web_app_container_port: int = Field(default=4567, ge=1, le=65535)
    web_app_service_port: int = Field(default=80, ge=1, le=65535)

    # Redis
    redis_service_port: int = Field(default=6397, ge=1, le=65535)
    redis_container_port: int = Field(default=6379, ge=1, le=65535)

    # Database
    database_port: int = Field(default=3306, ge=1, le=65535)

    # EKS node group
    node_instance_type: str = "t3.medium"
    node_desired_capacity: int = Field(default=2, ge=0)
    node_min_size: int = Field(default=1, ge=0)
    node_max_size: int = Field(default=2, ge=1)

    # Kubernetes
    k8s_namespace: str = "default"

    # Network lookups
    subnet_lookup_timeout_seconds: float = Field(default=30.0, gt=0)

    @property
    def tags(self) -> dict[str, str]:
        """Tags applied to every AWS resource."""
        return {"Owner": self.owner_tag}

    @property
    def rds_identifier(self) -> str:
        """RDS instance identifier (lowercase letters, digits and hyphens only)."""
        return re.sub(r"[^a-z0-9-]+", "", f"{self.owner_tag}-rds-instance".lower())

    @property
    def db_name(self) -> str:
        """Initial database name (alphanumeric only)."""
        return re.sub(r"[^A-Za-z0-9]+", "", f"{self.owner_tag}RDS")


def load_settings(**overrides) -> DeploymentSettings:
    """Load and validate deployment settings.

    Args:
        **overrides: Field values that take precedence over the environment.

    Returns:
        Validated settings.

    Raises:
        ConfigurationMissing: If a required value is absent or blank.
    """
    settings = DeploymentSettings(**overrides)
    for field in REQUIRED_SETTINGS:
        if not getattr(settings, field).strip():
            raise ConfigurationMissing(field.upper())

    logger.info(
        "Loaded deployment settings",
        extra={"owner_tag": settings.owner_tag, "database_port": settings.database_port},
    )
    return settings
