"""Subnet CIDR lookups against the network provider.

The concrete implementation is picked by the caller; the policy derivation
only depends on the abstract :class:`SubnetResolver` interface.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from common.exceptions import ProviderError, SubnetNotFound

if TYPE_CHECKING:
    from mypy_boto3_ec2 import EC2Client

logger = logging.getLogger(__name__)

SUBNET_NOT_FOUND_CODES = frozenset({"InvalidSubnetID.NotFound", "InvalidSubnetID.Malformed"})


class SubnetResolver(ABC):
    """Read-only view of the network provider."""

    @abstractmethod
    async def get_subnet_cidr(self, subnet_id: str) -> str:
        """Resolve a subnet id to its CIDR block.

        Args:
            subnet_id: Provider id of the subnet, e.g. ``subnet-0abc123``.

        Returns:
            The subnet's CIDR block, e.g. ``10.0.16.0/20``.

        Raises:
            SubnetNotFound: If the provider has no such subnet.
            ProviderError: On any other provider failure.
        """
        ...


class Ec2SubnetResolver(SubnetResolver):
    """Resolves subnets with the EC2 ``DescribeSubnets`` API."""

    def __init__(self, *, region: str | None = None, ec2_client: "EC2Client | None" = None):
        """Initialize the resolver.

        Args:
            region: AWS region. Falls back to the boto3 default chain when empty.
            ec2_client: Optional EC2 client (for testing).
        """
        self._ec2 = ec2_client or boto3.client("ec2", region_name=region or None)

    def _describe_subnet(self, subnet_id: str) -> str:
        try:
            response = self._ec2.describe_subnets(SubnetIds=[subnet_id])
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code in SUBNET_NOT_FOUND_CODES:
                raise SubnetNotFound(subnet_id) from e
            raise ProviderError(f"DescribeSubnets failed for {subnet_id}: {code or e}") from e
        except BotoCoreError as e:
            raise ProviderError(f"DescribeSubnets failed for {subnet_id}: {e}") from e

        subnets = response.get("Subnets", [])
        if not subnets:
            raise SubnetNotFound(subnet_id)
        return subnets[0].get("CidrBlock", "")

    async def get_subnet_cidr(self, subnet_id: str) -> str:
        """Look up the subnet's CIDR block in a worker thread."""
        cidr_block = await asyncio.to_thread(self._describe_subnet, subnet_id)
        logger.debug(f"Resolved {subnet_id} to {cidr_block}")
        return cidr_block
