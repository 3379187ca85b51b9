"""Database exposure policy derivation.

Computes the ingress rule set for the database security group from the
public tier's subnet ids. Only the resolved CIDR blocks of those subnets are
admitted; every other source is denied by the security group's implicit
default-deny, so no explicit deny rule is emitted.

Lookups are fanned out concurrently and reassembled in input order, which
keeps the rendered policy stable across runs for configuration diffing.
"""

import asyncio
import ipaddress
import json
import logging
from collections.abc import Sequence
from dataclasses import asdict, dataclass

from common.exceptions import ResolutionFailure
from network.resolver import SubnetResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IngressRule:
    """One admitted inbound traffic pattern."""

    protocol: str
    from_port: int
    to_port: int
    cidr_blocks: tuple[str, ...]


@dataclass(frozen=True)
class SecurityPolicy:
    """Ordered ingress rules; anything not matched is denied."""

    rules: tuple[IngressRule, ...]

    def to_dict(self) -> dict:
        return {"ingress": [asdict(rule) for rule in self.rules]}

    def to_json(self) -> str:
        """Canonical rendering: equal policies give byte-identical output."""
        return json.dumps(self.to_dict(), sort_keys=True, separators=(",", ":"))


def _validate_cidr_block(cidr_block: str) -> None:
    network = ipaddress.ip_network(cidr_block, strict=False)
    if network.prefixlen == 0:
        raise ValueError(f"refusing unrestricted range {cidr_block}")


async def _resolve(resolver: SubnetResolver, subnet_id: str, timeout: float | None) -> str:
    try:
        lookup = resolver.get_subnet_cidr(subnet_id)
        if timeout is None:
            cidr_block = await lookup
        else:
            cidr_block = await asyncio.wait_for(lookup, timeout)
        _validate_cidr_block(cidr_block)
    except Exception as e:
        logger.error(
            "Subnet CIDR lookup failed",
            extra={"subnet_id": subnet_id, "error": f"{type(e).__name__}: {e}"},
        )
        raise ResolutionFailure(subnet_id, e) from e

    return cidr_block


async def derive_policy(
    public_subnet_ids: Sequence[str],
    port: int,
    resolver: SubnetResolver,
    *,
    timeout: float | None = None,
) -> SecurityPolicy:
    """Derive the database ingress policy from the public subnet tier.

    Args:
        public_subnet_ids: Ids of the public subnets, in a stable order.
        port: Database TCP port.
        resolver: Network provider used to look up each subnet's CIDR block.
        timeout: Optional per-lookup timeout in seconds.

    Returns:
        A policy with a single TCP rule on ``port`` whose sources are the
        resolved CIDR blocks, in the same order as ``public_subnet_ids``.

    Raises:
        ValueError: If ``public_subnet_ids`` is empty or ``port`` is out of range.
        ResolutionFailure: If any subnet cannot be resolved. No partial
            policy is produced; outstanding lookups are cancelled.
    """
    subnet_ids = list(public_subnet_ids)
    if not subnet_ids:
        raise ValueError("At least one public subnet id is required")
    if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
        raise ValueError(f"Invalid TCP port: {port!r}")

    tasks = [
        asyncio.ensure_future(_resolve(resolver, subnet_id, timeout)) for subnet_id in subnet_ids
    ]
    try:
        # gather keeps input order regardless of completion order
        cidr_blocks = await asyncio.gather(*tasks)
    except BaseException:
        for task in tasks:
            task.cancel()
        # Let cancelled lookups unwind before the failure propagates
        await asyncio.gather(*tasks, return_exceptions=True)
        raise

    policy = SecurityPolicy(
        rules=(
            IngressRule(
                protocol="tcp",
                from_port=port,
                to_port=port,
                cidr_blocks=tuple(cidr_blocks),
            ),
        )
    )
    logger.info(
        "Derived database ingress policy",
        extra={"port": port, "cidr_blocks": list(cidr_blocks)},
    )
    return policy
