"""Pytest configuration and fixtures.

Nothing in the program reads the environment at import time, so tests build
settings explicitly and patch the environment per test.
"""

import asyncio

import pulumi
import pytest

from common.exceptions import SubnetNotFound
from network.resolver import SubnetResolver


class FakeSubnetResolver(SubnetResolver):
    """In-memory network provider.

    ``delays`` holds per-subnet sleep times, ``errors`` per-subnet exceptions.
    Every requested id is recorded in ``calls``; ids whose lookup was
    cancelled are recorded in ``cancelled``.
    """

    def __init__(self, cidrs: dict[str, str], delays=None, errors=None):
        self.cidrs = cidrs
        self.delays = delays or {}
        self.errors = errors or {}
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    async def get_subnet_cidr(self, subnet_id: str) -> str:
        self.calls.append(subnet_id)
        try:
            await asyncio.sleep(self.delays.get(subnet_id, 0))
        except asyncio.CancelledError:
            self.cancelled.append(subnet_id)
            raise
        if subnet_id in self.errors:
            raise self.errors[subnet_id]
        if subnet_id not in self.cidrs:
            raise SubnetNotFound(subnet_id)
        return self.cidrs[subnet_id]


class WebStackMocks(pulumi.runtime.Mocks):
    """Echo inputs back as state, filling in what the cloud would assign.

    Every registration is kept in ``resources`` so tests can inspect the
    inputs a resource was declared with.
    """

    def __init__(self):
        self.resources: list[pulumi.runtime.MockResourceArgs] = []

    def inputs_of(self, typ: str) -> list[dict]:
        return [args.inputs for args in self.resources if args.typ == typ]

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        self.resources.append(args)
        outputs = dict(args.inputs)
        if args.typ == "kubernetes:core/v1:Service":
            metadata = dict(outputs.get("metadata") or {})
            metadata.setdefault("name", f"{args.name}-5f7c9a")
            metadata.setdefault("namespace", "default")
            outputs["metadata"] = metadata
            if outputs.get("spec", {}).get("type") == "LoadBalancer":
                outputs["status"] = {
                    "loadBalancer": {"ingress": [{"hostname": "a1b2c3.elb.amazonaws.com"}]}
                }
        if args.typ == "aws:rds/instance:Instance":
            outputs["address"] = f"{args.inputs['identifier']}.rds.amazonaws.com"
        if args.typ == "eks:index:Cluster":
            outputs["kubeconfig"] = {"apiVersion": "v1", "kind": "Config"}
        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        if args.token == "aws:index/getAvailabilityZones:getAvailabilityZones":
            return {"names": ["us-east-1a", "us-east-1b", "us-east-1c"]}
        return {}


@pytest.fixture
def subnet_cidrs():
    """Public subnet ids mapped to their CIDR blocks."""
    return {
        "subnet-A": "10.0.1.0/24",
        "subnet-B": "10.0.2.0/24",
    }


@pytest.fixture
def make_resolver():
    """Factory for resolvers with custom CIDRs, delays and errors."""
    return FakeSubnetResolver


@pytest.fixture
def fake_resolver(subnet_cidrs):
    """A resolver backed by ``subnet_cidrs``."""
    return FakeSubnetResolver(subnet_cidrs)


@pytest.fixture
def mock_env_vars():
    """Fixture providing the required deployment environment variables."""
    return {
        "OWNER_TAG": "Jane-Doe",
        "WEB_APP_IMAGE": "ghcr.io/acme/webapp:1.0.0",
    }


@pytest.fixture
def pulumi_mocks():
    """Route resource registrations and invokes to a fresh WebStackMocks."""
    mocks = WebStackMocks()
    pulumi.runtime.set_mocks(mocks, preview=False)
    return mocks
