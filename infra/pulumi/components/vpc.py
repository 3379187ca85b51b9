"""VPC Component - Network foundation for the web stack.

One public and one private subnet per availability zone:
- Public tier: EKS worker nodes and the web app load balancer
- Private tier: the RDS database (no route to the Internet Gateway)

Subnet ranges are carved out of the VPC range, so the two tiers never overlap.
"""

import ipaddress

import pulumi
import pulumi_aws as aws

SUBNET_PREFIX_LENGTH = 20


def plan_subnet_cidrs(cidr_block: str, count: int) -> tuple[list[str], list[str]]:
    """Split a VPC range into ``count`` public and ``count`` private subnets.

    Public subnets come from the lower half of the range and private subnets
    from the upper half.

    Raises:
        ValueError: If the range is too small for the requested subnets.
    """
    network = ipaddress.ip_network(cidr_block)
    new_prefix = max(SUBNET_PREFIX_LENGTH, network.prefixlen + 1)
    subnets = list(network.subnets(new_prefix=new_prefix))
    half = len(subnets) // 2
    if count > half:
        raise ValueError(f"{cidr_block} cannot hold {count} public and {count} private subnets")
    public = [str(s) for s in subnets[:count]]
    private = [str(s) for s in subnets[half : half + count]]
    return public, private


class VPCComponent(pulumi.ComponentResource):
    """VPC with disjoint public and private subnet tiers."""

    def __init__(
        self,
        name: str,
        cidr_block: str = "10.0.0.0/16",
        availability_zones: int = 2,
        single_nat_gateway: bool = True,
        tags: dict | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("webstack:network:VPC", name, None, opts)

        self.name = name
        self.tags = tags or {}
        child_opts = pulumi.ResourceOptions(parent=self)

        az_names = aws.get_availability_zones(state="available").names[:availability_zones]
        public_cidrs, private_cidrs = plan_subnet_cidrs(cidr_block, len(az_names))

        self.vpc = aws.ec2.Vpc(
            f"{name}-vpc",
            cidr_block=cidr_block,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            tags=self._tags(f"{name}-vpc"),
            opts=child_opts,
        )

        self.igw = aws.ec2.InternetGateway(
            f"{name}-igw",
            vpc_id=self.vpc.id,
            tags=self._tags(f"{name}-igw"),
            opts=child_opts,
        )

        self.public_subnets = [
            self._subnet("public", i, az, cidr, map_public_ip=True, role="kubernetes.io/role/elb")
            for i, (az, cidr) in enumerate(zip(az_names, public_cidrs))
        ]
        self.private_subnets = [
            self._subnet("private", i, az, cidr, role="kubernetes.io/role/internal-elb")
            for i, (az, cidr) in enumerate(zip(az_names, private_cidrs))
        ]

        nat_count = 1 if single_nat_gateway else len(self.public_subnets)
        self.nat_gateways = [self._nat_gateway(i) for i in range(nat_count)]

        self._route_public_tier()
        self._route_private_tier()

        self.public_subnet_ids = pulumi.Output.all(
            *[s.id for s in self.public_subnets]
        ).apply(lambda ids: list(ids))

        self.private_subnet_ids = pulumi.Output.all(
            *[s.id for s in self.private_subnets]
        ).apply(lambda ids: list(ids))

        self.register_outputs(
            {
                "vpc_id": self.vpc.id,
                "public_subnet_ids": self.public_subnet_ids,
                "private_subnet_ids": self.private_subnet_ids,
            }
        )

    def _tags(self, resource_name: str, **extra: str) -> dict:
        return {**self.tags, "Name": resource_name, **extra}

    def _subnet(
        self,
        tier: str,
        index: int,
        az: str,
        cidr: str,
        role: str,
        map_public_ip: bool = False,
    ) -> aws.ec2.Subnet:
        return aws.ec2.Subnet(
            f"{self.name}-{tier}-{index}",
            vpc_id=self.vpc.id,
            cidr_block=cidr,
            availability_zone=az,
            map_public_ip_on_launch=map_public_ip,
            tags=self._tags(f"{self.name}-{tier}-{az}", **{role: "1"}),
            opts=pulumi.ResourceOptions(parent=self),
        )

    def _nat_gateway(self, index: int) -> aws.ec2.NatGateway:
        eip = aws.ec2.Eip(
            f"{self.name}-eip-{index}",
            domain="vpc",
            tags=self._tags(f"{self.name}-nat-eip-{index}"),
            opts=pulumi.ResourceOptions(parent=self),
        )
        return aws.ec2.NatGateway(
            f"{self.name}-nat-{index}",
            subnet_id=self.public_subnets[index].id,
            allocation_id=eip.id,
            tags=self._tags(f"{self.name}-nat-{index}"),
            opts=pulumi.ResourceOptions(parent=self, depends_on=[self.igw]),
        )

    def _route_public_tier(self) -> None:
        self.public_rt = aws.ec2.RouteTable(
            f"{self.name}-public-rt",
            vpc_id=self.vpc.id,
            routes=[
                aws.ec2.RouteTableRouteArgs(cidr_block="0.0.0.0/0", gateway_id=self.igw.id),
            ],
            tags=self._tags(f"{self.name}-public-rt"),
            opts=pulumi.ResourceOptions(parent=self),
        )
        for i, subnet in enumerate(self.public_subnets):
            aws.ec2.RouteTableAssociation(
                f"{self.name}-public-rta-{i}",
                subnet_id=subnet.id,
                route_table_id=self.public_rt.id,
                opts=pulumi.ResourceOptions(parent=self),
            )

    def _route_private_tier(self) -> None:
        # Egress only, through the NAT gateway in the same AZ when there is one
        self.private_rts: list[aws.ec2.RouteTable] = []
        for i, subnet in enumerate(self.private_subnets):
            nat = self.nat_gateways[min(i, len(self.nat_gateways) - 1)]
            route_table = aws.ec2.RouteTable(
                f"{self.name}-private-rt-{i}",
                vpc_id=self.vpc.id,
                routes=[
                    aws.ec2.RouteTableRouteArgs(cidr_block="0.0.0.0/0", nat_gateway_id=nat.id),
                ],
                tags=self._tags(f"{self.name}-private-rt-{i}"),
                opts=pulumi.ResourceOptions(parent=self),
            )
            self.private_rts.append(route_table)
            aws.ec2.RouteTableAssociation(
                f"{self.name}-private-rta-{i}",
                subnet_id=subnet.id,
                route_table_id=route_table.id,
                opts=pulumi.ResourceOptions(parent=self),
            )
