"""Database Component - RDS MySQL for the web stack.

Places a MySQL instance in the private subnets behind a security group that
only admits the public subnets' CIDR blocks on the database port. The rule
set comes from :func:`network.policy.derive_policy`; anything it does not
admit is denied by the security group's implicit default-deny.
"""

import pulumi
import pulumi_aws as aws

from network.policy import SecurityPolicy, derive_policy
from network.resolver import SubnetResolver


def ingress_args(policy: SecurityPolicy) -> list[aws.ec2.SecurityGroupIngressArgs]:
    """Render a derived policy as security group ingress arguments."""
    return [
        aws.ec2.SecurityGroupIngressArgs(
            protocol=rule.protocol,
            from_port=rule.from_port,
            to_port=rule.to_port,
            cidr_blocks=list(rule.cidr_blocks),
            description="Database access from public subnets",
        )
        for rule in policy.rules
    ]


class DatabaseComponent(pulumi.ComponentResource):
    """MySQL database reachable only from the public subnet tier.

    Features:
    - Private subnet placement (subnet group over the private tier)
    - Ingress derived from the public subnets' CIDR blocks
    - Password supplied as a Pulumi secret, never read by this program
    """

    def __init__(
        self,
        name: str,
        vpc_id: pulumi.Input[str],
        private_subnet_ids: pulumi.Input[list[str]],
        public_subnet_ids: pulumi.Output[list[str]],
        resolver: SubnetResolver,
        password: pulumi.Input[str],
        identifier: str,
        db_name: str,
        port: int = 3306,
        lookup_timeout: float | None = None,
        engine_version: str = "8.0",
        instance_class: str = "db.t3.micro",
        allocated_storage: int = 20,
        username: str = "admin",
        tags: dict | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("webstack:database:MySQL", name, None, opts)

        self.tags = tags or {}

        # RDS subnet group names cannot contain uppercase letters
        self.subnet_group = aws.rds.SubnetGroup(
            f"{name}-subnet-group",
            name=identifier,
            subnet_ids=private_subnet_ids,
            description=f"Private subnets for {identifier}",
            tags=self.tags,
            opts=pulumi.ResourceOptions(parent=self),
        )

        # Resolved once per deployment; a lookup failure fails the whole stack
        self.policy = pulumi.Output.from_input(public_subnet_ids).apply(
            lambda subnet_ids: derive_policy(subnet_ids, port, resolver, timeout=lookup_timeout)
        )

        self.security_group = aws.ec2.SecurityGroup(
            f"{name}-security-group",
            vpc_id=vpc_id,
            description="MySQL access from the public subnets only",
            ingress=self.policy.apply(ingress_args),
            tags=self.tags,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.instance = aws.rds.Instance(
            f"{name}-instance",
            identifier=identifier,
            engine="mysql",
            engine_version=engine_version,
            instance_class=instance_class,
            allocated_storage=allocated_storage,
            db_name=db_name,
            username=username,
            password=password,
            port=port,
            db_subnet_group_name=self.subnet_group.name,
            vpc_security_group_ids=[self.security_group.id],
            publicly_accessible=False,
            skip_final_snapshot=True,
            tags=self.tags,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.endpoint = self.instance.address
        self.port = self.instance.port

        self.register_outputs(
            {
                "endpoint": self.endpoint,
                "port": self.port,
                "security_group_id": self.security_group.id,
            }
        )
