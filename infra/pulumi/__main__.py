"""Web Stack Infrastructure - Main Entry Point.

This module wires the AWS and Kubernetes components of the web stack
together using Pulumi.

Architecture:
- Network: VPC with public and private subnet tiers
- Compute: EKS cluster on the public subnets
- Cache: Redis inside the cluster (ClusterIP only)
- App: Web application behind an internet-facing load balancer
- Database: RDS MySQL on the private subnets, reachable from the public tier only

Required environment: OWNER_TAG, WEB_APP_IMAGE.
Required stack config: aws:region.
Required stack secret: rdspassword (pulumi config set --secret rdspassword ...).
"""

import logging

import pulumi

from common.config import load_settings
from components.database import DatabaseComponent
from components.eks import EKSComponent
from components.redis import RedisComponent
from components.vpc import VPCComponent
from components.webapp import WebAppComponent
from network.resolver import Ec2SubnetResolver

logging.getLogger().setLevel(logging.INFO)

# Fails with ConfigurationMissing before any resource is declared
settings = load_settings()
config = pulumi.Config()
aws_config = pulumi.Config("aws")

# Subnet lookups must hit the region the AWS provider deploys into
aws_region = aws_config.require("region")

owner = settings.owner_tag
tags = settings.tags

# =============================================================================
# VPC - Network Foundation
# =============================================================================
vpc = VPCComponent(
    owner,
    cidr_block=config.get("vpc_cidr") or "10.0.0.0/16",
    availability_zones=config.get_int("az_count") or 2,
    tags=tags,
)

# =============================================================================
# EKS - Kubernetes Cluster
# =============================================================================
cluster = EKSComponent(
    f"{owner}-eks",
    vpc_id=vpc.vpc.id,
    subnet_ids=vpc.public_subnet_ids,
    instance_type=settings.node_instance_type,
    desired_capacity=settings.node_desired_capacity,
    min_size=settings.node_min_size,
    max_size=settings.node_max_size,
    tags=tags,
)

# =============================================================================
# Redis - In-cluster Cache
# =============================================================================
redis = RedisComponent(
    f"{owner}-redis",
    provider=cluster.provider,
    namespace=settings.k8s_namespace,
    service_port=settings.redis_service_port,
    container_port=settings.redis_container_port,
)

# =============================================================================
# Web App - Deployment + LoadBalancer Service
# =============================================================================
webapp = WebAppComponent(
    f"{owner}-webapp",
    provider=cluster.provider,
    image=settings.web_app_image,
    redis_url=redis.url,
    namespace=settings.k8s_namespace,
    container_port=settings.web_app_container_port,
    service_port=settings.web_app_service_port,
)

# =============================================================================
# Database - RDS MySQL
# =============================================================================
database = DatabaseComponent(
    f"{owner}-rds",
    vpc_id=vpc.vpc.id,
    private_subnet_ids=vpc.private_subnet_ids,
    public_subnet_ids=vpc.public_subnet_ids,
    resolver=Ec2SubnetResolver(region=aws_region),
    password=config.require_secret("rdspassword"),
    identifier=settings.rds_identifier,
    db_name=settings.db_name,
    port=settings.database_port,
    lookup_timeout=settings.subnet_lookup_timeout_seconds,
    tags=tags,
)

# =============================================================================
# Stack Outputs
# =============================================================================
pulumi.export("vpc_id", vpc.vpc.id)
pulumi.export("public_subnet_ids", vpc.public_subnet_ids)
pulumi.export("private_subnet_ids", vpc.private_subnet_ids)

pulumi.export("kubeconfig", pulumi.Output.secret(cluster.kubeconfig))
pulumi.export("redis_url", redis.url)
pulumi.export("web_app_url", webapp.url)

pulumi.export("database_endpoint", database.endpoint)
pulumi.export("database_security_group_id", database.security_group.id)
