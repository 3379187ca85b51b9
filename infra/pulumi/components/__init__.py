"""Components package for Pulumi infrastructure.

Web stack architecture:
- VPCComponent: Public and private subnet tiers
- EKSComponent: Kubernetes cluster in the public tier
- RedisComponent: In-cluster cache (ClusterIP)
- WebAppComponent: Web application behind a LoadBalancer service
- DatabaseComponent: RDS MySQL in the private tier, public-tier-only ingress
"""

from components.database import DatabaseComponent
from components.eks import EKSComponent
from components.redis import RedisComponent
from components.vpc import VPCComponent
from components.webapp import WebAppComponent

__all__ = [
    "DatabaseComponent",
    "EKSComponent",
    "RedisComponent",
    "VPCComponent",
    "WebAppComponent",
]
