"""Network exposure policy for the database tier."""

from network.policy import IngressRule, SecurityPolicy, derive_policy
from network.resolver import Ec2SubnetResolver, SubnetResolver

__all__ = [
    "Ec2SubnetResolver",
    "IngressRule",
    "SecurityPolicy",
    "SubnetResolver",
    "derive_policy",
]
