"""EKS Component - Kubernetes cluster for the web stack.

Creates an EKS cluster (via the pulumi-eks component) with:
- A default node group in the VPC's public subnets
- Role mappings granting cluster admin to authenticated roles
- A Kubernetes provider bound to the cluster for workload resources
"""

import json

import pulumi
import pulumi_eks as eks
import pulumi_kubernetes as k8s


class EKSComponent(pulumi.ComponentResource):
    """EKS cluster plus a Kubernetes provider targeting it."""

    def __init__(
        self,
        name: str,
        vpc_id: pulumi.Input[str],
        subnet_ids: pulumi.Input[list[str]],
        instance_type: str = "t3.medium",
        desired_capacity: int = 2,
        min_size: int = 1,
        max_size: int = 2,
        tags: dict | None = None,
        opts: pulumi.ResourceOptions | None = None,
    ):
        if not min_size <= desired_capacity <= max_size:
            raise ValueError(
                f"desired_capacity ({desired_capacity}) must lie between "
                f"min_size ({min_size}) and max_size ({max_size})"
            )

        super().__init__("webstack:compute:EKS", name, None, opts)

        self.tags = tags or {}

        # Every authenticated IAM role gets cluster admin
        role_mappings = [
            eks.RoleMappingArgs(
                role_arn="*",
                username="*",
                groups=["system:masters"],
            ),
        ]

        self.cluster = eks.Cluster(
            f"{name}-cluster",
            vpc_id=vpc_id,
            subnet_ids=subnet_ids,
            instance_type=instance_type,
            desired_capacity=desired_capacity,
            min_size=min_size,
            max_size=max_size,
            role_mappings=role_mappings,
            tags={**self.tags, "Name": f"{name}-cluster"},
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.kubeconfig = self.cluster.kubeconfig.apply(
            lambda kc: kc if isinstance(kc, str) else json.dumps(kc)
        )

        self.provider = k8s.Provider(
            f"{name}-k8s",
            kubeconfig=self.kubeconfig,
            opts=pulumi.ResourceOptions(parent=self),
        )

        self.register_outputs(
            {
                "kubeconfig": pulumi.Output.secret(self.kubeconfig),
            }
        )
