"""Redis Component - In-cluster cache for the web app.

The service is ClusterIP only: Redis is never reachable from outside the
cluster. The service port forwards to the container's named ``redis`` port.
"""

import pulumi
import pulumi_kubernetes as k8s

APP_LABEL = "redis"
REDIS_IMAGE = "redis"


class RedisComponent(pulumi.ComponentResource):
    """Single-replica Redis deployment behind a ClusterIP service."""

    def __init__(
        self,
        name: str,
        provider: k8s.Provider,
        namespace: str = "default",
        service_port: int = 6397,
        container_port: int = 6379,
        create_timeout: str = "30s",
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("webstack:cache:Redis", name, None, opts)

        child_opts = pulumi.ResourceOptions(
            parent=self,
            provider=provider,
            custom_timeouts=pulumi.CustomTimeouts(create=create_timeout),
        )
        labels = {"app": APP_LABEL}

        self.service = k8s.core.v1.Service(
            "redis-service",
            metadata=k8s.meta.v1.ObjectMetaArgs(namespace=namespace),
            spec=k8s.core.v1.ServiceSpecArgs(
                type="ClusterIP",
                ports=[
                    k8s.core.v1.ServicePortArgs(
                        port=service_port,
                        target_port="redis",  # Named container port below
                    ),
                ],
                selector=labels,
            ),
            opts=child_opts,
        )

        self.url = self.service.metadata.apply(
            lambda metadata: (
                f"redis://{metadata.name}.{metadata.namespace}.svc.cluster.local:{service_port}"
            )
        )

        self.deployment = k8s.apps.v1.Deployment(
            "redis-deployment",
            metadata=k8s.meta.v1.ObjectMetaArgs(namespace=namespace),
            spec=k8s.apps.v1.DeploymentSpecArgs(
                replicas=1,
                selector=k8s.meta.v1.LabelSelectorArgs(match_labels=labels),
                template=k8s.core.v1.PodTemplateSpecArgs(
                    metadata=k8s.meta.v1.ObjectMetaArgs(labels=labels),
                    spec=k8s.core.v1.PodSpecArgs(
                        containers=[
                            k8s.core.v1.ContainerArgs(
                                name="redis",
                                image=REDIS_IMAGE,
                                ports=[
                                    k8s.core.v1.ContainerPortArgs(
                                        name="redis",
                                        container_port=container_port,
                                    ),
                                ],
                                env=[
                                    k8s.core.v1.EnvVarArgs(name="REDIS_URL", value=self.url),
                                    k8s.core.v1.EnvVarArgs(name="REDIS_HOST", value="0.0.0.0"),
                                ],
                                command=["redis-server"],
                                args=["--bind", "0.0.0.0"],
                            ),
                        ],
                    ),
                ),
            ),
            opts=child_opts,
        )

        self.register_outputs({"url": self.url})
