"""Web App Component - Public web application on EKS.

Runs the configured container image and exposes it through a LoadBalancer
service, which EKS backs with an AWS ELB in the public subnets.
"""

import pulumi
import pulumi_kubernetes as k8s

APP_LABEL = "webapp"


def load_balancer_url(status) -> str:
    """Build the public URL from a Service status once the ELB is assigned."""
    ingress = (status.load_balancer.ingress or []) if status and status.load_balancer else []
    if not ingress:
        return ""
    endpoint = ingress[0].hostname or ingress[0].ip or ""
    return f"http://{endpoint}" if endpoint else ""


class WebAppComponent(pulumi.ComponentResource):
    """Web application deployment behind an internet-facing load balancer."""

    def __init__(
        self,
        name: str,
        provider: k8s.Provider,
        image: str,
        redis_url: pulumi.Input[str],
        namespace: str = "default",
        container_port: int = 4567,
        service_port: int = 80,
        replicas: int = 1,
        create_timeout: str = "30s",
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("webstack:app:WebApp", name, None, opts)

        child_opts = pulumi.ResourceOptions(
            parent=self,
            provider=provider,
            custom_timeouts=pulumi.CustomTimeouts(create=create_timeout),
        )
        labels = {"app": APP_LABEL}

        self.deployment = k8s.apps.v1.Deployment(
            "webapp-deployment",
            metadata=k8s.meta.v1.ObjectMetaArgs(namespace=namespace),
            spec=k8s.apps.v1.DeploymentSpecArgs(
                replicas=replicas,
                selector=k8s.meta.v1.LabelSelectorArgs(match_labels=labels),
                template=k8s.core.v1.PodTemplateSpecArgs(
                    metadata=k8s.meta.v1.ObjectMetaArgs(labels=labels),
                    spec=k8s.core.v1.PodSpecArgs(
                        containers=[
                            k8s.core.v1.ContainerArgs(
                                name="webapp",
                                image=image,
                                ports=[k8s.core.v1.ContainerPortArgs(container_port=container_port)],
                                env=[k8s.core.v1.EnvVarArgs(name="REDIS_URL", value=redis_url)],
                            ),
                        ],
                    ),
                ),
            ),
            opts=child_opts,
        )

        self.service = k8s.core.v1.Service(
            "webapp-service",
            metadata=k8s.meta.v1.ObjectMetaArgs(namespace=namespace),
            spec=k8s.core.v1.ServiceSpecArgs(
                type="LoadBalancer",  # Internet-facing AWS ELB
                ports=[k8s.core.v1.ServicePortArgs(port=service_port, target_port=container_port)],
                selector=labels,
            ),
            opts=child_opts,
        )

        self.url = self.service.status.apply(load_balancer_url)

        self.register_outputs({"url": self.url})
