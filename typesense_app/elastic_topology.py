from aws_cdk import (
    Duration,
    aws_ecs as ecs,
    aws_ecs_patterns as ecs_patterns,
    aws_elasticloadbalancingv2 as elbv2,
)
from constructs import Construct

import common.constants as constants
from common.stack_context import StackContext
from networking.typesense_network import NetworkHandle
from typesense_app import container
from typesense_app.compute_topology import Elastic
from typesense_app.credentials import CredentialHandle


class ElasticTopology(Construct):
    """Fargate tasks in private subnets behind a public load balancer.

    Failed tasks are replaced by ECS to keep the desired count; the load
    balancer DNS name stays the same across replacements.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        context: StackContext,
        topology: Elastic,
        network: NetworkHandle,
        credential: CredentialHandle,
    ) -> None:
        super().__init__(scope, construct_id)
        self.context = context
        self.topology = topology

        self.cluster = ecs.Cluster(
            self,
            context.build_resource_id("Cluster"),
            cluster_name=context.build_resource_name("cluster"),
            vpc=network.vpc,
        )
        self.load_balanced_service = self._build_load_balanced_service(
            network, credential
        )
        self._remove_pattern_outputs()
        self.service = self.load_balanced_service.service
        self.load_balancer: elbv2.IApplicationLoadBalancer = (
            self.load_balanced_service.load_balancer
        )
        self._configure_health_check()
        self._configure_task_scaling()

    @property
    def endpoint_url(self) -> str:
        return f"http://{self.load_balancer.load_balancer_dns_name}"

    # Resource creation

    def _build_load_balanced_service(
        self, network: NetworkHandle, credential: CredentialHandle
    ) -> ecs_patterns.ApplicationLoadBalancedFargateService:
        return ecs_patterns.ApplicationLoadBalancedFargateService(
            self,
            self.context.build_resource_id("Service"),
            cluster=self.cluster,
            service_name=self.context.build_resource_name("service"),
            cpu=self.topology.cpu,
            memory_limit_mib=self.topology.memory_mib,
            desired_count=self.topology.desired_count,
            min_healthy_percent=100,
            task_subnets=network.subnets_for(self.topology.subnet_type),
            assign_public_ip=False,
            public_load_balancer=True,
            task_image_options=ecs_patterns.ApplicationLoadBalancedTaskImageOptions(
                image=container.typesense_image(),
                container_name=constants.TYPESENSE_CONTAINER_NAME,
                container_port=constants.TYPESENSE_PORT,
                command=constants.TYPESENSE_COMMAND,
                environment=container.typesense_environment(),
                secrets=container.typesense_secrets(credential),
                log_driver=container.typesense_log_driver(self.context),
            ),
        )

    def _remove_pattern_outputs(self) -> None:
        """Drop the outputs the pattern adds on its own; the stack publishes its own contract."""
        for output_id in constants.LOAD_BALANCED_PATTERN_OUTPUTS:
            self.load_balanced_service.node.try_remove_child(output_id)

    def _configure_health_check(self) -> None:
        self.load_balanced_service.target_group.configure_health_check(
            path=self.topology.health_check_path,
            interval=Duration.seconds(self.topology.health_check_interval_seconds),
            healthy_http_codes="200",
        )

    def _configure_task_scaling(self) -> None:
        scaling = self.service.auto_scale_task_count(
            min_capacity=self.topology.desired_count,
            max_capacity=self.topology.max_count,
        )
        scaling.scale_on_cpu_utilization(
            self.context.build_resource_id("CpuScaling"),
            target_utilization_percent=self.topology.scale_on_cpu_percent,
        )
