from aws_cdk import (
    aws_autoscaling as autoscaling,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_iam as iam,
    custom_resources as cr,
)
from constructs import Construct

import common.constants as constants
from common.stack_context import StackContext
from networking.typesense_network import NetworkHandle
from typesense_app import container
from typesense_app.compute_topology import IngressPolicy, PersistentInstance
from typesense_app.credentials import CredentialHandle


class PersistentInstanceTopology(Construct):
    """ECS on a single EC2 instance in a public subnet.

    The instance is kept at exactly one by its auto scaling group. When it is
    replaced it comes back with a new public address, so the endpoint has to
    be re-resolved after a replacement.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        context: StackContext,
        topology: PersistentInstance,
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
        self.security_group = self._build_instance_security_group(network.vpc)
        self.auto_scaling_group = self._build_auto_scaling_group(network)
        self.capacity_provider = self._build_capacity_provider(self.auto_scaling_group)
        self.task_definition = self._build_task_definition(credential)
        self.service = self._build_service()
        self.public_ip = self._lookup_instance_public_ip()

    @property
    def endpoint_url(self) -> str:
        return f"http://{self.public_ip}:{constants.TYPESENSE_PORT}"

    # Resource creation

    def _build_instance_security_group(self, vpc: ec2.IVpc) -> ec2.SecurityGroup:
        security_group = ec2.SecurityGroup(
            self,
            self.context.build_resource_id("InstanceSG"),
            vpc=vpc,
            allow_all_outbound=True,
            description="Security group for the Typesense container instance",
        )
        if self.topology.ingress == IngressPolicy.ANY_IPV4:
            allow_public_api_access(security_group)
        return security_group

    def _build_auto_scaling_group(
        self, network: NetworkHandle
    ) -> autoscaling.AutoScalingGroup:
        launch_template = ec2.LaunchTemplate(
            self,
            self.context.build_resource_id("LaunchTemplate"),
            instance_type=ec2.InstanceType.of(
                self.topology.instance_class, self.topology.instance_size
            ),
            machine_image=ecs.EcsOptimizedImage.amazon_linux2(),
            # ECS_CLUSTER registration is appended by the capacity provider
            user_data=ec2.UserData.for_linux(),
            security_group=self.security_group,
            role=iam.Role(
                self,
                self.context.build_resource_id("InstanceRole"),
                assumed_by=iam.ServicePrincipal("ec2.amazonaws.com"),
                managed_policies=[
                    iam.ManagedPolicy.from_aws_managed_policy_name(
                        constants.INSTANCE_ROLE_POLICY
                    ),
                ],
            ),
        )
        return autoscaling.AutoScalingGroup(
            self,
            self.context.build_resource_id("Asg"),
            vpc=network.vpc,
            launch_template=launch_template,
            min_capacity=self.topology.min_count,
            max_capacity=self.topology.max_count,
            vpc_subnets=network.subnets_for(self.topology.subnet_type),
            new_instances_protected_from_scale_in=False,
        )

    def _build_capacity_provider(
        self, auto_scaling_group: autoscaling.AutoScalingGroup
    ) -> ecs.AsgCapacityProvider:
        capacity_provider = ecs.AsgCapacityProvider(
            self,
            self.context.build_resource_id("CapacityProvider"),
            auto_scaling_group=auto_scaling_group,
            enable_managed_termination_protection=False,
        )
        self.cluster.add_asg_capacity_provider(capacity_provider)
        return capacity_provider

    def _build_task_definition(self, credential: CredentialHandle) -> ecs.Ec2TaskDefinition:
        task_definition = ecs.Ec2TaskDefinition(
            self,
            self.context.build_resource_id("TaskDef"),
            network_mode=ecs.NetworkMode.BRIDGE,
        )
        task_definition.add_container(
            constants.TYPESENSE_CONTAINER_NAME,
            image=container.typesense_image(),
            cpu=self.topology.cpu,
            memory_limit_mib=self.topology.memory_mib,
            command=constants.TYPESENSE_COMMAND,
            environment=container.typesense_environment(),
            secrets=container.typesense_secrets(credential),
            logging=container.typesense_log_driver(self.context),
            port_mappings=[
                ecs.PortMapping(
                    container_port=constants.TYPESENSE_PORT,
                    host_port=constants.TYPESENSE_PORT,
                    protocol=ecs.Protocol.TCP,
                )
            ],
        )
        return task_definition

    def _build_service(self) -> ecs.Ec2Service:
        return ecs.Ec2Service(
            self,
            self.context.build_resource_id("Service"),
            cluster=self.cluster,
            task_definition=self.task_definition,
            service_name=self.context.build_resource_name("service"),
            desired_count=1,
            # One fixed host port per instance: stop the old task before starting the new one
            min_healthy_percent=0,
            max_healthy_percent=100,
            capacity_provider_strategies=[
                ecs.CapacityProviderStrategy(
                    capacity_provider=self.capacity_provider.capacity_provider_name,
                    weight=1,
                )
            ],
        )

    def _lookup_instance_public_ip(self) -> str:
        """Read the public IP of the instance the auto scaling group launched."""
        describe_instances = cr.AwsSdkCall(
            service="EC2",
            action="describeInstances",
            parameters={
                "Filters": [
                    {
                        "Name": "tag:aws:autoscaling:groupName",
                        "Values": [self.auto_scaling_group.auto_scaling_group_name],
                    },
                    {"Name": "instance-state-name", "Values": ["pending", "running"]},
                ]
            },
            physical_resource_id=cr.PhysicalResourceId.of(
                self.auto_scaling_group.auto_scaling_group_name
            ),
            output_paths=[constants.INSTANCE_PUBLIC_IP_PATH],
        )
        lookup = cr.AwsCustomResource(
            self,
            self.context.build_resource_id("InstanceLookup"),
            on_create=describe_instances,
            on_update=describe_instances,
            install_latest_aws_sdk=False,
            policy=cr.AwsCustomResourcePolicy.from_sdk_calls(
                resources=cr.AwsCustomResourcePolicy.ANY_RESOURCE
            ),
        )
        # The ECS service only stabilises once the instance is up and registered
        lookup.node.add_dependency(self.service)
        return lookup.get_response_field(constants.INSTANCE_PUBLIC_IP_PATH)


def allow_public_api_access(security_group: ec2.SecurityGroup) -> None:
    """Open the Typesense port to any IPv4 source.

    Only used for non-production environments; applied as a named rule so it
    shows up in the template with its own description.
    """
    security_group.add_ingress_rule(
        peer=ec2.Peer.ipv4(constants.ANY_IPV4_CIDR),
        connection=ec2.Port.tcp(constants.TYPESENSE_PORT),
        description=constants.PUBLIC_API_INGRESS_DESCRIPTION,
    )
