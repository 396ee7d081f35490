from enum import Enum
from typing import Union

from attrs import define, field, validators
from aws_cdk import aws_ec2 as ec2

import common.constants as constants


class IngressPolicy(str, Enum):
    """Who may reach the Typesense port directly on the instance."""

    NONE = "none"
    ANY_IPV4 = "any-ipv4"


def _exactly_one(instance, attribute, value) -> None:
    if value != 1:
        raise ValueError(f"{attribute.name} must be 1 for a persistent instance, got {value}")


@define(slots=True, frozen=True)
class PersistentInstance:
    """A single ECS container instance kept at a fixed count of one."""

    min_count: int = field(default=1, validator=_exactly_one)
    max_count: int = field(default=1, validator=_exactly_one)
    subnet_type: ec2.SubnetType = field(default=ec2.SubnetType.PUBLIC)
    instance_class: ec2.InstanceClass = field(default=constants.INSTANCE_CLASS)
    instance_size: ec2.InstanceSize = field(default=constants.INSTANCE_SIZE)
    cpu: int = field(default=constants.PERSISTENT_CPU_UNITS)
    memory_mib: int = field(default=constants.PERSISTENT_MEMORY_MIB)
    ingress: IngressPolicy = field(default=IngressPolicy.ANY_IPV4)

    @property
    def requires_egress(self) -> bool:
        return self.subnet_type == ec2.SubnetType.PRIVATE_WITH_EGRESS

    @property
    def nat_gateways(self) -> int:
        return 1 if self.requires_egress else 0


@define(slots=True, frozen=True)
class Elastic:
    """Fargate tasks behind a public application load balancer."""

    desired_count: int = field(
        default=constants.ELASTIC_DESIRED_COUNT, validator=validators.ge(2)
    )
    max_count: int = field(default=constants.ELASTIC_MAX_COUNT)
    cpu: int = field(default=constants.ELASTIC_CPU_UNITS)
    memory_mib: int = field(default=constants.ELASTIC_MEMORY_MIB)
    subnet_type: ec2.SubnetType = field(default=ec2.SubnetType.PRIVATE_WITH_EGRESS)
    health_check_path: str = field(default=constants.HEALTH_CHECK_PATH)
    health_check_interval_seconds: int = field(
        default=constants.HEALTH_CHECK_INTERVAL_SECONDS
    )
    scale_on_cpu_percent: int = field(default=constants.SCALE_ON_CPU_PERCENT)

    @max_count.validator
    def _check_max_count(self, attribute, value) -> None:
        if value < self.desired_count:
            raise ValueError(
                f"max_count ({value}) must not be lower than desired_count ({self.desired_count})"
            )

    @property
    def requires_egress(self) -> bool:
        return self.subnet_type == ec2.SubnetType.PRIVATE_WITH_EGRESS

    @property
    def nat_gateways(self) -> int:
        return 1 if self.requires_egress else 0


ComputeTopology = Union[PersistentInstance, Elastic]
