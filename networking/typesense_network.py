from attrs import define, field
from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from common import constants
from common.errors import ConfigurationError
from common.stack_context import StackContext


@define(slots=True, frozen=True)
class NetworkHandle:
    vpc: ec2.IVpc
    public_subnets: ec2.SubnetSelection
    private_subnets: ec2.SubnetSelection
    private_subnet_type: ec2.SubnetType = field(
        metadata={"description": "PRIVATE_WITH_EGRESS when a NAT gateway exists"}
    )

    @property
    def has_egress(self) -> bool:
        return self.private_subnet_type == ec2.SubnetType.PRIVATE_WITH_EGRESS

    def subnets_for(self, subnet_type: ec2.SubnetType) -> ec2.SubnetSelection:
        if subnet_type == ec2.SubnetType.PUBLIC:
            return self.public_subnets
        if subnet_type == self.private_subnet_type:
            return self.private_subnets
        raise ConfigurationError(
            f"Network has no {subnet_type} subnets (private subnets are {self.private_subnet_type})"
        )


class TypesenseNetwork(Construct):
    """VPC spread over two AZs with public and private subnets.

    A NAT gateway is only created when ``nat_gateways`` is positive; without
    one the private subnets are isolated.
    """

    def __init__(
        self, scope: Construct, construct_id: str, context: StackContext, nat_gateways: int
    ) -> None:
        super().__init__(scope, construct_id)
        self.context = context
        private_subnet_type = (
            ec2.SubnetType.PRIVATE_WITH_EGRESS
            if nat_gateways > 0
            else ec2.SubnetType.PRIVATE_ISOLATED
        )
        self.vpc = self.create_vpc(nat_gateways, private_subnet_type)
        self.handle = NetworkHandle(
            vpc=self.vpc,
            public_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
            private_subnets=ec2.SubnetSelection(subnet_type=private_subnet_type),
            private_subnet_type=private_subnet_type,
        )

    def create_vpc(
        self, nat_gateways: int, private_subnet_type: ec2.SubnetType
    ) -> ec2.Vpc:
        return ec2.Vpc(
            self,
            self.context.build_resource_id("Vpc"),
            vpc_name=self.context.build_resource_name("vpc"),
            max_azs=constants.VPC_MAX_AZS,
            nat_gateways=nat_gateways,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=constants.CIDR_MASK,
                ),
                ec2.SubnetConfiguration(
                    name="Private",
                    subnet_type=private_subnet_type,
                    cidr_mask=constants.CIDR_MASK,
                ),
            ],
        )


def provision_network(
    scope: Construct, context: StackContext, nat_gateways: int
) -> NetworkHandle:
    network = TypesenseNetwork(
        scope, context.build_resource_id("Network"), context, nat_gateways=nat_gateways
    )
    return network.handle
