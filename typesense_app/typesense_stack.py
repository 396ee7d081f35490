from typing import Union

from aws_cdk import Stack, Tags
from constructs import Construct

import common.constants as constants
from common.environment import Environment
from common.logger import logger
from common.stack_context import StackContext
from networking.typesense_network import provision_network
from typesense_app.credentials import provision_credential
from typesense_app.outputs import emit_outputs
from typesense_app.topology import build_topology, resolve_topology


class TypesenseStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        environment: Union[Environment, str],
        **kwargs,
    ) -> None:
        # Fail before the stack is attached to the app
        environment = Environment.from_value(environment)
        super().__init__(scope, construct_id, **kwargs)
        self.context = StackContext(scope=self, environment=environment)

        Tags.of(self).add("Service", constants.SERVICE_NAME)
        Tags.of(self).add("Environment", environment.value)

        # Topology descriptor, decides NAT gating as well as the compute builder
        self.topology = resolve_topology(environment)
        logger.info(
            "Resolved compute topology",
            extra={
                "stack": construct_id,
                "environment": environment.value,
                "topology": type(self.topology).__name__,
            },
        )

        # Shared, read-only handles
        self.network = provision_network(
            self, self.context, nat_gateways=self.topology.nat_gateways
        )
        self.credential = provision_credential(self, self.context)

        # Exactly one compute topology
        self.deployment = build_topology(
            self, self.context, self.topology, self.network, self.credential
        )

        self.outputs = emit_outputs(self, environment, self.deployment, self.credential)
