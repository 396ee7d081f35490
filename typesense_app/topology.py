"""Environment to compute topology resolution.

``resolve_topology`` is the only place that decides which topology an
environment gets. ``build_topology`` is the only place that maps a topology
descriptor to the construct that builds it.
"""
from typing import Union

from constructs import Construct

from common.environment import Environment
from common.errors import ConfigurationError
from common.logger import logger
from common.stack_context import StackContext
from networking.typesense_network import NetworkHandle
from typesense_app.compute_topology import ComputeTopology, Elastic, PersistentInstance
from typesense_app.credentials import CredentialHandle
from typesense_app.elastic_topology import ElasticTopology
from typesense_app.persistent_instance_topology import PersistentInstanceTopology

TopologyDeployment = Union[PersistentInstanceTopology, ElasticTopology]

_BUILDERS = {
    PersistentInstance: PersistentInstanceTopology,
    Elastic: ElasticTopology,
}


def resolve_topology(environment: Union[Environment, str]) -> ComputeTopology:
    """Pick the compute topology for an environment.

    dev and stage favour low idle cost: one instance in a public subnet, no
    NAT gateway. prod favours availability: redundant Fargate tasks in private
    subnets behind a load balancer.
    """
    environment = Environment.from_value(environment)
    if environment in (Environment.DEV, Environment.STAGE):
        return PersistentInstance()
    return Elastic()


def build_topology(
    scope: Construct,
    context: StackContext,
    topology: ComputeTopology,
    network: NetworkHandle,
    credential: CredentialHandle,
) -> TopologyDeployment:
    if credential is None:
        raise ConfigurationError(
            "Cannot build the compute topology without an API key credential"
        )
    builder = _BUILDERS.get(type(topology))
    if builder is None:
        raise ConfigurationError(f"Unsupported compute topology: {topology!r}")
    logger.info(
        "Building compute topology",
        extra={
            "environment": context.environment.value,
            "topology": type(topology).__name__,
        },
    )
    return builder(
        scope,
        context.build_resource_id("Compute"),
        context=context,
        topology=topology,
        network=network,
        credential=credential,
    )


def resolve(
    scope: Construct,
    context: StackContext,
    network: NetworkHandle,
    credential: CredentialHandle,
) -> TopologyDeployment:
    return build_topology(
        scope, context, resolve_topology(context.environment), network, credential
    )
