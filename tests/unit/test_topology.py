import pytest
from attrs.exceptions import FrozenInstanceError
from aws_cdk import App, Stack, aws_ec2 as ec2

from common.environment import Environment
from common.errors import ConfigurationError
from common.stack_context import StackContext
from networking.typesense_network import provision_network
from typesense_app.compute_topology import Elastic, IngressPolicy, PersistentInstance
from typesense_app.credentials import provision_credential
from typesense_app.elastic_topology import ElasticTopology
from typesense_app.persistent_instance_topology import PersistentInstanceTopology
from typesense_app.topology import build_topology, resolve, resolve_topology


# ------------------- Resolver -------------------


@pytest.mark.parametrize("environment", ["dev", "stage", Environment.DEV, Environment.STAGE])
def test_non_prod_resolves_to_persistent_instance(environment):
    topology = resolve_topology(environment)
    assert isinstance(topology, PersistentInstance)
    assert topology.min_count == topology.max_count == 1
    assert topology.subnet_type == ec2.SubnetType.PUBLIC
    assert topology.ingress == IngressPolicy.ANY_IPV4
    assert topology.requires_egress is False
    assert topology.nat_gateways == 0


def test_prod_resolves_to_elastic():
    topology = resolve_topology("prod")
    assert isinstance(topology, Elastic)
    assert topology.desired_count >= 2
    assert topology.max_count >= topology.desired_count
    assert topology.subnet_type == ec2.SubnetType.PRIVATE_WITH_EGRESS
    assert topology.health_check_path == "/health"
    assert topology.requires_egress is True
    assert topology.nat_gateways == 1


@pytest.mark.parametrize("environment", ["dev", "stage", "prod"])
def test_resolving_twice_is_equivalent(environment: str):
    assert resolve_topology(environment) == resolve_topology(environment)


@pytest.mark.parametrize("environment", ["qa", "PROD", "", None])
def test_invalid_environment_is_a_configuration_error(environment):
    with pytest.raises(ConfigurationError):
        resolve_topology(environment)


# ------------------- Descriptors -------------------


def test_topologies_are_immutable():
    topology = resolve_topology("dev")
    with pytest.raises(FrozenInstanceError):
        topology.max_count = 2


@pytest.mark.parametrize("kwargs", [{"min_count": 0}, {"max_count": 2}])
def test_persistent_instance_is_pinned_to_one(kwargs):
    with pytest.raises(ValueError):
        PersistentInstance(**kwargs)


@pytest.mark.parametrize(
    "kwargs", [{"desired_count": 1}, {"desired_count": 3, "max_count": 2}]
)
def test_elastic_requires_redundancy(kwargs):
    with pytest.raises(ValueError):
        Elastic(**kwargs)


# ------------------- Builder dispatch -------------------


def _stack_parts(environment: str):
    stack = Stack(App(), "TopologyTestStack")
    context = StackContext(scope=stack, environment=environment)
    topology = resolve_topology(environment)
    network = provision_network(stack, context, nat_gateways=topology.nat_gateways)
    return stack, context, topology, network


@pytest.mark.parametrize(
    "environment,builder",
    [("dev", PersistentInstanceTopology), ("prod", ElasticTopology)],
)
def test_resolve_builds_matching_topology(environment: str, builder):
    stack, context, _, network = _stack_parts(environment)
    credential = provision_credential(stack, context)

    deployment = resolve(stack, context, network, credential)

    assert isinstance(deployment, builder)
    assert deployment.topology == resolve_topology(environment)


def test_elastic_deployment_has_load_balancer():
    stack, context, topology, network = _stack_parts("prod")
    deployment = build_topology(
        stack, context, topology, network, provision_credential(stack, context)
    )
    assert deployment.load_balancer is not None


def test_missing_credential_aborts():
    stack, context, topology, network = _stack_parts("dev")
    with pytest.raises(ConfigurationError):
        build_topology(stack, context, topology, network, None)


def test_unknown_topology_is_rejected():
    stack, context, _, network = _stack_parts("dev")
    with pytest.raises(ConfigurationError):
        build_topology(
            stack, context, object(), network, provision_credential(stack, context)
        )
