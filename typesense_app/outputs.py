from typing import Union

from aws_cdk import CfnOutput, Stack

import common.constants as constants
from common.environment import Environment
from common.errors import ConfigurationError
from typesense_app.compute_topology import PersistentInstance
from typesense_app.credentials import CredentialHandle
from typesense_app.topology import TopologyDeployment, resolve_topology

OutputSet = dict[str, str]

_BASE_KEYS = frozenset({constants.OUTPUT_API_URL, constants.OUTPUT_API_KEY_SECRET_ARN})
# No load balancer to identify a persistent instance deployment, so its
# cluster and service names are published instead
_PERSISTENT_INSTANCE_KEYS = frozenset(
    {constants.OUTPUT_CLUSTER_NAME, constants.OUTPUT_SERVICE_NAME}
)

_DESCRIPTIONS = {
    constants.OUTPUT_API_URL: "Typesense API URL",
    constants.OUTPUT_API_KEY_SECRET_ARN: "ARN of the Typesense API Key Secret",
    constants.OUTPUT_CLUSTER_NAME: "Typesense ECS Cluster Name",
    constants.OUTPUT_SERVICE_NAME: "Typesense ECS Service Name",
}


def expected_output_keys(environment: Union[Environment, str]) -> frozenset[str]:
    """Output keys a stack publishes for an environment.

    dev/stage: api-url, api-key-secret-arn, cluster-name, service-name
    prod: api-url, api-key-secret-arn
    """
    if isinstance(resolve_topology(environment), PersistentInstance):
        return _BASE_KEYS | _PERSISTENT_INSTANCE_KEYS
    return _BASE_KEYS


def output_logical_id(key: str) -> str:
    return "".join(part.capitalize() for part in key.split("-"))


def emit_outputs(
    stack: Stack,
    environment: Union[Environment, str],
    deployment: TopologyDeployment,
    credential: CredentialHandle,
) -> OutputSet:
    """Publish the output contract as CfnOutputs and return it."""
    outputs: OutputSet = {
        constants.OUTPUT_API_URL: deployment.endpoint_url,
        constants.OUTPUT_API_KEY_SECRET_ARN: credential.secret_arn,
    }
    if isinstance(deployment.topology, PersistentInstance):
        outputs[constants.OUTPUT_CLUSTER_NAME] = deployment.cluster.cluster_name
        outputs[constants.OUTPUT_SERVICE_NAME] = deployment.service.service_name

    expected = expected_output_keys(environment)
    if set(outputs) != expected:
        raise ConfigurationError(
            f"Outputs {sorted(outputs)} do not match the contract for "
            f"{Environment.from_value(environment).value}: {sorted(expected)}"
        )

    for key, value in outputs.items():
        CfnOutput(
            stack,
            output_logical_id(key),
            value=value,
            description=_DESCRIPTIONS[key],
            export_name=f"{stack.stack_name}-{key}",
        )

    contract_paths = {f"{stack.node.path}/{output_logical_id(key)}" for key in outputs}
    stray = sorted(
        construct.node.path
        for construct in stack.node.find_all()
        if isinstance(construct, CfnOutput) and construct.node.path not in contract_paths
    )
    if stray:
        raise ConfigurationError(f"Stack publishes outputs outside the contract: {stray}")
    return outputs
