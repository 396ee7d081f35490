import json

from attrs import define, field
from aws_cdk import RemovalPolicy, aws_ecs as ecs, aws_secretsmanager as secretsmanager
from constructs import Construct

import common.constants as constants
from common.logger import logger
from common.stack_context import StackContext


@define(slots=True, frozen=True)
class CredentialHandle:
    """Reference to the generated API key secret, never its value."""

    secret: secretsmanager.ISecret
    field_name: str = field(default=constants.API_KEY_FIELD)

    @property
    def secret_arn(self) -> str:
        return self.secret.secret_arn

    def container_secret(self) -> ecs.Secret:
        return ecs.Secret.from_secrets_manager(self.secret, self.field_name)


def provision_credential(scope: Construct, context: StackContext) -> CredentialHandle:
    """Return the API key secret for this scope, creating it on first call.

    CloudFormation generates the value once when the secret is created, so
    stack updates keep it and only a full recreation produces a new key.
    """
    construct_id = context.build_resource_id("ApiKey")
    secret = scope.node.try_find_child(construct_id)
    if secret is None:
        secret = secretsmanager.Secret(
            scope,
            construct_id,
            secret_name=context.build_resource_name("api-key"),
            description="API Key for Typesense",
            removal_policy=RemovalPolicy.DESTROY,
            generate_secret_string=secretsmanager.SecretStringGenerator(
                secret_string_template=json.dumps({}),
                generate_string_key=constants.API_KEY_FIELD,
                password_length=constants.API_KEY_LENGTH,
                exclude_uppercase=True,
                exclude_punctuation=True,
                include_space=False,
                exclude_characters=constants.NON_HEX_CHARACTERS,
            ),
        )
        logger.info("Provisioned API key secret", extra={"construct_id": construct_id})
    return CredentialHandle(secret=secret)
