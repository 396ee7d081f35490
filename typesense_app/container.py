"""Container settings shared by both compute topologies."""
from aws_cdk import aws_ecs as ecs

import common.constants as constants
from common.stack_context import StackContext
from typesense_app.credentials import CredentialHandle


def typesense_image() -> ecs.ContainerImage:
    return ecs.ContainerImage.from_registry(constants.TYPESENSE_IMAGE)


def typesense_environment() -> dict[str, str]:
    return {"TYPESENSE_DATA_DIR": constants.TYPESENSE_DATA_DIR}


def typesense_secrets(credential: CredentialHandle) -> dict[str, ecs.Secret]:
    """Inject the API key as a task secret so it never lands in the task definition."""
    return {constants.TYPESENSE_API_KEY_ENV: credential.container_secret()}


def typesense_log_driver(context: StackContext) -> ecs.LogDriver:
    return ecs.LogDrivers.aws_logs(
        stream_prefix=constants.LOG_STREAM_PREFIX,
        log_group=context.build_log_group(),
    )
