#!/usr/bin/env python3
"""AWS CDK entrypoint for provisioning the Typesense infrastructure.

The deployment environment (dev, stage, prod) comes from the ``environment``
CDK context value (``cdk synth -c environment=dev``) or, failing that, from
``CDK_DEFAULT_ENVIRONMENT``. Account and region come from the CDK CLI
defaults.
"""
import os

import aws_cdk as cdk
from aws_cdk import Environment

import common.constants as constants
from common.environment import Environment as DeploymentEnvironment
from typesense_app.typesense_stack import TypesenseStack

app = cdk.App()

environment = DeploymentEnvironment.from_value(
    app.node.try_get_context(constants.ENVIRONMENT_CONTEXT_KEY)
    or os.getenv(constants.ENVIRONMENT_VARIABLE)
)
region = os.getenv("CDK_DEFAULT_REGION")

env = Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=region,
)

stack_id = f"{constants.SERVICE_NAME}-{environment.value}-stack"
if region:
    stack_id = f"{stack_id}-{region}"

TypesenseStack(
    app,
    stack_id,
    environment=environment,
    env=env,
)

app.synth()
