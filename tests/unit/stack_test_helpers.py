from dataclasses import dataclass
from typing import Any, Mapping, Optional
from aws_cdk.assertions import Template
from typesense_app.typesense_stack import TypesenseStack
from aws_cdk import App
import pytest


# ------------------- Test Case Data Classes -------------------
@dataclass(frozen=True)
class ResourceCountTestCase:
    id: str
    resource_type: str
    dev: int
    prod: int


@dataclass(frozen=True)
class OutputContractTestCase:
    id: str
    environment: str
    expected_keys: frozenset


# ------------------- Helper Functions -------------------

STACK_ID = "TestTypesenseStack"


def find_resources_by_type(
    template: Template, resource_type: str, props: Optional[dict] = None
) -> Mapping[str, Any]:

    return template.find_resources(resource_type, props=props)


def get_single_resource_id(
    resources: Mapping[str, Any], resource_type: str = "resource"
) -> str:
    assert len(resources) == 1, f"expected exactly one {resource_type}, got {len(resources)}"
    return next(iter(resources))


def build_stack(environment: str, stack_id: str = STACK_ID) -> TypesenseStack:
    app = App()
    return TypesenseStack(app, stack_id, environment=environment)


def build_template(environment: str, stack_id: str = STACK_ID) -> Template:
    return Template.from_stack(build_stack(environment, stack_id))


def container_definitions(template: Template) -> list:
    task_definitions = find_resources_by_type(template, "AWS::ECS::TaskDefinition")
    logical_id = get_single_resource_id(task_definitions, "task definition")
    return task_definitions[logical_id]["Properties"]["ContainerDefinitions"]


# ------------------- Pytest Fixtures -------------------


@pytest.fixture(scope="module")
def dev_template() -> Template:
    return build_template("dev")


@pytest.fixture(scope="module")
def stage_template() -> Template:
    return build_template("stage")


@pytest.fixture(scope="module")
def prod_template() -> Template:
    return build_template("prod")
