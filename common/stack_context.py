from attrs import define, field
from aws_cdk import RemovalPolicy, aws_logs as logs
from constructs import Construct

import common.constants as constants
from common.environment import Environment


@define(slots=True, frozen=True)
class StackContext:
    scope: Construct
    environment: Environment = field(
        converter=Environment.from_value,
        metadata={"description": "Deployment environment (dev, stage, prod)"},
    )
    service: str = field(default=constants.SERVICE_NAME, init=False)

    # ---------- naming ----------
    def build_resource_name(self, resource_type: str) -> str:
        """Build a physical resource name.

        Examples:
            - typesense-cluster-dev
            - typesense-api-key-prod
        """
        return f"{self.service}-{resource_type}-{self.environment.value}".lower()

    def build_resource_id(self, resource_type: str) -> str:
        """Build a construct ID.

        Examples:
            - TypesenseCluster
            - TypesenseApiKey (from "api-key")
        """
        parts = [self.service, *resource_type.replace("_", "-").split("-")]
        return "".join(part[:1].upper() + part[1:] for part in parts if part)

    def build_log_group(self) -> logs.LogGroup:
        return logs.LogGroup(
            self.scope,
            self.build_resource_id("LogGroup"),
            log_group_name=f"/ecs/{self.service}-{self.environment.value}",
            removal_policy=RemovalPolicy.DESTROY,
            retention=logs.RetentionDays.ONE_YEAR,
        )
