from enum import Enum
from typing import Union

from common.errors import ConfigurationError


class Environment(str, Enum):
    DEV = "dev"
    STAGE = "stage"
    PROD = "prod"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_value(cls, value: Union["Environment", str, None]) -> "Environment":
        """Parse a deployment environment tag.

        Only the exact values dev, stage and prod are accepted. Anything else,
        including a missing value, is a configuration error.
        """
        if isinstance(value, cls):
            return value
        allowed = ", ".join(member.value for member in cls)
        if not value:
            raise ConfigurationError(
                f"Deployment environment is not set, expected one of: {allowed}"
            )
        try:
            return cls(value)
        except ValueError as exc:
            raise ConfigurationError(
                f"Invalid deployment environment {value!r}, expected one of: {allowed}"
            ) from exc
