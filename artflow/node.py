"""The service entity: a node's service name, configuration and bound service."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .service import EmptyService, Service


@dataclass(eq=False)
class ServiceEntity:
    """What a plan hands to the engine to run for one node."""

    service_name: str = ""
    node_name: str = ""
    config: Any = None
    middle_index: int = 0
    service: Service = field(default_factory=EmptyService)

    def __str__(self) -> str:
        return f"service_name:{self.service_name},node_name:{self.node_name}"

    __repr__ = __str__

    @staticmethod
    def of(spec: Any) -> "ServiceEntity":
        """Build an entity from a service name or a ``(service_name, config)`` pair.

        A bare name is used as both the service name and the configuration.
        """
        if isinstance(spec, ServiceEntity):
            return spec
        if isinstance(spec, str):
            return ServiceEntity(service_name=spec, config=spec)
        if isinstance(spec, tuple) and len(spec) == 2:
            name, config = spec
            return ServiceEntity(service_name=str(name), config=config)
        raise TypeError(f"cannot build a ServiceEntity from {spec!r}")

    def with_service(self, service: Service) -> "ServiceEntity":
        self.service = service
        return self

    def config_as(self, expected_type: type) -> Any:
        """Return the configuration if it is an ``expected_type``, else None."""
        return self.config if isinstance(self.config, expected_type) else None

    def take_config(self, expected_type: type) -> Any:
        """Remove and return the configuration if it is an ``expected_type``."""
        if not isinstance(self.config, expected_type):
            return None
        config, self.config = self.config, None
        return config