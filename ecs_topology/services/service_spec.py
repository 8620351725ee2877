#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Static description of the topology: the services, their named ports and the call edges between them.
These objects are created once from the topology descriptor and never modified afterwards.
"""

from __future__ import annotations

from ecs_topology.exceptions import DuplicateServiceError

VALID_PROTOCOLS = ("tcp", "udp")


def validate_port_number(port) -> int:
    """
    Validates the port is an integer in the 1-65535 range

    :param port: the port number to validate
    :return: the port number
    :rtype: int
    :raises: ValueError
    """
    if isinstance(port, bool) or not isinstance(port, int):
        raise ValueError("Port must be an integer. Got", port, type(port))
    if not 1 <= port <= 65535:
        raise ValueError(f"Port {port} is not in the 1-65535 range")
    return port


class PortDefinition:
    """
    A named port exposed by a service.

    :ivar str name: the port name, also used as the discovery name of the port
    :ivar int port: the container port
    :ivar str protocol: tcp or udp
    """

    __slots__ = ("_name", "_port", "_protocol")

    def __init__(self, name: str, port: int, protocol: str = "tcp"):
        if not name or not isinstance(name, str):
            raise ValueError("Port name must be a non-empty string. Got", name)
        if protocol not in VALID_PROTOCOLS:
            raise ValueError(
                f"Port {name} protocol must be one of {VALID_PROTOCOLS}. Got {protocol}"
            )
        self._name = name
        self._port = validate_port_number(port)
        self._protocol = protocol

    @property
    def name(self) -> str:
        return self._name

    @property
    def port(self) -> int:
        return self._port

    @property
    def protocol(self) -> str:
        return self._protocol

    def __eq__(self, other):
        if not isinstance(other, PortDefinition):
            return NotImplemented
        return (self.name, self.port, self.protocol) == (
            other.name,
            other.port,
            other.protocol,
        )

    def __hash__(self):
        return hash((self.name, self.port, self.protocol))

    def __repr__(self):
        return f"{self.name}:{self.port}/{self.protocol}"


class ServiceSpec:
    """
    Static description of one service of the topology.

    :ivar str name: unique name of the service in the topology
    :ivar str image: docker image reference
    :ivar tuple[PortDefinition] ports: ordered ports exposed by the service
    :ivar int desired_count: number of tasks, None to use the topology default
    :ivar int cpu: task CPU units, None to use the topology default
    :ivar int memory: task memory in MiB, None to use the topology default
    :ivar bool enable_execute_command: None to use the topology default
    """

    def __init__(
        self,
        name: str,
        image: str,
        ports: list = None,
        desired_count: int = None,
        cpu: int = None,
        memory: int = None,
        enable_execute_command: bool = None,
    ):
        if not name or not isinstance(name, str):
            raise ValueError("Service name must be a non-empty string. Got", name)
        if not image or not isinstance(image, str):
            raise ValueError(f"{name} - image must be a non-empty string. Got", image)
        if desired_count is not None and desired_count < 0:
            raise ValueError(f"{name} - desired count cannot be negative")
        self._name = name
        self._image = image
        self._ports = tuple(ports) if ports else ()
        self._desired_count = desired_count
        self._cpu = cpu
        self._memory = memory
        self._enable_execute_command = enable_execute_command

    @property
    def name(self) -> str:
        return self._name

    @property
    def image(self) -> str:
        return self._image

    @property
    def ports(self) -> tuple:
        return self._ports

    @property
    def port_numbers(self) -> set:
        return {port.port for port in self._ports}

    @property
    def desired_count(self):
        return self._desired_count

    @property
    def cpu(self):
        return self._cpu

    @property
    def memory(self):
        return self._memory

    @property
    def enable_execute_command(self):
        return self._enable_execute_command

    def get_port(self, port_number: int) -> PortDefinition | None:
        """
        Returns the first port definition matching the port number, None if the service does not expose it
        """
        for port in self._ports:
            if port.port == port_number:
                return port
        return None

    def __repr__(self):
        return f"{self.name}({self.image}, {list(self.ports)})"


class CallEdge:
    """
    Declares that the caller service reaches the callee service on the given port.
    Two edges with the same caller, callee and port are equal.
    """

    __slots__ = ("_caller", "_callee", "_port")

    def __init__(self, caller: str, callee: str, port: int):
        self._caller = caller
        self._callee = callee
        self._port = validate_port_number(port)

    @property
    def caller(self) -> str:
        return self._caller

    @property
    def callee(self) -> str:
        return self._callee

    @property
    def port(self) -> int:
        return self._port

    def as_tuple(self) -> tuple:
        return self.caller, self.callee, self.port

    def __eq__(self, other):
        if not isinstance(other, CallEdge):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"{self.caller} -> {self.callee}:{self.port}"


class Topology:
    """
    The topology descriptor: ordered services, call edges and the discovery namespace they share.

    :ivar tuple[ServiceSpec] services:
    :ivar tuple[CallEdge] edges: edges as declared, duplicates included
    :ivar str namespace_name:
    :ivar str namespace_domain:
    :ivar dict defaults: default values for the services settings
    :ivar str log_stream_prefix: prefix of the containers log streams
    """

    default_desired_count = 1
    default_cpu = 512
    default_memory = 2048
    default_enable_execute_command = True
    default_log_stream_prefix = "service"

    def __init__(
        self,
        services: list,
        edges: list,
        namespace_name: str,
        namespace_domain: str = None,
        defaults: dict = None,
        log_stream_prefix: str = None,
    ):
        self.services = tuple(services)
        self.edges = tuple(edges)
        self.namespace_name = namespace_name
        self.namespace_domain = namespace_domain if namespace_domain else namespace_name
        self.defaults = {
            "DesiredCount": self.default_desired_count,
            "Cpu": self.default_cpu,
            "Memory": self.default_memory,
            "EnableExecuteCommand": self.default_enable_execute_command,
        }
        if defaults:
            self.defaults.update(defaults)
        self.log_stream_prefix = (
            log_stream_prefix if log_stream_prefix else self.default_log_stream_prefix
        )
        self._services_map = {}
        for service in self.services:
            if service.name in self._services_map:
                raise DuplicateServiceError(service.name)
            self._services_map[service.name] = service

    @property
    def services_map(self) -> dict:
        return dict(self._services_map)

    def get_service(self, name: str) -> ServiceSpec | None:
        return self._services_map.get(name)
