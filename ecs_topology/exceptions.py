#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Custom exceptions for ecs-topology.

All of them are raised while assembling the topology, before any instruction is emitted.
"""


class TopologyBaseException(Exception):
    """
    Top class for ECS Topology Exceptions
    """

    def __init__(self, msg, *args):
        super().__init__(msg, *args)


class DuplicatePortNameError(TopologyBaseException):
    """
    Two ports of the same service share the same name
    """

    def __init__(self, service_name: str, port_name: str):
        self.service_name = service_name
        self.port_name = port_name
        super().__init__(
            f"{service_name} - port name {port_name} is declared more than once"
        )


class UnknownCalleePortError(TopologyBaseException):
    """
    A call edge targets a port the callee does not expose
    """

    def __init__(self, caller: str, callee: str, port: int):
        self.caller = caller
        self.callee = callee
        self.port = port
        super().__init__(
            f"{caller} -> {callee} - {callee} does not expose port {port}"
        )


class UnknownServiceError(TopologyBaseException):
    """
    A call edge references a service that is not declared in the topology
    """

    def __init__(self, service_name: str, edge=None):
        self.service_name = service_name
        self.edge = edge
        super().__init__(f"Service {service_name} is not defined", edge)


class DuplicateServiceError(TopologyBaseException):
    """
    Two services are declared with the same name
    """

    def __init__(self, service_name: str):
        self.service_name = service_name
        super().__init__(f"Service {service_name} is declared more than once")


class CycleError(TopologyBaseException):
    """
    The creation steps dependencies cannot be ordered
    """

    def __init__(self, nodes: list):
        self.nodes = nodes
        super().__init__(
            "Circular dependency between " + ", ".join(str(node) for node in nodes)
        )


class NamespaceConflictError(TopologyBaseException):
    """
    A namespace name is registered twice with different definitions
    """

    def __init__(self, name: str, existing, requested):
        self.name = name
        self.existing = existing
        self.requested = requested
        super().__init__(
            f"Namespace {name} is already registered as {existing}. Got {requested}"
        )
