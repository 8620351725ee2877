#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Derives the network allow rules between services from the declared call edges.
Only the reachability implied by the call edges is allowed, nothing else.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_topology.services.service_spec import CallEdge, ServiceSpec

from troposphere import AWS_ACCOUNT_ID, GetAtt, Ref
from troposphere.ec2 import SecurityGroupIngress

from ecs_topology.common import logical_name
from ecs_topology.common.logging import LOG
from ecs_topology.ecs.ecs_params import SERVICE_GROUP_ID_T, SG_T
from ecs_topology.exceptions import UnknownCalleePortError, UnknownServiceError


class AllowRule:
    """
    Allows the from_service security group to reach the to_service security group on port.
    Rules are equal when from_service, to_service and port are equal.
    """

    __slots__ = ("_from_service", "_to_service", "_port", "_protocol")

    def __init__(
        self, from_service: str, to_service: str, port: int, protocol: str = "tcp"
    ):
        self._from_service = from_service
        self._to_service = to_service
        self._port = port
        self._protocol = protocol

    @property
    def from_service(self) -> str:
        return self._from_service

    @property
    def to_service(self) -> str:
        return self._to_service

    @property
    def port(self) -> int:
        return self._port

    @property
    def protocol(self) -> str:
        return self._protocol

    @property
    def logical_name(self) -> str:
        return (
            f"From{logical_name(self.from_service)}To{logical_name(self.to_service)}"
            f"On{self.port}{self.protocol.title()}"
        )

    def as_tuple(self) -> tuple:
        return self.from_service, self.to_service, self.port

    def __eq__(self, other):
        if not isinstance(other, AllowRule):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"AllowRule{self.as_tuple()}"


def map_services(services) -> dict:
    if isinstance(services, dict):
        return services
    return {service.name: service for service in services}


def get_callee_port(edge: CallEdge, services_map: dict):
    """
    Validates both ends of the edge are declared and returns the callee port definition for the edge

    :raises: UnknownServiceError
    :raises: UnknownCalleePortError
    """
    for service_name in (edge.caller, edge.callee):
        if service_name not in services_map:
            raise UnknownServiceError(service_name, edge)
    callee_port = services_map[edge.callee].get_port(edge.port)
    if callee_port is None:
        raise UnknownCalleePortError(edge.caller, edge.callee, edge.port)
    return callee_port


class NetworkPolicyDeriver:
    """
    Walks the call edges and emits the de-duplicated set of allow rules.
    """

    def derive(self, edges, services) -> frozenset:
        """
        :param edges: the call edges. Duplicates are allowed
        :param services: the services of the topology, as an iterable or a name to ServiceSpec mapping
        :return: the set of AllowRule
        :rtype: frozenset[AllowRule]
        :raises: UnknownServiceError, UnknownCalleePortError
        """
        services_map = map_services(services)
        rules = set()
        for edge in edges:
            callee_port = get_callee_port(edge, services_map)
            rule = AllowRule(edge.caller, edge.callee, edge.port, callee_port.protocol)
            if rule in rules:
                LOG.debug(f"{edge} - duplicate call edge, rule already set")
                continue
            rules.add(rule)
        return frozenset(rules)

    def published_ports(self, edges, services) -> dict:
        """
        Ports of each service reached by at least one call edge, in the service ports order.
        Services nobody calls map to an empty tuple.

        :rtype: dict[str, tuple]
        """
        services_map = map_services(services)
        called = {service_name: set() for service_name in services_map}
        for edge in edges:
            callee_port = get_callee_port(edge, services_map)
            called[edge.callee].add(callee_port)
        return {
            name: tuple(port for port in service.ports if port in called[name])
            for name, service in services_map.items()
        }


def define_ingress(rule: AllowRule) -> SecurityGroupIngress:
    """
    Creates the ingress rule from the caller security group into the callee security group
    """
    source_sg = logical_name(rule.from_service, suffix=SG_T)
    target_sg = logical_name(rule.to_service, suffix=SG_T)
    return SecurityGroupIngress(
        rule.logical_name,
        DependsOn=list(dict.fromkeys([source_sg, target_sg])),
        GroupId=GetAtt(target_sg, SERVICE_GROUP_ID_T),
        SourceSecurityGroupId=GetAtt(source_sg, SERVICE_GROUP_ID_T),
        SourceSecurityGroupOwnerId=Ref(AWS_ACCOUNT_ID),
        IpProtocol=rule.protocol,
        FromPort=rule.port,
        ToPort=rule.port,
        Description=f"From {rule.from_service} to {rule.to_service} on port {rule.port}/{rule.protocol}",
    )
