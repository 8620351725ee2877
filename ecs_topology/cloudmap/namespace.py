#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Registers the private discovery namespace all the services bind to.
"""

from __future__ import annotations

from troposphere import GetAtt, Output, Ref, Sub
from troposphere.servicediscovery import PrivateDnsNamespace

from ecs_topology.common import logical_name
from ecs_topology.common.cfn_params import VPC_ID
from ecs_topology.common.logging import LOG
from ecs_topology.exceptions import NamespaceConflictError

from .cloudmap_params import DOMAIN_NAME_RE, NAMESPACE_ARN_T, NAMESPACE_ID_T, NAMESPACE_T


class Namespace:
    """
    Private DNS namespace of the topology.

    :ivar str name: the namespace name in the topology
    :ivar str domain: DNS domain of the namespace
    :ivar str scope: VPC ID the namespace is attached to, or the VpcId parameter title
    """

    def __init__(self, name: str, domain: str, scope: str):
        self.name = name
        self.domain = domain
        self.scope = scope

    @property
    def logical_name(self) -> str:
        return logical_name(self.name, prefix=NAMESPACE_T)

    def as_tuple(self) -> tuple:
        return self.name, self.domain, self.scope

    def __eq__(self, other):
        if not isinstance(other, Namespace):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"Namespace({self.name}, {self.domain})"


class NamespaceRegistrar:
    """
    Creates the namespace once per name and returns the same one for every later registration.
    """

    def __init__(self):
        self._namespaces: dict = {}

    def register(self, name: str, scope: str, domain: str = None) -> Namespace:
        """
        :param str name: namespace name
        :param str scope: the VPC ID the namespace belongs to, or VPC_ID.title to use the template parameter
        :param str domain: DNS domain. Defaults to the name
        :raises: NamespaceConflictError if name is already registered with another domain or scope
        :raises: ValueError if the domain is not a valid DNS name
        """
        if domain is None:
            domain = name
        if name in self._namespaces:
            existing = self._namespaces[name]
            if existing.domain != domain or existing.scope != scope:
                raise NamespaceConflictError(
                    name, existing, Namespace(name, domain, scope)
                )
            LOG.debug(f"Namespace {name} already registered.")
            return existing
        if not DOMAIN_NAME_RE.match(domain):
            raise ValueError(
                f"Namespace {name} - {domain} is not a valid DNS domain name"
            )
        namespace = Namespace(name, domain, scope)
        self._namespaces[name] = namespace
        LOG.info(f"Registered private namespace {name} ({domain})")
        return namespace

    @property
    def namespaces(self) -> list:
        return list(self._namespaces.values())


def define_namespace(namespace: Namespace) -> PrivateDnsNamespace:
    """
    Creates the CloudMap private DNS namespace in the VPC

    :param Namespace namespace:
    :rtype: troposphere.servicediscovery.PrivateDnsNamespace
    """
    return PrivateDnsNamespace(
        namespace.logical_name,
        Name=namespace.domain,
        Vpc=Ref(VPC_ID) if namespace.scope == VPC_ID.title else namespace.scope,
        Description=Sub(f"{namespace.name} services namespace - ${{AWS::StackName}}"),
    )


def namespace_outputs(namespace: Namespace) -> list:
    return [
        Output(
            f"{namespace.logical_name}{NAMESPACE_ID_T}",
            Value=GetAtt(namespace.logical_name, "Id"),
        ),
        Output(
            f"{namespace.logical_name}{NAMESPACE_ARN_T}",
            Value=GetAtt(namespace.logical_name, "Arn"),
        ),
    ]
