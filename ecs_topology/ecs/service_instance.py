#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions and classes to instantiate the ECS Service of a task definition, bound to the discovery namespace.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_topology.cloudmap.namespace import Namespace
    from ecs_topology.ecs.task_builder import TaskDefinition
    from ecs_topology.services.service_spec import ServiceSpec

from troposphere import GetAtt, Output, Ref, Sub, Tags
from troposphere.ec2 import SecurityGroup
from troposphere.ecs import (
    AwsvpcConfiguration,
    DeploymentCircuitBreaker,
    DeploymentConfiguration,
    NetworkConfiguration,
)
from troposphere.ecs import Service as EcsService
from troposphere.ecs import (
    ServiceConnectClientAlias,
    ServiceConnectConfiguration,
    ServiceConnectService,
)

from ecs_topology.common import logical_name
from ecs_topology.common.cfn_params import APP_SUBNETS, CLUSTER_NAME, VPC_ID
from ecs_topology.common.logging import LOG
from ecs_topology.ecs.ecs_params import (
    LAUNCH_TYPE,
    SERVICE_GROUP_ID_T,
    SERVICE_T,
    SG_T,
)


class ServiceInstance:
    """
    An ECS Service running the task definition of a ServiceSpec, bound to the namespace.

    :ivar ServiceSpec spec:
    :ivar TaskDefinition task_definition: owned exclusively by this instance
    :ivar Namespace namespace: shared, read only
    :ivar int desired_count:
    :ivar tuple[PortDefinition] published_ports: ports advertised in the namespace
    :ivar bool enable_execute_command:
    """

    def __init__(
        self,
        spec: ServiceSpec,
        task_definition: TaskDefinition,
        namespace: Namespace,
        desired_count: int,
        published_ports: tuple = None,
        enable_execute_command: bool = True,
    ):
        self.spec = spec
        self.task_definition = task_definition
        self.namespace = namespace
        self.desired_count = desired_count
        self.published_ports = tuple(published_ports) if published_ports else ()
        self.enable_execute_command = enable_execute_command

    @property
    def name(self) -> str:
        return self.spec.name

    @property
    def logical_name(self) -> str:
        return logical_name(self.name, suffix=SERVICE_T)

    @property
    def security_group_logical_name(self) -> str:
        return logical_name(self.name, suffix=SG_T)

    @property
    def depends_on(self) -> list:
        """
        Resources that must exist before the service can be created. The namespace always comes first.
        """
        return [self.namespace.logical_name, self.task_definition.logical_name]

    def as_tuple(self) -> tuple:
        return (
            self.name,
            self.task_definition.as_tuple(),
            self.namespace.as_tuple(),
            self.desired_count,
            self.published_ports,
            self.enable_execute_command,
        )

    def __repr__(self):
        return f"ServiceInstance({self.name}, {self.namespace.name}, {self.desired_count})"


class ServiceInstantiator:
    """
    Creates the ServiceInstance of each service, bound to the one namespace of the topology
    """

    def __init__(self, default_desired_count: int = 1, enable_execute_command=True):
        self.default_desired_count = default_desired_count
        self.enable_execute_command = enable_execute_command

    def instantiate(
        self,
        spec: ServiceSpec,
        task_definition: TaskDefinition,
        namespace: Namespace,
        desired_count: int = None,
        published_ports: tuple = None,
    ) -> ServiceInstance:
        """
        :param ServiceSpec spec:
        :param TaskDefinition task_definition: the task definition built for that spec
        :param Namespace namespace: the registered namespace
        :param int desired_count: override for the service spec and default desired count
        :param tuple published_ports: ports of the service called by other services
        :raises: ValueError if the task definition belongs to another service, or if there is no namespace
        """
        if namespace is None:
            raise ValueError(f"{spec.name} - cannot be instantiated without a namespace")
        if task_definition.service_name != spec.name:
            raise ValueError(
                f"{spec.name} - task definition belongs to {task_definition.service_name}"
            )
        if desired_count is None:
            desired_count = (
                spec.desired_count
                if spec.desired_count is not None
                else self.default_desired_count
            )
        enable_execute_command = (
            spec.enable_execute_command
            if spec.enable_execute_command is not None
            else self.enable_execute_command
        )
        for port in published_ports or ():
            if port not in spec.ports:
                raise ValueError(f"{spec.name} - does not expose {port}")
        instance = ServiceInstance(
            spec,
            task_definition,
            namespace,
            desired_count,
            published_ports=published_ports,
            enable_execute_command=enable_execute_command,
        )
        LOG.debug(f"{instance} depends on {instance.depends_on}")
        return instance


def define_service_connect(instance: ServiceInstance) -> ServiceConnectConfiguration:
    """
    Service Connect configuration. Every service is a client of the namespace. Only the published ports
    are advertised, with the port name as DNS name.
    """
    services = [
        ServiceConnectService(
            PortName=port.name,
            DiscoveryName=port.name,
            ClientAliases=[ServiceConnectClientAlias(DnsName=port.name, Port=port.port)],
        )
        for port in instance.published_ports
    ]
    props = {
        "Enabled": True,
        "Namespace": GetAtt(instance.namespace.logical_name, "Arn"),
    }
    if services:
        props["Services"] = services
    return ServiceConnectConfiguration(**props)


def define_security_group(instance: ServiceInstance) -> SecurityGroup:
    """
    The security boundary of the service. No ingress is allowed until the allow rules are declared.
    """
    return SecurityGroup(
        instance.security_group_logical_name,
        GroupDescription=Sub(f"{instance.name} service - ${{AWS::StackName}}"),
        VpcId=Ref(VPC_ID),
        Tags=Tags(Name=Sub(f"${{AWS::StackName}}-{instance.name}")),
    )


def define_service(instance: ServiceInstance) -> EcsService:
    """
    Function to generate the ECS Service definition, with its explicit DependsOn on the namespace

    :param ServiceInstance instance:
    :rtype: troposphere.ecs.Service
    """
    return EcsService(
        instance.logical_name,
        DependsOn=instance.depends_on + [instance.security_group_logical_name],
        Cluster=Ref(CLUSTER_NAME),
        ServiceName=instance.name,
        TaskDefinition=Ref(instance.task_definition.logical_name),
        DesiredCount=instance.desired_count,
        LaunchType=LAUNCH_TYPE,
        EnableExecuteCommand=instance.enable_execute_command,
        DeploymentConfiguration=DeploymentConfiguration(
            DeploymentCircuitBreaker=DeploymentCircuitBreaker(
                Enable=True, Rollback=True
            ),
        ),
        NetworkConfiguration=NetworkConfiguration(
            AwsvpcConfiguration=AwsvpcConfiguration(
                Subnets=Ref(APP_SUBNETS),
                SecurityGroups=[
                    GetAtt(instance.security_group_logical_name, SERVICE_GROUP_ID_T)
                ],
                AssignPublicIp="DISABLED",
            )
        ),
        ServiceConnectConfiguration=define_service_connect(instance),
    )


def service_outputs(instance: ServiceInstance) -> list:
    return [
        Output(
            f"{instance.security_group_logical_name}{SERVICE_GROUP_ID_T}",
            Value=GetAtt(instance.security_group_logical_name, SERVICE_GROUP_ID_T),
        )
    ]
