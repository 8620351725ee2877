#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Builds the ECS Task definition of a service.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_topology.services.service_spec import ServiceSpec

from troposphere import AWS_REGION, Ref
from troposphere.ecs import ContainerDefinition, LogConfiguration, PortMapping
from troposphere.ecs import TaskDefinition as EcsTaskDefinition

from ecs_topology.common import logical_name
from ecs_topology.common.cfn_params import EXECUTION_ROLE_ARN, LOG_GROUP_NAME
from ecs_topology.common.logging import LOG
from ecs_topology.ecs.ecs_params import (
    LOG_DRIVER,
    NETWORK_MODE,
    REQUIRES_COMPATIBILITIES,
    TASK_T,
)
from ecs_topology.exceptions import DuplicatePortNameError


class LoggingSink:
    """
    Reference to the log destination the containers write to. The log group itself is not managed here.

    :ivar str log_group: name of the log group. Defaults to the ServicesLogGroup template parameter
    :ivar str stream_prefix: prefix of the log streams
    :ivar str region: region of the log group. Defaults to the stack region
    """

    def __init__(
        self, log_group: str = None, stream_prefix: str = "service", region: str = None
    ):
        self.log_group = log_group
        self.stream_prefix = stream_prefix
        self.region = region

    @property
    def reference(self) -> tuple:
        return (
            self.log_group if self.log_group else LOG_GROUP_NAME.title,
            self.stream_prefix,
        )

    @property
    def log_configuration(self) -> LogConfiguration:
        return LogConfiguration(
            LogDriver=LOG_DRIVER,
            Options={
                "awslogs-group": self.log_group
                if self.log_group
                else Ref(LOG_GROUP_NAME),
                "awslogs-region": self.region if self.region else Ref(AWS_REGION),
                "awslogs-stream-prefix": self.stream_prefix,
            },
        )


class PortBinding:
    """
    One port mapping of the task container
    """

    __slots__ = ("name", "container_port", "protocol")

    def __init__(self, name: str, container_port: int, protocol: str):
        self.name = name
        self.container_port = container_port
        self.protocol = protocol

    def as_tuple(self) -> tuple:
        return self.name, self.container_port, self.protocol

    def __eq__(self, other):
        if not isinstance(other, PortBinding):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        return f"PortBinding{self.as_tuple()}"


class TaskDefinition:
    """
    Description of the runnable container unit of a service

    :ivar str service_name:
    :ivar str image:
    :ivar tuple[PortBinding] port_bindings:
    :ivar LoggingSink logging_sink: shared, referenced only
    :ivar int cpu:
    :ivar int memory:
    """

    def __init__(
        self,
        service_name: str,
        image: str,
        port_bindings: tuple,
        logging_sink: LoggingSink,
        cpu: int,
        memory: int,
    ):
        self.service_name = service_name
        self.image = image
        self.port_bindings = tuple(port_bindings)
        self.logging_sink = logging_sink
        self.cpu = cpu
        self.memory = memory

    @property
    def logical_name(self) -> str:
        return logical_name(self.service_name, suffix=TASK_T)

    def as_tuple(self) -> tuple:
        return (
            self.service_name,
            self.image,
            self.port_bindings,
            self.logging_sink.reference,
            self.cpu,
            self.memory,
        )

    def __repr__(self):
        return f"TaskDefinition({self.service_name}, {self.image}, {list(self.port_bindings)})"


class TaskBuilder:
    """
    Turns a ServiceSpec into a TaskDefinition bound to the logging sink.

    :ivar int default_cpu: CPU units used when the service does not set any
    :ivar int default_memory: Memory (MiB) used when the service does not set any
    """

    def __init__(self, default_cpu: int = 512, default_memory: int = 2048):
        self.default_cpu = default_cpu
        self.default_memory = default_memory

    def build(self, spec: ServiceSpec, logging_sink: LoggingSink) -> TaskDefinition:
        """
        :param ServiceSpec spec: the service to build the task definition for
        :param LoggingSink logging_sink: where the container logs go
        :raises: DuplicatePortNameError
        """
        port_bindings = []
        port_names = set()
        for port in spec.ports:
            if port.name in port_names:
                raise DuplicatePortNameError(spec.name, port.name)
            port_names.add(port.name)
            port_bindings.append(PortBinding(port.name, port.port, port.protocol))
        if not port_bindings:
            LOG.debug(f"{spec.name} - no port exposed")
        return TaskDefinition(
            spec.name,
            spec.image,
            tuple(port_bindings),
            logging_sink,
            cpu=spec.cpu if spec.cpu is not None else self.default_cpu,
            memory=spec.memory if spec.memory is not None else self.default_memory,
        )


def generate_port_mappings(task: TaskDefinition) -> list[PortMapping]:
    """
    Generates the named port mappings of the container. In awsvpc mode only the container port is set.
    """
    return [
        PortMapping(
            Name=binding.name,
            ContainerPort=binding.container_port,
            Protocol=binding.protocol,
        )
        for binding in task.port_bindings
    ]


def generate_task_definition(task: TaskDefinition) -> EcsTaskDefinition:
    """
    Function to generate the ECS Task definition with its single container definition

    :param TaskDefinition task:
    :rtype: troposphere.ecs.TaskDefinition
    """
    container = ContainerDefinition(
        Name=task.service_name,
        Image=task.image,
        Essential=True,
        PortMappings=generate_port_mappings(task),
        LogConfiguration=task.logging_sink.log_configuration,
    )
    return EcsTaskDefinition(
        task.logical_name,
        Family=task.service_name,
        Cpu=str(task.cpu),
        Memory=str(task.memory),
        NetworkMode=NETWORK_MODE,
        RequiresCompatibilities=REQUIRES_COMPATIBILITIES,
        ExecutionRoleArn=Ref(EXECUTION_ROLE_ARN),
        ContainerDefinitions=[container],
    )
