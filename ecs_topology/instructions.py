#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Resource creation instructions handed over to the provisioning engine (AWS CloudFormation).
Each instruction declares the steps it depends on, the engine is free to run anything else in parallel.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_topology.cloudmap.namespace import Namespace
    from ecs_topology.ecs.service_instance import ServiceInstance
    from ecs_topology.ecs.task_builder import TaskDefinition
    from ecs_topology.ingress.allow_rules import AllowRule

from ecs_topology.cloudmap.namespace import define_namespace, namespace_outputs
from ecs_topology.common import logical_name
from ecs_topology.ecs.ecs_params import SERVICE_T
from ecs_topology.ecs.service_instance import (
    define_security_group,
    define_service,
    service_outputs,
)
from ecs_topology.ecs.task_builder import generate_task_definition
from ecs_topology.ingress.allow_rules import define_ingress


class Instruction:
    """
    Top class for the creation instructions

    :cvar str kind: the instruction name
    :ivar str step: unique identifier of the creation step, the logical name of the main resource
    :ivar list depends_on: steps that must be completed before this one
    """

    kind = None

    def __init__(self, step: str, depends_on: list = None):
        self.step = step
        self.depends_on = list(depends_on) if depends_on else []

    @property
    def arguments(self) -> tuple:
        raise NotImplementedError

    def resources(self) -> list:
        raise NotImplementedError

    def outputs(self) -> list:
        return []

    def as_tuple(self) -> tuple:
        return self.kind, self.step, self.arguments, tuple(self.depends_on)

    def __eq__(self, other):
        if not isinstance(other, Instruction):
            return NotImplemented
        return self.as_tuple() == other.as_tuple()

    def __hash__(self):
        return hash(self.as_tuple())

    def __repr__(self):
        depends = f" dependsOn({', '.join(self.depends_on)})" if self.depends_on else ""
        return f"{self.kind}{self.arguments}{depends}"


class CreateNamespace(Instruction):
    kind = "createNamespace"

    def __init__(self, namespace: Namespace):
        super().__init__(namespace.logical_name)
        self.namespace = namespace

    @property
    def arguments(self) -> tuple:
        return self.namespace.name, self.namespace.domain

    def resources(self) -> list:
        return [define_namespace(self.namespace)]

    def outputs(self) -> list:
        return namespace_outputs(self.namespace)


class CreateTaskDefinition(Instruction):
    kind = "createTaskDefinition"

    def __init__(self, task_definition: TaskDefinition):
        super().__init__(task_definition.logical_name)
        self.task_definition = task_definition

    @property
    def arguments(self) -> tuple:
        return (
            self.task_definition.service_name,
            self.task_definition.image,
            tuple(
                binding.as_tuple() for binding in self.task_definition.port_bindings
            ),
            self.task_definition.logging_sink.reference,
        )

    def resources(self) -> list:
        return [generate_task_definition(self.task_definition)]


class CreateService(Instruction):
    """
    Creates the service security group and the ECS Service. Always depends on the namespace.
    """

    kind = "createService"

    def __init__(self, instance: ServiceInstance):
        super().__init__(instance.logical_name, instance.depends_on)
        self.instance = instance

    @property
    def arguments(self) -> tuple:
        return (
            self.instance.name,
            self.instance.task_definition.logical_name,
            self.instance.namespace.logical_name,
            self.instance.desired_count,
        )

    def resources(self) -> list:
        return [define_security_group(self.instance), define_service(self.instance)]

    def outputs(self) -> list:
        return service_outputs(self.instance)


class DeclareAllowRule(Instruction):
    """
    Allows traffic between two existing services. Depends on both services.
    """

    kind = "declareAllowRule"

    def __init__(self, rule: AllowRule):
        super().__init__(
            rule.logical_name,
            dict.fromkeys(
                [
                    logical_name(rule.from_service, suffix=SERVICE_T),
                    logical_name(rule.to_service, suffix=SERVICE_T),
                ]
            ),
        )
        self.rule = rule

    @property
    def arguments(self) -> tuple:
        return self.rule.from_service, self.rule.to_service, self.rule.port

    def resources(self) -> list:
        return [define_ingress(self.rule)]
