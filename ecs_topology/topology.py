#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Main module to assemble the topology into ordered creation instructions and render them as a CFN template.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ecs_topology.services.service_spec import Topology

from troposphere import Template

from ecs_topology.cloudmap.namespace import Namespace, NamespaceRegistrar
from ecs_topology.common import logical_name
from ecs_topology.common.cfn_params import EXTERNAL_PARAMETERS, VPC_ID
from ecs_topology.common.logging import LOG
from ecs_topology.common.troposphere_tools import (
    add_outputs,
    add_resource,
    build_template,
)
from ecs_topology.ecs.service_instance import ServiceInstantiator
from ecs_topology.ecs.task_builder import LoggingSink, TaskBuilder
from ecs_topology.ingress.allow_rules import NetworkPolicyDeriver
from ecs_topology.instructions import (
    CreateNamespace,
    CreateService,
    CreateTaskDefinition,
    DeclareAllowRule,
    Instruction,
)
from ecs_topology.ordering import DependencyOrderer


class AssemblyResult:
    """
    Outcome of the topology assembly

    :ivar Namespace namespace: the one namespace of the topology
    :ivar list[ServiceInstance] instances: in the services declaration order
    :ivar frozenset[AllowRule] rules:
    :ivar list[Instruction] instructions: in creation order
    """

    def __init__(self, namespace: Namespace, instances: list, rules, instructions: list):
        self.namespace = namespace
        self.instances = instances
        self.rules = rules
        self.instructions = instructions

    @property
    def creation_order(self) -> list:
        return [instruction.step for instruction in self.instructions]

    def to_template(self, description: str = None) -> Template:
        """
        Renders the instructions into a CloudFormation template, with the external collaborators as parameters.
        Every resource is added in creation order.
        """
        template = build_template(
            description
            if description
            else f"ECS services of the {self.namespace.name} namespace",
            EXTERNAL_PARAMETERS,
        )
        for instruction in self.instructions:
            for resource in instruction.resources():
                add_resource(template, resource)
            add_outputs(template, instruction.outputs())
        return template


class TopologyAssembler:
    """
    Composes the builder, registrar, instantiator, deriver and orderer.
    Nothing is emitted unless the whole topology is valid.

    :ivar LoggingSink logging_sink: shared by all the task definitions
    :ivar str scope: VPC identifier the namespace is created into
    """

    def __init__(
        self,
        logging_sink: LoggingSink = None,
        scope: str = None,
        task_builder: TaskBuilder = None,
        instantiator: ServiceInstantiator = None,
        deriver: NetworkPolicyDeriver = None,
        orderer: DependencyOrderer = None,
    ):
        self.logging_sink = logging_sink
        self.scope = scope if scope else VPC_ID.title
        self.task_builder = task_builder
        self.instantiator = instantiator
        self.deriver = deriver if deriver else NetworkPolicyDeriver()
        self.orderer = orderer if orderer else DependencyOrderer()

    def assemble(self, topology: Topology) -> AssemblyResult:
        """
        :param Topology topology: the services and call edges
        :rtype: AssemblyResult
        :raises: TopologyBaseException
        """
        logging_sink = (
            self.logging_sink
            if self.logging_sink
            else LoggingSink(stream_prefix=topology.log_stream_prefix)
        )
        task_builder = (
            self.task_builder
            if self.task_builder
            else TaskBuilder(topology.defaults["Cpu"], topology.defaults["Memory"])
        )
        instantiator = (
            self.instantiator
            if self.instantiator
            else ServiceInstantiator(
                topology.defaults["DesiredCount"],
                topology.defaults["EnableExecuteCommand"],
            )
        )
        validate_logical_names(topology)

        registrar = NamespaceRegistrar()
        namespace = registrar.register(
            topology.namespace_name, self.scope, topology.namespace_domain
        )
        published_ports = self.deriver.published_ports(
            topology.edges, topology.services
        )
        steps: list[Instruction] = [CreateNamespace(namespace)]
        instances = []
        for spec in topology.services:
            task_definition = task_builder.build(spec, logging_sink)
            instance = instantiator.instantiate(
                spec,
                task_definition,
                registrar.register(
                    topology.namespace_name, self.scope, topology.namespace_domain
                ),
                published_ports=published_ports[spec.name],
            )
            instances.append(instance)
            steps.append(CreateTaskDefinition(task_definition))
            steps.append(CreateService(instance))

        rules = self.deriver.derive(topology.edges, topology.services)
        steps += sorted(
            (DeclareAllowRule(rule) for rule in rules),
            key=lambda instruction: instruction.step,
        )
        instructions = self.order_instructions(steps)
        LOG.info(
            f"{namespace.name} - {len(instances)} services, {len(rules)} allow rules, "
            f"{len(instructions)} instructions"
        )
        return AssemblyResult(namespace, instances, rules, instructions)

    def order_instructions(self, steps: list) -> list:
        """
        Orders the instructions with their declared dependencies

        :param list[Instruction] steps:
        :rtype: list[Instruction]
        """
        by_step = {}
        for instruction in steps:
            if instruction.step in by_step:
                raise ValueError(f"Creation step {instruction.step} is defined twice")
            by_step[instruction.step] = instruction
        edges = [
            (dependency, instruction.step)
            for instruction in steps
            for dependency in instruction.depends_on
        ]
        ordered = self.orderer.order(list(by_step.keys()), edges)
        for step in ordered:
            LOG.debug(f"{step} - {by_step[step]}")
        return [by_step[step] for step in ordered]


def validate_logical_names(topology: Topology) -> None:
    """
    Two different service names can end up with the same CFN logical name (i.e. yelb-ui and yelb_ui)

    :raises: ValueError
    """
    names = {}
    for spec in topology.services:
        title = logical_name(spec.name)
        if title in names:
            raise ValueError(
                f"Services {names[title]} and {spec.name} have the same logical name {title}"
            )
        names[title] = spec.name


def generate_template(topology: Topology, **kwargs) -> Template:
    """
    Assembles the topology and renders its template

    :param Topology topology:
    :param kwargs: TopologyAssembler arguments
    :rtype: troposphere.Template
    """
    result = TopologyAssembler(**kwargs).assemble(topology)
    return result.to_template()
