#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from os import path

from behave import given, then
from pytest import raises

from ecs_topology import exceptions
from ecs_topology.common.files import render_template_body
from ecs_topology.common.settings import TopologySettings
from ecs_topology.instructions import CreateNamespace, CreateService
from ecs_topology.services.service_spec import CallEdge, Topology
from ecs_topology.topology import TopologyAssembler


def here():
    return path.abspath(path.dirname(__file__))


def use_case_path(file_path: str) -> str:
    return path.abspath(f"{here()}/../../../{file_path}")


def assemble(context):
    return TopologyAssembler(
        logging_sink=context.settings.logging_sink,
        scope=context.settings.namespace_scope,
    ).assemble(context.settings.topology)


@given("I use {file_path} as my topology file")
def step_impl(context, file_path):
    """
    Function to import the topology file from use-cases.

    :param context:
    :param str file_path:
    :return:
    """
    context.settings = TopologySettings(
        **{
            TopologySettings.name_arg: "test",
            TopologySettings.command_arg: TopologySettings.render_arg,
            TopologySettings.input_file_arg: [use_case_path(file_path)],
            TopologySettings.format_arg: "yaml",
        },
    )


@given("I use {file_path} as my topology file and {override_file} as override file")
def step_impl(context, file_path, override_file):
    context.settings = TopologySettings(
        **{
            TopologySettings.name_arg: "test",
            TopologySettings.command_arg: TopologySettings.render_arg,
            TopologySettings.input_file_arg: [
                use_case_path(file_path),
                use_case_path(override_file),
            ],
            TopologySettings.format_arg: "yaml",
        },
    )


@given("{caller} calls {callee} on port {port:d}")
def step_impl(context, caller, callee, port):
    topology = context.settings.topology
    context.settings.topology = Topology(
        topology.services,
        list(topology.edges) + [CallEdge(caller, callee, port)],
        topology.namespace_name,
        namespace_domain=topology.namespace_domain,
        defaults=topology.defaults,
        log_stream_prefix=topology.log_stream_prefix,
    )


@then("I render the topology into {count:d} instructions")
def step_impl(context, count):
    context.result = assemble(context)
    assert len(context.result.instructions) == count


@then("the namespace is created before every service")
def step_impl(context):
    instructions = context.result.instructions
    assert isinstance(instructions[0], CreateNamespace)
    namespace_step = instructions[0].step
    assert (
        len([step for step in instructions if isinstance(step, CreateNamespace)]) == 1
    )
    for instruction in instructions:
        if isinstance(instruction, CreateService):
            assert namespace_step in instruction.depends_on


@then("I render the CFN template")
def step_impl(context):
    template = context.result.to_template()
    assert render_template_body(template, context.settings.format)


@then("the assembly fails with {error_name}")
def step_impl(context, error_name):
    with raises(getattr(exceptions, error_name)):
        assemble(context)
