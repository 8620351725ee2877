# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Console script for ecs_topology.
"""

import argparse
import sys

import yaml
from cfn_flip.yaml_dumper import LongCleanDumper
from jsonschema.exceptions import ValidationError

from ecs_topology import __version__
from ecs_topology.common.files import write_template_file
from ecs_topology.common.logging import LOG, set_log_level
from ecs_topology.common.settings import TopologySettings
from ecs_topology.exceptions import TopologyBaseException
from ecs_topology.topology import TopologyAssembler


class ArgparseHelper(argparse._HelpAction):
    """
    Used to help print top level '--help' arguments from argparse
    when used with subparsers
    """

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        print()
        subparsers_actions = [
            action
            for action in parser._actions
            if isinstance(action, argparse._SubParsersAction)
        ]
        for subparsers_action in subparsers_actions:
            for choice, subparser in list(subparsers_action.choices.items()):
                print(f"Command '{choice}'")
                print(subparser.format_usage())
        parser.exit()


def main_parser():
    """
    Console script for ecs_topology.
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument(
        "-h",
        "--help",
        action=ArgparseHelper,
        help="show this help message and exit",
    )
    cmd_parsers = parser.add_subparsers(
        dest=TopologySettings.command_arg, help="Command to execute."
    )
    base_command_parser = argparse.ArgumentParser(add_help=False)
    files_parser = argparse.ArgumentParser(add_help=False)
    files_parser.add_argument(
        "-f",
        "--topology-file",
        dest=TopologySettings.input_file_arg,
        required=True,
        help="Path to the topology file. Can be set multiple times, later files override earlier ones",
        action="append",
    )
    files_parser.add_argument(
        "--loglevel", type=str, help="Log level. Defaults to INFO", required=False
    )
    base_command_parser.add_argument(
        "-n",
        "--name",
        help="Name of your topology, used as template file name",
        required=True,
        type=str,
        dest=TopologySettings.name_arg,
    )
    base_command_parser.add_argument(
        "-d",
        "--output-dir",
        required=False,
        help="Output directory to write the template to.",
        type=str,
        dest=TopologySettings.output_dir_arg,
        default=TopologySettings.default_output_dir,
    )
    base_command_parser.add_argument(
        "--format",
        help="Defines the format you want to use.",
        type=str,
        dest=TopologySettings.format_arg,
        choices=TopologySettings.allowed_formats,
        default=TopologySettings.default_format,
    )
    for command in TopologySettings.active_commands:
        cmd_parsers.add_parser(
            name=command["name"],
            help=command["help"],
            parents=[base_command_parser, files_parser],
        )
    for command in TopologySettings.validation_commands:
        cmd_parsers.add_parser(
            name=command["name"], help=command["help"], parents=[files_parser]
        )
    for command in TopologySettings.neutral_commands:
        cmd_parsers.add_parser(name=command["name"], help=command["help"])
    return parser


def render(settings: TopologySettings) -> str:
    """
    Assembles the topology of the settings and writes its template

    :param TopologySettings settings:
    :return: path to the template file
    """
    assembler = TopologyAssembler(
        logging_sink=settings.logging_sink, scope=settings.namespace_scope
    )
    result = assembler.assemble(settings.topology)
    for instruction in result.instructions:
        LOG.debug(instruction)
    return write_template_file(
        result.to_template(), settings.output_file_path, settings.format
    )


def main(argv: list = None):
    """
    Main entry point for CLI
    :return: status code
    """
    parser = main_parser()
    if argv is None and len(sys.argv) == 1:
        parser.print_help()
        return 0
    args = parser.parse_args(argv)
    command = getattr(args, TopologySettings.command_arg)
    if command is None:
        parser.print_help()
        return 0
    if command == TopologySettings.version_arg:
        print("ECS Topology", __version__)
        return 0
    if getattr(args, TopologySettings.loglevel_arg, None):
        try:
            set_log_level(args.loglevel)
        except ValueError as error:
            print(error)
    LOG.debug(args)
    try:
        settings = TopologySettings(**vars(args))
        if command == TopologySettings.config_render_arg:
            print(yaml.dump(settings.content, Dumper=LongCleanDumper))
            return 0
        render(settings)
    except (TopologyBaseException, ValidationError, ValueError) as error:
        LOG.error(error)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())  # pragma: no cover
