# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for the TopologySettings class, which loads and validates the topology descriptor files.
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime as dt

import jsonschema
import yaml
from compose_x_common.compose_x_common import keyisset, set_else_none

from ecs_topology.common.envsubst import expand_content
from ecs_topology.common.logging import LOG
from ecs_topology.ecs.task_builder import LoggingSink
from ecs_topology.services.service_spec import (
    CallEdge,
    PortDefinition,
    ServiceSpec,
    Topology,
)
from ecs_topology.specs import TOPOLOGY_SPEC_FILE, load_topology_spec

SERVICES_KEY = "Services"
CALLS_KEY = "Calls"
NAMESPACE_KEY = "Namespace"
LOGGING_KEY = "Logging"
DEFAULTS_KEY = "Defaults"


def load_topology_file(file_path: str) -> dict:
    """
    Loads the YAML/JSON content of a topology file

    :param str file_path:
    :rtype: dict
    :raises: ValueError if the file content is not a mapping
    """
    with open(file_path, encoding="utf-8") as file_fd:
        content = yaml.safe_load(file_fd.read())
    if not isinstance(content, dict):
        raise ValueError(
            f"{file_path} - the topology must be a mapping. Got", type(content)
        )
    return content


def merge_services(existing: list, new: list) -> list:
    """
    Services of the override files replace the settings of the services with the same name, new ones are added.
    """
    merged = deepcopy(existing)
    positions = {service.get("Name"): index for index, service in enumerate(merged)}
    for service in new:
        name = service.get("Name")
        if name in positions:
            merged[positions[name]].update(deepcopy(service))
        else:
            positions[name] = len(merged)
            merged.append(deepcopy(service))
    return merged


def merge_topology_content(files_content: list) -> dict:
    """
    Merges the content of the topology files, in order. Top level keys are overridden,
    except Services that are merged by name and Calls that are concatenated.

    :param list[dict] files_content:
    :rtype: dict
    """
    merged = {}
    for content in files_content:
        for key, value in content.items():
            if key == SERVICES_KEY and keyisset(key, merged):
                merged[key] = merge_services(merged[key], value)
            elif key == CALLS_KEY and keyisset(key, merged):
                merged[key] = merged[key] + deepcopy(value)
            elif isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key].update(deepcopy(value))
            else:
                merged[key] = deepcopy(value)
    return merged


def validate_topology_content(content: dict) -> None:
    """
    Validates the content against the topology JSON schema

    :raises: jsonschema.ValidationError
    """
    LOG.debug(f"Validating against input schema {TOPOLOGY_SPEC_FILE}")
    jsonschema.validate(content, load_topology_spec())


def define_service_spec(definition: dict) -> ServiceSpec:
    ports = [
        PortDefinition(
            port["Name"], port["Port"], set_else_none("Protocol", port, "tcp")
        )
        for port in set_else_none("Ports", definition, [])
    ]
    return ServiceSpec(
        definition["Name"],
        definition["Image"],
        ports,
        desired_count=definition.get("DesiredCount"),
        cpu=set_else_none("Cpu", definition),
        memory=set_else_none("Memory", definition),
        enable_execute_command=definition.get("EnableExecuteCommand"),
    )


def define_topology(content: dict) -> Topology:
    """
    Creates the Topology from the validated content

    :param dict content:
    :rtype: Topology
    """
    services = [define_service_spec(service) for service in content[SERVICES_KEY]]
    edges = [
        CallEdge(call["From"], call["To"], call["Port"])
        for call in set_else_none(CALLS_KEY, content, [])
    ]
    namespace = content[NAMESPACE_KEY]
    logging_config = set_else_none(LOGGING_KEY, content, {})
    return Topology(
        services,
        edges,
        namespace["Name"],
        namespace_domain=set_else_none("Domain", namespace),
        defaults=set_else_none(DEFAULTS_KEY, content, {}),
        log_stream_prefix=set_else_none("StreamPrefix", logging_config),
    )


class TopologySettings:
    """
    Class to handle the execution settings of ecs-topology: input files, output and the loaded topology.

    :ivar dict content: the merged, interpolated and validated topology content
    :ivar Topology topology:
    """

    name_arg = "Name"
    input_file_arg = "TopologyFile"
    output_dir_arg = "OutputDirectory"
    format_arg = "TemplateFormat"
    command_arg = "command"
    loglevel_arg = "loglevel"

    render_arg = "render"
    config_render_arg = "config"
    version_arg = "version"

    default_format = "json"
    allowed_formats = ["json", "yaml"]
    default_output_dir = f"/tmp/{int(dt.now().timestamp())}"

    active_commands = [
        {
            "name": render_arg,
            "help": "Assembles the topology and writes the CFN template locally",
        },
    ]
    validation_commands = [
        {
            "name": config_render_arg,
            "help": "Merges the topology files and prints the final, interpolated, content",
        }
    ]
    neutral_commands = [{"name": version_arg, "help": "ECS Topology Version"}]

    def __init__(self, content: dict = None, **kwargs):
        """
        :param dict content: topology content, used instead of / merged after the input files
        :param dict kwargs: CLI arguments
        """
        self.name = set_else_none(self.name_arg, kwargs, "topology")
        self.command = set_else_none(self.command_arg, kwargs, self.render_arg)
        self.format = set_else_none(self.format_arg, kwargs, self.default_format)
        if self.format not in self.allowed_formats:
            raise ValueError(
                f"Format {self.format} is not supported. Use one of {self.allowed_formats}"
            )
        self.output_dir = set_else_none(
            self.output_dir_arg, kwargs, self.default_output_dir
        )
        self.input_files = set_else_none(self.input_file_arg, kwargs, [])
        if isinstance(self.input_files, str):
            self.input_files = [self.input_files]
        self.content = {}
        self.topology = None
        self.set_content(content)

    def set_content(self, content: dict = None) -> None:
        """
        Loads the input files, merges them with content, expands env vars and validates the result
        """
        LOG.debug(f"Input files: {self.input_files}")
        files_content = [load_topology_file(file_path) for file_path in self.input_files]
        if content:
            files_content.append(content)
        if not files_content:
            raise ValueError("No topology file or content provided")
        self.content = expand_content(merge_topology_content(files_content))
        validate_topology_content(self.content)
        self.topology = define_topology(self.content)

    @property
    def logging_sink(self) -> LoggingSink:
        logging_config = set_else_none(LOGGING_KEY, self.content, {})
        return LoggingSink(
            log_group=set_else_none("LogGroupName", logging_config),
            stream_prefix=self.topology.log_stream_prefix,
            region=set_else_none("Region", logging_config),
        )

    @property
    def namespace_scope(self):
        return set_else_none("VpcId", self.content[NAMESPACE_KEY])

    @property
    def output_file_path(self) -> str:
        return f"{self.output_dir}/{self.name}.{self.format}"

    def __repr__(self):
        return f"TopologySettings({self.name}, {self.input_files}, {self.format})"
