#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to manipulate troposphere templates
"""

from __future__ import annotations

from troposphere import AWSObject, Output, Template

from ecs_topology.common.cfn_params import Parameter
from ecs_topology.common.logging import LOG


def build_template(description: str = None, parameters: list = None) -> Template:
    """
    Function to build the template with the AWSTemplateFormatVersion and parameters interface metadata.

    :param str description: Description for the template
    :param list parameters: List of parameters to add to the template
    :return: the template
    :rtype: troposphere.Template
    """
    template = Template(
        Description=description
        if description
        else "Template generated by ecs-topology"
    )
    template.set_version()
    if parameters:
        add_parameters(template, parameters)
    return template


def add_parameters(template: Template, parameters: list) -> None:
    """
    Adds the parameters to the template and groups them in the console interface metadata

    :param troposphere.Template template:
    :param list[Parameter] parameters:
    """
    for parameter in parameters:
        if parameter.title in template.parameters:
            LOG.debug(f"Parameter {parameter.title} already in template.")
            continue
        template.add_parameter(parameter)
        if isinstance(parameter, Parameter):
            add_parameter_to_interface(template, parameter)


def add_parameter_to_interface(template: Template, parameter: Parameter) -> None:
    """
    Adds the parameter to the AWS::CloudFormation::Interface metadata, in its group_label group.
    """
    interface = template.metadata.setdefault(
        "AWS::CloudFormation::Interface",
        {"ParameterGroups": [], "ParameterLabels": {}},
    )
    for group in interface["ParameterGroups"]:
        if group["Label"]["default"] == parameter.group_label:
            group["Parameters"].append(parameter.title)
            break
    else:
        interface["ParameterGroups"].append(
            {
                "Label": {"default": parameter.group_label},
                "Parameters": [parameter.title],
            }
        )
    if parameter.label:
        interface["ParameterLabels"][parameter.title] = {"default": parameter.label}


def add_resource(template: Template, resource: AWSObject, replace=False) -> AWSObject:
    """
    Function to add resource to template if the resource does not already exist

    :param troposphere.Template template:
    :param troposphere.AWSObject resource:
    :param bool replace: Whether to replace an existing resource with the same title
    :raises: KeyError if the title already exists and replace is False
    """
    if resource.title not in template.resources:
        template.add_resource(resource)
    elif replace:
        template.resources[resource.title] = resource
    else:
        raise KeyError(f"Resource {resource.title} already exists in template")
    return resource


def add_outputs(template: Template, outputs: list[Output]) -> None:
    """
    Adds the outputs to the template, skipping the ones already present
    """
    for output in outputs:
        if output.title in template.outputs:
            LOG.debug(f"Output {output.title} already in template.")
            continue
        template.add_output(output)
