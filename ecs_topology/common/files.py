#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Functions to write the rendered templates to the local filesystem
"""

from pathlib import Path

from troposphere import Template

from ecs_topology.common.logging import LOG


def render_template_body(template: Template, file_format: str) -> str:
    """
    :param troposphere.Template template:
    :param str file_format: json or yaml
    :rtype: str
    """
    if not isinstance(template, Template):
        raise TypeError("template must be of type", Template, "got", type(template))
    if file_format == "yaml":
        return template.to_yaml()
    elif file_format == "json":
        return template.to_json()
    raise ValueError(f"Format {file_format} is not supported")


def write_template_file(template: Template, file_path: str, file_format: str) -> str:
    """
    Writes the template to file_path, creating the parent directories as needed

    :return: the absolute path to the file
    :rtype: str
    """
    body = render_template_body(template, file_format)
    output = Path(file_path)
    output.parent.mkdir(parents=True, exist_ok=True)
    with open(output, "w", encoding="utf-8") as template_fd:
        template_fd.write(body)
    LOG.info(f"Template written to {output.absolute()}")
    return str(output.absolute())
