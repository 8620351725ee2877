#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module to expand the environment variables used in the topology files.
Supports $VAR, ${VAR}, ${VAR:-default} (default if VAR unset or empty) and ${VAR:+value} (value if VAR set).
Escaped references (\\$VAR) and CFN pseudo parameters (${AWS::Region}) are left as-is.
"""

import os
import re

ENV_VAR_RE = re.compile(
    r"(?<!\\)\$(?:(?P<bare>\w+)|\{(?!AWS::)(?P<name>\w+)(?:(?P<op>:[-+])(?P<alt>[^}]*))?\})"
)


def expandvars(value: str, default: str = None) -> str:
    """
    Expands the environment variables in value.

    :param str value: the string to interpolate
    :param str default: value for unknown variables. If None, the reference is left unchanged
    :rtype: str
    """

    def replace_var(match):
        name = match.group("bare") or match.group("name")
        env_value = os.environ.get(name)
        operator = match.group("op")
        if operator == ":-":
            return env_value if env_value else expandvars(match.group("alt"), default)
        if operator == ":+":
            return expandvars(match.group("alt"), default) if env_value else ""
        if env_value is not None:
            return env_value
        return match.group(0) if default is None else default

    return ENV_VAR_RE.sub(replace_var, value)


def expand_content(content, default: str = None):
    """
    Recursively expands the environment variables of all the strings of the content

    :param content: dict, list or scalar
    :return: a copy of the content, interpolated
    """
    if isinstance(content, dict):
        return {key: expand_content(value, default) for key, value in content.items()}
    elif isinstance(content, list):
        return [expand_content(value, default) for value in content]
    elif isinstance(content, str):
        return expandvars(content, default)
    return content
