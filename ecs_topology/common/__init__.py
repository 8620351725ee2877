# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Most commonly used functions shared across all modules.
"""

import re

NONALPHANUM = re.compile(r"([^a-zA-Z\d]+)")


def logical_name(name: str, prefix: str = None, suffix: str = None) -> str:
    """
    Function to turn a service / namespace name into a CloudFormation compatible logical name.
    yelb-ui becomes YelbUi

    :param str name: the name to transform
    :param str prefix: optional prefix added to the logical name
    :param str suffix: optional suffix added to the logical name
    :returns: the alphanumerical logical name
    :rtype: str
    """
    parts = [part for part in NONALPHANUM.split(name) if not NONALPHANUM.match(part)]
    title = "".join(part[0].upper() + part[1:] for part in parts if part)
    if not title:
        raise ValueError(f"Cannot build a logical name from {name}")
    return f"{prefix or ''}{title}{suffix or ''}"
