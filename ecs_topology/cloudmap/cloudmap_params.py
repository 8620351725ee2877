# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Module for AWS CloudMap
"""

import re

NAMESPACE_T = "PrivateNamespace"
NAMESPACE_ID_T = "PrivateNamespaceId"
NAMESPACE_ARN_T = "PrivateNamespaceArn"

DOMAIN_NAME_RE = re.compile(
    r"^(?=.{1,253}$)([a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?)(\.[a-z0-9]([a-z0-9-]{0,61}[a-z0-9])?)*$"
)
