#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Load the JSON Schema specification of the topology descriptor
"""

import json

from importlib_resources import files

TOPOLOGY_SPEC_FILE = "topology.spec.json"


def load_topology_spec() -> dict:
    """
    :return: the topology JSON schema
    :rtype: dict
    """
    source = files("ecs_topology").joinpath(f"specs/{TOPOLOGY_SPEC_FILE}")
    return json.loads(source.read_text())
