#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from os import path

import pytest

from ecs_topology.services.service_spec import (
    CallEdge,
    PortDefinition,
    ServiceSpec,
    Topology,
)

HERE = path.abspath(path.dirname(__file__))
USE_CASES = path.abspath(f"{HERE}/../../use-cases")


@pytest.fixture
def use_cases_dir():
    return USE_CASES


@pytest.fixture
def yelb_services():
    return [
        ServiceSpec("ui", "mreferre/yelb-ui:0.10", [PortDefinition("http", 80)], 2),
        ServiceSpec(
            "app", "mreferre/yelb-appserver:0.7", [PortDefinition("rpc", 4567)], 2
        ),
        ServiceSpec("db", "mreferre/yelb-db:0.6", [PortDefinition("sql", 5432)]),
        ServiceSpec("cache", "redis:4.0.2", [PortDefinition("redis", 6379)]),
    ]


@pytest.fixture
def yelb_edges():
    return [
        CallEdge("ui", "app", 4567),
        CallEdge("app", "db", 5432),
        CallEdge("app", "cache", 6379),
    ]


@pytest.fixture
def yelb_topology(yelb_services, yelb_edges):
    return Topology(
        yelb_services,
        yelb_edges,
        "yelb",
        namespace_domain="yelb-service-connect.test",
    )
