#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

from pytest import raises

from ecs_topology.cloudmap.namespace import NamespaceRegistrar, define_namespace
from ecs_topology.exceptions import NamespaceConflictError


def test_register_is_idempotent():
    registrar = NamespaceRegistrar()
    namespace = registrar.register("yelb", "VpcId", "yelb-service-connect.test")
    for _ in range(3):
        assert (
            registrar.register("yelb", "VpcId", "yelb-service-connect.test")
            is namespace
        )
    assert registrar.namespaces == [namespace]


def test_domain_defaults_to_name():
    namespace = NamespaceRegistrar().register("yelb.lan", "vpc-123456")
    assert namespace.domain == "yelb.lan"
    assert namespace.scope == "vpc-123456"


def test_namespace_conflict():
    registrar = NamespaceRegistrar()
    registrar.register("yelb", "VpcId", "yelb-service-connect.test")
    with raises(NamespaceConflictError):
        registrar.register("yelb", "VpcId", "yelb.internal")
    with raises(NamespaceConflictError):
        registrar.register("yelb", "vpc-123456", "yelb-service-connect.test")


def test_invalid_domain():
    with raises(ValueError):
        NamespaceRegistrar().register("yelb", "VpcId", "Not A Domain")


def test_define_namespace():
    namespace = NamespaceRegistrar().register(
        "yelb", "VpcId", "yelb-service-connect.test"
    )
    resource = define_namespace(namespace).to_dict()
    assert resource["Type"] == "AWS::ServiceDiscovery::PrivateDnsNamespace"
    assert resource["Properties"]["Name"] == "yelb-service-connect.test"
    assert resource["Properties"]["Vpc"] == {"Ref": "VpcId"}
    existing_vpc = NamespaceRegistrar().register("yelb", "vpc-123456")
    assert define_namespace(existing_vpc).to_dict()["Properties"]["Vpc"] == "vpc-123456"
