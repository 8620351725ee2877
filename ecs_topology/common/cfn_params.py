# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

""""
Common parameters for CFN.
The external collaborators of the topology (network, cluster, execution role, logs) are not created here
and come in as parameters of the rendered template.

All the titles, marked `_T` are strings used the same way across all imports, so keep them [a-zA-Z0-9]
"""

from troposphere import Parameter as CfnParameter

NETWORK_LABEL = "Network"
COMPUTE_LABEL = "ECS Compute Settings"
LOGGING_LABEL = "Logging Settings"


class Parameter(CfnParameter):
    """
    Class to extend the default Parameter behaviour
    """

    def __init__(
        self, title, group_label=None, label=None, **kwargs
    ):
        self.group_label = group_label if group_label else "Uncategorized parameters"
        self.label = label
        super().__init__(title, **kwargs)


VPC_ID_T = "VpcId"
VPC_ID = Parameter(
    VPC_ID_T,
    group_label=NETWORK_LABEL,
    label="VPC the services and the discovery namespace belong to",
    Type="AWS::EC2::VPC::Id",
)

APP_SUBNETS_T = "AppSubnets"
APP_SUBNETS = Parameter(
    APP_SUBNETS_T,
    group_label=NETWORK_LABEL,
    label="Subnets the services tasks are placed into",
    Type="List<AWS::EC2::Subnet::Id>",
)

CLUSTER_NAME_T = "EcsClusterName"
CLUSTER_NAME = Parameter(
    CLUSTER_NAME_T,
    group_label=COMPUTE_LABEL,
    label="Name of the existing ECS Cluster",
    Type="String",
    AllowedPattern=r"[a-zA-Z0-9-_]+",
    Default="default",
)

EXECUTION_ROLE_ARN_T = "EcsExecutionRoleArn"
EXECUTION_ROLE_ARN = Parameter(
    EXECUTION_ROLE_ARN_T,
    group_label=COMPUTE_LABEL,
    label="IAM Role ARN used by the ECS agent to pull images and write logs",
    Type="String",
    AllowedPattern=r"^arn:aws(?:-[a-z]+)*:iam::[0-9]{12}:role/[\S]+$",
)

LOG_GROUP_NAME_T = "ServicesLogGroup"
LOG_GROUP_NAME = Parameter(
    LOG_GROUP_NAME_T,
    group_label=LOGGING_LABEL,
    label="Existing CloudWatch log group the containers log into",
    Type="String",
)

EXTERNAL_PARAMETERS = [
    VPC_ID,
    APP_SUBNETS,
    CLUSTER_NAME,
    EXECUTION_ROLE_ARN,
    LOG_GROUP_NAME,
]
