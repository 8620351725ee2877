# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille <john@compose-x.io>

"""
Titles and fixed values bound to ecs_topology.ecs
"""

TASK_T = "TaskDefinition"
SERVICE_T = "Service"
SG_T = "SecurityGroup"

NETWORK_MODE = "awsvpc"
LAUNCH_TYPE = "FARGATE"
REQUIRES_COMPATIBILITIES = ["FARGATE"]
LOG_DRIVER = "awslogs"

SERVICE_GROUP_ID_T = "GroupId"
