import os
from typing import Dict, List

import boto3
import pytest

import smoke_checks


@pytest.fixture(scope="session")
def stack_name() -> str:
    name = os.environ.get("STACK_NAME")
    if not name:
        pytest.skip("STACK_NAME not set, no deployed stack to validate")
    return name


@pytest.fixture(scope="session")
def http_timeout() -> float:
    return float(os.environ.get("SMOKE_HTTP_TIMEOUT", "10"))


@pytest.fixture(scope="session")
def aws_session(stack_name):
    region = os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")
    return boto3.session.Session(region_name=region)


@pytest.fixture(scope="session")
def stack_outputs(aws_session, stack_name) -> Dict[str, str]:
    return smoke_checks.stack_outputs(aws_session.client("cloudformation"), stack_name)


def require_output(outputs: Dict[str, str], key: str) -> str:
    try:
        return smoke_checks.require_output(outputs, key)
    except smoke_checks.MissingStackOutput as e:
        pytest.fail(str(e))


@pytest.fixture(scope="session")
def alb_dns_name(stack_outputs) -> str:
    return require_output(stack_outputs, "AlbDnsName")


@pytest.fixture(scope="session")
def target_group_arn(stack_outputs) -> str:
    return require_output(stack_outputs, "TargetGroupArn")


@pytest.fixture(scope="session")
def target_health(aws_session, target_group_arn) -> List[dict]:
    return smoke_checks.target_health(
        aws_session.client("elbv2"),
        target_group_arn,
        max_attempts=int(os.environ.get("SMOKE_WAIT_ATTEMPTS", "20"))
    )


@pytest.fixture(scope="session")
def instance_public_ips(aws_session, stack_outputs) -> List[str]:
    group_name = require_output(stack_outputs, "AutoScalingGroupName")
    instance_ids = smoke_checks.group_instance_ids(aws_session.client("autoscaling"), group_name)
    return smoke_checks.public_ips(aws_session.client("ec2"), instance_ids)
