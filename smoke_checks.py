import logging
from typing import Dict, List

from botocore.exceptions import WaiterError

logger = logging.getLogger(__name__)


class MissingStackOutput(LookupError):
    pass


def stack_outputs(cloudformation, stack_name: str) -> Dict[str, str]:
    stack = cloudformation.describe_stacks(StackName=stack_name)["Stacks"][0]
    outputs = {o["OutputKey"]: o["OutputValue"] for o in stack.get("Outputs", [])}
    logger.info("Stack %s (%s) outputs: %s", stack_name, stack["StackStatus"], outputs)
    return outputs


def require_output(outputs: Dict[str, str], key: str) -> str:
    if key not in outputs:
        raise MissingStackOutput(f"Stack output '{key}' is missing")
    return outputs[key]


def target_health(elbv2, target_group_arn: str, delay: int = 15, max_attempts: int = 20) -> List[dict]:
    # target_in_service needs every target healthy; one healthy target is enough here
    try:
        elbv2.get_waiter("target_in_service").wait(
            TargetGroupArn=target_group_arn,
            WaiterConfig={"Delay": delay, "MaxAttempts": max_attempts}
        )
    except WaiterError as e:
        logger.warning("Not all targets in %s are in service: %s", target_group_arn, e)

    descriptions = elbv2.describe_target_health(TargetGroupArn=target_group_arn)["TargetHealthDescriptions"]
    for d in descriptions:
        logger.info("Target %s: %s", d["Target"]["Id"], d["TargetHealth"]["State"])
    return descriptions


def healthy_targets(descriptions: List[dict]) -> List[dict]:
    return [d for d in descriptions if d["TargetHealth"]["State"] == "healthy"]


def group_instance_ids(autoscaling, group_name: str) -> List[str]:
    groups = autoscaling.describe_auto_scaling_groups(AutoScalingGroupNames=[group_name])["AutoScalingGroups"]
    return [i["InstanceId"] for g in groups for i in g["Instances"]]


def public_ips(ec2, instance_ids: List[str]) -> List[str]:
    if not instance_ids:
        return []
    reservations = ec2.describe_instances(InstanceIds=instance_ids)["Reservations"]
    ips = [
        instance["PublicIpAddress"]
        for reservation in reservations
        for instance in reservation["Instances"]
        if instance.get("PublicIpAddress")
    ]
    logger.info("Instances %s, public addresses: %s", instance_ids, ips)
    return ips
