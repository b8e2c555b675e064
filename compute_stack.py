from aws_cdk import (
    Stack, CfnOutput, Duration,
    aws_ec2 as ec2,
    aws_autoscaling as autoscaling,
    aws_elasticloadbalancingv2 as elbv2
)
from constructs import Construct

from stack_context import context_int

# Literal the smoke tests look for in the served page
PAGE_TEXT = "Hello from the app"

USER_DATA_COMMANDS = [
    "dnf install -y httpd",
    f"echo '<html><head><title>web</title></head><body><h1>{PAGE_TEXT}</h1></body></html>' > /var/www/html/index.html",
    "systemctl enable --now httpd",
]

class ComputeStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, vpc: ec2.Vpc, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        instance_type = self.node.try_get_context("instance_type") or "t3.micro"
        min_capacity = context_int(self, "min_capacity", 1)
        desired_capacity = context_int(self, "desired_capacity", 2)
        max_capacity = context_int(self, "max_capacity", 3)
        target_cpu = context_int(self, "target_cpu_percent", 60)

        if not 0 <= min_capacity <= desired_capacity <= max_capacity:
            raise ValueError(
                f"Invalid Auto Scaling capacity: min={min_capacity}, "
                f"desired={desired_capacity}, max={max_capacity}"
            )

        # Security groups
        self.alb_security_group = self._create_alb_security_group(vpc)
        self.instance_security_group = self._create_instance_security_group(vpc, self.alb_security_group)

        # Application Load Balancer
        self.alb = elbv2.ApplicationLoadBalancer(
            self, "WebAppALB",
            vpc=vpc,
            internet_facing=True,
            security_group=self.alb_security_group,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC)
        )

        # Web servers
        launch_template = self._create_launch_template(instance_type, self.instance_security_group)
        self.asg = autoscaling.AutoScalingGroup(
            self, "WebServerGroup",
            vpc=vpc,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PUBLIC),
            launch_template=launch_template,
            min_capacity=min_capacity,
            desired_capacity=desired_capacity,
            max_capacity=max_capacity,
            health_checks=autoscaling.HealthChecks.with_additional_checks(
                additional_types=[autoscaling.AdditionalHealthCheckType.ELB],
                grace_period=Duration.seconds(120)
            )
        )
        self.asg.scale_on_cpu_utilization(
            "WebServerCpuScaling",
            target_utilization_percent=target_cpu
        )

        # Target group and listener
        self.target_group = self._create_target_group(vpc, self.asg)
        self.alb.add_listener(
            "HttpListener",
            port=80,
            protocol=elbv2.ApplicationProtocol.HTTP,
            open=False,
            default_action=elbv2.ListenerAction.forward([self.target_group])
        )

        # Outputs
        CfnOutput(self, "AlbDnsName", value=self.alb.load_balancer_dns_name)
        CfnOutput(self, "WebServiceUrl", value=f"http://{self.alb.load_balancer_dns_name}")
        CfnOutput(self, "TargetGroupArn", value=self.target_group.target_group_arn)
        CfnOutput(self, "AutoScalingGroupName", value=self.asg.auto_scaling_group_name)

    def _create_alb_security_group(self, vpc: ec2.Vpc) -> ec2.SecurityGroup:
        sg = ec2.SecurityGroup(
            self, "AlbSecurityGroup",
            vpc=vpc,
            description="Public HTTP access to the load balancer"
        )
        sg.add_ingress_rule(ec2.Peer.any_ipv4(), ec2.Port.tcp(80), "HTTP from anywhere")
        return sg

    def _create_instance_security_group(self, vpc: ec2.Vpc, alb_sg: ec2.SecurityGroup) -> ec2.SecurityGroup:
        # No other ingress: port 80 is reachable through the ALB only
        sg = ec2.SecurityGroup(
            self, "InstanceSecurityGroup",
            vpc=vpc,
            description="Web servers, HTTP from the load balancer only"
        )
        sg.add_ingress_rule(alb_sg, ec2.Port.tcp(80), "HTTP from the load balancer")
        return sg

    def _create_launch_template(self, instance_type: str, security_group: ec2.SecurityGroup) -> ec2.LaunchTemplate:
        user_data = ec2.UserData.for_linux()
        user_data.add_commands(*USER_DATA_COMMANDS)

        return ec2.LaunchTemplate(
            self, "WebServerLaunchTemplate",
            machine_image=ec2.MachineImage.latest_amazon_linux2023(),
            instance_type=ec2.InstanceType(instance_type),
            security_group=security_group,
            user_data=user_data,
            require_imdsv2=True
        )

    def _create_target_group(self, vpc: ec2.Vpc, asg: autoscaling.AutoScalingGroup) -> elbv2.ApplicationTargetGroup:
        tg = elbv2.ApplicationTargetGroup(
            self, "WebServerTargetGroup",
            vpc=vpc,
            port=80,
            protocol=elbv2.ApplicationProtocol.HTTP,
            target_type=elbv2.TargetType.INSTANCE,
            health_check=elbv2.HealthCheck(
                path="/",
                healthy_http_codes="200",
                healthy_threshold_count=2,
                unhealthy_threshold_count=3,
                timeout=Duration.seconds(5),
                interval=Duration.seconds(30)
            ),
            deregistration_delay=Duration.seconds(30)
        )
        asg.attach_to_application_target_group(tg)
        return tg
