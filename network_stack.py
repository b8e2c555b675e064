from aws_cdk import Stack, CfnOutput, Fn, aws_ec2 as ec2
from constructs import Construct

from stack_context import context_int

class NetworkStack(Stack):
    def __init__(self, scope: Construct, construct_id: str, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)

        cidr = self.node.try_get_context("vpc_cidr") or "10.0.0.0/16"
        max_azs = context_int(self, "max_azs", 2)

        # Public subnets only, no NAT: ALB and web servers share them
        self.vpc = ec2.Vpc(
            self, "WebAppVpc",
            ip_addresses=ec2.IpAddresses.cidr(cidr),
            max_azs=max_azs,
            nat_gateways=0,
            enable_dns_hostnames=True,
            enable_dns_support=True,
            subnet_configuration=[
                ec2.SubnetConfiguration(
                    name="Public",
                    subnet_type=ec2.SubnetType.PUBLIC,
                    cidr_mask=24,
                    map_public_ip_on_launch=True
                )
            ]
        )

        CfnOutput(self, "VpcId", value=self.vpc.vpc_id)
        CfnOutput(
            self, "PublicSubnetIds",
            value=Fn.join(",", [subnet.subnet_id for subnet in self.vpc.public_subnets])
        )
