#!/usr/bin/env python3
import os

import aws_cdk as cdk
from network_stack import NetworkStack
from compute_stack import ComputeStack

app = cdk.App()

# Get configuration from context, falling back to the CLI's resolved account/region
env = cdk.Environment(
    account=app.node.try_get_context("account") or os.environ.get("CDK_DEFAULT_ACCOUNT"),
    region=app.node.try_get_context("region") or os.environ.get("CDK_DEFAULT_REGION")
)
prefix = app.node.try_get_context("stack_prefix") or "WebApp"

# Deploy stacks in dependency order
network_stack = NetworkStack(app, f"{prefix}NetworkStack", env=env)
compute_stack = ComputeStack(
    app, f"{prefix}ComputeStack",
    vpc=network_stack.vpc,
    env=env
)

# Stack dependencies
compute_stack.add_dependency(network_stack)

app.synth()
