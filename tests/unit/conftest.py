import shutil

# aws-cdk-lib runs its constructs through jsii, which needs a Node.js runtime
collect_ignore_glob = [] if shutil.which("node") else ["test_*_stack.py"]
