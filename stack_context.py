from constructs import Construct


def context_int(scope: Construct, key: str, default: int) -> int:
    # Values passed with `cdk -c` arrive as strings; an explicit 0 is kept
    value = scope.node.try_get_context(key)
    return default if value is None else int(value)
