"""Example module B, the other half of the module A / module B cycle."""

from npmplus.example import module_a


def get_name() -> str:
    return "Module B"


def call_a() -> str:
    return module_a.get_name()
