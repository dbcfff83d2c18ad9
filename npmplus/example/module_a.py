"""Example module A.

Imports module B at module level, and module B imports it back, so the pair
forms an import cycle for dependency analysis to find.
"""

from npmplus.example import module_b


def get_name() -> str:
    return "Module A"


def call_b() -> str:
    return module_b.get_name()
