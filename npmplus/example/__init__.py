"""Example project used to exercise dependency analysis.

``server`` is the entry module; ``module_a`` and ``module_b`` import each
other and ``orphaned`` is imported by nobody.
"""
