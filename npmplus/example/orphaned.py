"""Example module that nothing imports.

Dependency analysis reports it as an orphan.
"""

from typing import Dict

from npmplus.logger import session_logger as logger


def unused_function() -> None:
    logger.info("This function is never called")


def another_unused_function() -> Dict[str, str]:
    return {
        "status": "orphaned",
        "message": "This module is not imported anywhere",
    }
