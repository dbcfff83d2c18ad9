"""NPM Plus: JavaScript package management tools served over MCP."""

from npmplus.constants import VERSION

__version__ = VERSION
