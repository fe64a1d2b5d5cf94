"""pikesre Core - Shared constants and validation.

Import specific functions from submodules:
    from pikesre.core import constants
    from pikesre.core import validators
"""

from pikesre.core import constants, validators

__all__ = [
    "constants",
    "validators",
]
