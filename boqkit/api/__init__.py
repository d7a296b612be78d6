"""Python API wrapper.

The :class:`BoqKit` facade is the single entry point for boqkit
operations.
"""

from boqkit.api.facade import BoqKit

__all__ = ["BoqKit"]
