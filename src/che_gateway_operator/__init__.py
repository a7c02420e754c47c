"""Che gateway operator.

Keeps the single-host gateway bundle and its external entry point in line
with the ``CheManager`` custom resource.
"""

from che_gateway_operator.__version__ import __version__

__all__ = ["__version__"]
