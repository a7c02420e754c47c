"""Version information for che_gateway_operator."""

__version__ = "0.1.0"
