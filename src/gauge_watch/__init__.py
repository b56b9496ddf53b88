"""Watch incentive gauges for notable changes."""

__version__ = "0.1.0"
