"""MoboMojo: PC build compatibility engine."""

__version__ = "0.1.0"
