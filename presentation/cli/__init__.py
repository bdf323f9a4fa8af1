"""Presentation CLI exports."""
from .health_command import HealthCommand, build_parser

__all__ = [
    "HealthCommand",
    "build_parser",
]
