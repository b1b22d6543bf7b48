"""Collector-side folding of registry metric names into nested samples."""

from .assembler import RegistryName, SampleAssembler, parse_registry_name, put_leaf

__all__ = ["RegistryName", "SampleAssembler", "parse_registry_name", "put_leaf"]
