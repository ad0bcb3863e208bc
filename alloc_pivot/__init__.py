"""Allocation pivot: normalize repeated project-allocation columns and build cross-tab views."""

__version__ = "0.1.0"
