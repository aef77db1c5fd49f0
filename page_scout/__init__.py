"""
PageScout package initializer.
Defines the package version.
"""
__version__ = "0.1.0"
