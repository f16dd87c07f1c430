"""
build-updater: a self-updating launcher helper for a managed application build.
"""

__version__ = "1.0.0"
