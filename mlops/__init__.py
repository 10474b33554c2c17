"""MLOps run tracking: runs, artifacts, and registered model versions."""

__version__ = "0.1.0"
