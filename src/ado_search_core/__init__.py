"""Azure DevOps search core - configuration, upstream client and result shaping."""

__version__ = "1.0.0"
