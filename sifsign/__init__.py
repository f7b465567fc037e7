"""SifSign - key pair provisioning and signature verification CLI for container images."""

__version__ = "0.1.0"
__author__ = "SifSign Contributors"

from sifsign.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
