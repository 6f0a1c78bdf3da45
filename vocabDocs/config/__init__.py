"""Configuration loading for vocabDocs."""

from .site_config import SiteConfig, load_site_config

__all__ = ["SiteConfig", "load_site_config"]
