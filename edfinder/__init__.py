"""ED System Finder: resilient Inara / EDSM proxy with a unified system schema."""

__version__ = "1.0.0"
