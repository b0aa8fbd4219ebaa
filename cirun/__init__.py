"""cirun - metadata-driven CI/CD pipeline runner."""

__version__ = "0.3.0"
