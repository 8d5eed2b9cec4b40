from .core import step_pipeline  # noqa: F401

__all__ = ["step_pipeline"]
