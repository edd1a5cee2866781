"""Data layer exports for the Modbus console."""

from .models import *  # noqa: F401,F403
from .models import __all__ as _model_all

__all__ = list(_model_all)
