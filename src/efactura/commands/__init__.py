"""Command implementations exposed through :mod:`efactura.cli`."""

from . import build, check

__all__ = ["build", "check"]
