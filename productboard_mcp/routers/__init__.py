from . import system, tools

__all__ = ["system", "tools"]
