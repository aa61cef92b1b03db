"""depsolver — compute missing extra-deps and flags with an external solver."""

__version__ = "0.1.0"
