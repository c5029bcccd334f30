"""foldgraph: fold and unfold nested groups of a dependency graph."""

__version__ = "0.1.0"
