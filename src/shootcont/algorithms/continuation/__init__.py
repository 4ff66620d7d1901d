"""Continuation problem structure."""

from .problem import ProblemStructure, _ContinuationRegistryProtocol

__all__ = [
    "ProblemStructure",
    "_ContinuationRegistryProtocol",
]
