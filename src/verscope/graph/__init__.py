"""
Schema graph: containment tree plus reference edges.

Public API::

    from verscope.graph import SchemaElement, SchemaGraph, GraphQueries
"""

from verscope.graph.queries import GraphQueries, ReferenceReport
from verscope.graph.schema import SchemaElement, SchemaGraph

__all__ = [
    "SchemaElement",
    "SchemaGraph",
    "GraphQueries",
    "ReferenceReport",
]
