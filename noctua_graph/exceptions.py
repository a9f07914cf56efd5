"""
Exceptions raised by noctua_graph.
"""


class NoctuaGraphError(Exception):
    """Base exception for all noctua_graph errors."""
    pass


class MalformedResponseError(NoctuaGraphError, TypeError):
    """Raised when a wire response field does not have the expected shape."""
    pass


class MalformedExpressionError(NoctuaGraphError, ValueError):
    """Raised when a raw type descriptor cannot be parsed."""
    pass


class EdgeIdentityError(NoctuaGraphError, ValueError):
    """Raised when an edge without an id is added to a graph."""
    pass
