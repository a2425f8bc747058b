"""Exceptions raised by the graph engine."""


class StoryGraphError(Exception):
    pass


class GraphNotInitializedError(StoryGraphError):
    """The engine was used before ``initialize`` built a graph."""

    def __init__(self, operation: str = "operation") -> None:
        super().__init__(f"Graph is not initialized; call initialize() before {operation}")


class NodeNotFoundError(StoryGraphError, KeyError):
    def __init__(self, node_id: str) -> None:
        super().__init__(f"Node {node_id!r} not found")
        self.node_id = node_id

    def __str__(self) -> str:
        return self.args[0]
