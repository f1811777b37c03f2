from activity_graph.models.activity import QueryAck, QueryEvent

__all__ = ["QueryEvent", "QueryAck"]
