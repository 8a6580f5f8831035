from .app.main import evaluate, send_digests, protect_branches, dependency_graph, logs

__all__ = [
    "evaluate",
    "send_digests",
    "protect_branches",
    "dependency_graph",
    "logs",
]

# stdlib logging defaults: attach NullHandler to prevent 'No handler' warnings
import logging
_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())
