"""courier - route messages, compose effects, call services."""

from .descriptors import Descriptor, Message, ServiceDescriptor, component, keyed_slot, service
from .effects import Batch, Empty, External, Request, Task, batch, empty, external, map_effects, request
from .registry import Registry
from .router import Engine, Router
from .pending import PendingEntry, Resolve, ServiceCall, ServiceState, call

__version__ = "0.1.0"

__all__ = [
    "Batch",
    "Descriptor",
    "Empty",
    "Engine",
    "External",
    "Message",
    "PendingEntry",
    "Registry",
    "Request",
    "Resolve",
    "Router",
    "ServiceCall",
    "ServiceDescriptor",
    "ServiceState",
    "Task",
    "batch",
    "call",
    "component",
    "empty",
    "external",
    "keyed_slot",
    "map_effects",
    "request",
    "service",
]
