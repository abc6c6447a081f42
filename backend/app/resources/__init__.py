"""Generic resource API building blocks."""
from app.resources.registry import (
    FieldCast,
    FieldDescriptor,
    ResourceDescriptor,
    ResourceRegistry,
    api_resource,
    discover_resources,
)

__all__ = [
    "FieldCast",
    "FieldDescriptor",
    "ResourceDescriptor",
    "ResourceRegistry",
    "api_resource",
    "discover_resources",
]
