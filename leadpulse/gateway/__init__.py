"""Write path: forwards lead edits upstream and invalidates the snapshot."""

from .mutations import MutationGateway, ValidationError

__all__ = ["MutationGateway", "ValidationError"]
