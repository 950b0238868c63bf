"""
Ownership check shared by the post and comment services.

Ownership is a data comparison, not a type relationship: anything with an
``author_id`` attribute can be checked.
"""
from typing import Protocol, TypeVar

from blog_api.exceptions import ForbiddenError, NotFoundError


class OwnedResource(Protocol):
    author_id: int


R = TypeVar("R", bound=OwnedResource)


def ensure_owner(resource: R | None, requester_id: int, action: str, noun: str) -> R:
    """
    Return *resource* if *requester_id* authored it.

    Existence is checked first so that probing an unknown id always yields
    404, never 403.
    """
    if resource is None:
        raise NotFoundError(f"{noun.capitalize()} not found")
    if resource.author_id != requester_id:
        raise ForbiddenError(f"You are not authorized to {action} this {noun}")
    return resource
