"""Document identity helpers shared by the store implementations"""
from bson import ObjectId
from bson.errors import InvalidId

from domain.errors import NotFoundError


def new_id() -> str:
    return str(ObjectId())


def parse_object_id(value: str, not_found_error: str, not_found_message: str) -> ObjectId:
    """Convert an id from a URL or token into an ObjectId.

    A malformed id can never match a document, so it is reported as
    not found rather than as a bad request.
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFoundError(not_found_message, error=not_found_error)
