"""Helpers for MongoDB document ids."""
from bson import ObjectId
from bson.errors import InvalidId

from kaizen.errors import ForbiddenError, InvalidInputError, NotFoundError


def parse_object_id(value: str, label: str) -> ObjectId:
    """
    Parse a string id, raising a user-facing error when malformed.

    Example:
        >>> parse_object_id("nope", "task")
        Traceback (most recent call last):
        ...
        kaizen.errors.InvalidInputError: Invalid task ID format
    """
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise InvalidInputError(f"Invalid {label} ID format")


async def find_owned(collection, doc_id: str, user_id: str, label: str) -> dict:
    """
    Load a document by id and check it belongs to ``user_id``.

    Args:
        collection: Motor collection to search
        doc_id: Document id as a string
        user_id: Caller's user id
        label: Human name of the document kind, used in messages

    Returns:
        The raw document

    Raises:
        InvalidInputError: If the id is malformed
        NotFoundError: If no document has this id
        ForbiddenError: If the document belongs to another user
    """
    doc = await collection.find_one({"_id": parse_object_id(doc_id, label)})
    if not doc:
        raise NotFoundError(f"{label.capitalize()} not found")
    if doc["user_id"] != user_id:
        raise ForbiddenError(f"{label.capitalize()} does not belong to user")
    return doc
