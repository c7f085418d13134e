import uuid

from fastapi import HTTPException, status


def new_id() -> str:
    return str(uuid.uuid4())


def parse_id(value: str) -> str:
    """Normalise a path id; anything that is not a UUID is a 400."""
    try:
        return str(uuid.UUID(value))
    except (ValueError, AttributeError, TypeError):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid id")
