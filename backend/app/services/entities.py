"""
Entity catalogue: index names and cache tags per entity type.

Cache keys are written and invalidated through the same tag table, so a
write to ``<prefix>_files`` always purges exactly the keys produced by
file searches.
"""

from typing import Optional

from app.schemas.search import EntityType


# 3-character tags used in cache keys (``search:<tag>:...``)
CACHE_TAGS = {
    EntityType.MESSAGES: "msg",
    EntityType.FILES: "fil",
    EntityType.USERS: "usr",
    EntityType.CHANNELS: "chn",
    EntityType.BOOKMARKS: "bkm",
    EntityType.TASKS: "tsk",
    EntityType.EMOJI: "emj",
}

# Entity types covered by the global fan-out
GLOBAL_ENTITY_TYPES = (
    EntityType.MESSAGES,
    EntityType.FILES,
    EntityType.USERS,
    EntityType.CHANNELS,
)


def cache_tag(entity: EntityType) -> str:
    return CACHE_TAGS[entity]


def index_name(entity: EntityType, prefix: str) -> str:
    """Engine index holding documents of ``entity``."""
    return f"{prefix}_{entity.value}"


def wildcard_index(prefix: str) -> str:
    """Index pattern addressing every entity index."""
    return f"{prefix}_*"


def entity_for_index(index: str, prefix: str) -> Optional[EntityType]:
    """
    Resolve an index name back to its entity type.

    Args:
        index: Engine index name, e.g. ``quckapp_messages``
        prefix: Application index prefix

    Returns:
        The entity type, or None when the index is not one of ours
    """
    head = f"{prefix}_"
    if not index or not index.startswith(head):
        return None
    try:
        return EntityType(index[len(head):])
    except ValueError:
        return None


def entity_for_type_name(type_name: str) -> Optional[EntityType]:
    """Resolve a path segment like ``messages`` to an entity type."""
    try:
        return EntityType(type_name)
    except ValueError:
        return None
