"""
Emote Normalizer

Maps raw 7TV emote records into the internal Emote shape.
"""

import logging
from typing import Any, Iterable, List

from pydantic import ValidationError

from .models import Emote, SevenTVEmote, UNKNOWN_OWNER

logger = logging.getLogger(__name__)


class MalformedEmoteError(ValueError):
    """Raised when an upstream record cannot become an Emote."""


def normalize(raw: Any) -> Emote:
    """
    Convert one upstream record into an Emote.

    Raises:
        MalformedEmoteError: if the record is not an object or lacks id/name
    """
    try:
        record = SevenTVEmote.model_validate(raw)
    except ValidationError as e:
        raise MalformedEmoteError(f"Invalid emote record: {e.error_count()} error(s)") from e

    owner = record.owner.username if record.owner and record.owner.username else UNKNOWN_OWNER
    data = record.data

    return Emote(
        id=record.id,
        name=record.name,
        owner=owner,
        tags=frozenset(record.tags or ()),
        animated=bool(data and data.animated),
        mime=data.mime if data else None,
        visibility=record.visibility,
    )


def normalize_many(records: Iterable[Any], source: str = "") -> List[Emote]:
    """
    Normalize a sequence of records, dropping malformed ones.

    Args:
        records: Raw upstream records
        source: Label used in log lines (usually the set id)
    """
    emotes: List[Emote] = []
    dropped = 0
    for raw in records:
        try:
            emotes.append(normalize(raw))
        except MalformedEmoteError as e:
            dropped += 1
            logger.warning(f"[Normalizer] Dropped record from {source or 'set'}: {e}")
    if dropped:
        logger.info(f"[Normalizer] {source or 'set'}: kept {len(emotes)}, dropped {dropped}")
    return emotes
