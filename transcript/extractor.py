"""Sequential row-by-row acquisition of turns through the copy channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol, Sequence

from .errors import ChannelReadFailure, ExtractionEmpty
from .models import Conversation, Role, Turn
from .settings import AcquisitionPolicy

logger = logging.getLogger(__name__)


class RowHandle(Protocol):
    """Opaque host row exposing its role and a trigger-copy action."""

    role: Role

    async def trigger_copy(self) -> None:
        ...


class RowLocator(Protocol):
    """Capability returning the host rows in top-to-bottom order."""

    async def locate_rows(self) -> Sequence[RowHandle]:
        ...


class AcquisitionChannel(Protocol):
    """Shared transfer buffer read immediately after a trigger.

    The returned text is trusted to belong to the row triggered just before
    the read; nothing verifies that pairing.
    """

    async def read(self) -> str:
        ...


async def _acquire(
    row: RowHandle, channel: AcquisitionChannel, timeout: Optional[float]
) -> str:
    await row.trigger_copy()
    if timeout is None:
        return await channel.read()
    return await asyncio.wait_for(channel.read(), timeout)


async def acquire_row(
    row: RowHandle,
    channel: AcquisitionChannel,
    policy: AcquisitionPolicy,
    *,
    index: int = 0,
) -> Optional[str]:
    """Return the trimmed text for ``row`` or ``None`` when nothing was read."""

    attempts = policy.retries + 1
    for attempt in range(1, attempts + 1):
        try:
            text = await _acquire(row, channel, policy.read_timeout)
        except ChannelReadFailure as exc:
            logger.warning(
                "⚠️ Clipboard read failed for row %d (attempt %d/%d): %s",
                index,
                attempt,
                attempts,
                exc,
            )
            continue
        except asyncio.TimeoutError:
            logger.warning(
                "⚠️ Clipboard read timed out for row %d after %ss"
                " (attempt %d/%d)",
                index,
                policy.read_timeout,
                attempt,
                attempts,
            )
            continue

        content = (text or "").strip()
        if content:
            return content
        logger.warning(
            "⚠️ Row %d produced empty content (attempt %d/%d)",
            index,
            attempt,
            attempts,
        )
    return None


async def extract_conversation(
    locator: RowLocator,
    channel: AcquisitionChannel,
    *,
    policy: Optional[AcquisitionPolicy] = None,
) -> Conversation:
    """Trigger and read every host row in order and assemble the turns.

    Rows are handled strictly one at a time because the channel is a single
    shared buffer. Failed or empty rows are skipped; ``ExtractionEmpty`` is
    raised only when no row yielded content.
    """

    resolved = policy or AcquisitionPolicy()
    rows = list(await locator.locate_rows())
    logger.debug("Located %d message rows", len(rows))

    turns: list[Turn] = []
    for index, row in enumerate(rows):
        content = await acquire_row(row, channel, resolved, index=index)
        if content is None:
            continue
        turns.append(Turn(role=row.role, content=content))

    if not turns:
        raise ExtractionEmpty(row_count=len(rows))

    if len(turns) < len(rows):
        logger.info(
            "Recovered %d of %d rows; %d skipped",
            len(turns),
            len(rows),
            len(rows) - len(turns),
        )
    return Conversation.from_turns(turns)


__all__ = [
    "AcquisitionChannel",
    "RowHandle",
    "RowLocator",
    "acquire_row",
    "extract_conversation",
]
