"""Debounced saving of a character's notes and backstory."""

import asyncio
from typing import Optional

import structlog

from ..core.error_handling import GatewayError
from .models import Character

logger = structlog.get_logger(__name__)


class NotesAutosaver:
    """
    Saves notes/backstory edits ``delay`` seconds after the last edit.

    Each edit cancels the pending save. A failed save keeps the edited text
    so the next edit or ``flush()`` sends it again.
    """

    def __init__(self, gateway, character: Character, delay: float = 1.5):
        self.gateway = gateway
        self.character = character
        self.delay = delay
        self.notes = character.notes
        self.backstory = character.backstory
        self.is_saving = False
        self.save_count = 0
        self.last_error: Optional[GatewayError] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def has_pending_save(self) -> bool:
        return self._task is not None and not self._task.done()

    def update(self, notes: Optional[str] = None, backstory: Optional[str] = None) -> None:
        """Record an edit and restart the debounce timer. Needs a running event loop."""
        if notes is not None:
            self.notes = notes
        if backstory is not None:
            self.backstory = backstory
        if self._task is not None:
            self._task.cancel()
        self._task = asyncio.create_task(self._save_after_delay())

    async def _save_after_delay(self) -> None:
        await asyncio.sleep(self.delay)
        await self._save()

    async def _cancel_pending(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def flush(self) -> bool:
        """Save now instead of waiting; returns whether the save succeeded."""
        await self._cancel_pending()
        return await self._save()

    async def close(self) -> None:
        await self._cancel_pending()

    async def _save(self) -> bool:
        self.is_saving = True
        try:
            await self.gateway.patch_character_notes(self.character.id, self.notes, self.backstory)
        except GatewayError as e:
            self.last_error = e
            logger.warning("Notes autosave failed", character_id=self.character.id, error=str(e))
            return False
        finally:
            self.is_saving = False

        self.character.notes = self.notes
        self.character.backstory = self.backstory
        self.character.touch()
        self.last_error = None
        self.save_count += 1
        logger.debug("Notes saved", character_id=self.character.id)
        return True
