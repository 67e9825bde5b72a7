"""Campaign lobby: saved campaigns, character roster and new-campaign start."""

import asyncio
from typing import TYPE_CHECKING, List, Optional

import structlog

from ..character_generation.catalog import demo_characters
from ..character_generation.models import Character
from ..character_generation.validators import CharacterValidator
from ..core.error_handling import GatewayError, HTTPStatusError, user_message, with_fallback
from .demo import demo_summaries
from .models import AIStatus, CampaignSummary, StartedCampaign
from .templates import BUILTIN_TEMPLATES, CampaignTemplate

if TYPE_CHECKING:
    from ..api.gateway_client import GatewayClient

logger = structlog.get_logger(__name__)

# Upsert responses meaning "the server has this character"
_SYNCED_STATUSES = (200, 201, 409)


class CampaignManager:
    """Loads the lobby with demo fallbacks and starts new campaigns."""

    def __init__(self, gateway: "GatewayClient"):
        self.gateway = gateway
        self.campaigns: List[CampaignSummary] = []
        self.characters: List[Character] = []
        self.ai_status: AIStatus = AIStatus.offline()
        self.is_starting = False
        self.error_message: Optional[str] = None

    @property
    def templates(self) -> List[CampaignTemplate]:
        return list(BUILTIN_TEMPLATES)

    @with_fallback(lambda self: demo_summaries())
    async def _fetch_campaigns(self) -> List[CampaignSummary]:
        return await self.gateway.list_campaigns()

    @with_fallback(lambda self: demo_characters())
    async def _fetch_characters(self) -> List[Character]:
        return await self.gateway.list_characters()

    async def list_campaigns(self) -> List[CampaignSummary]:
        self.campaigns = await self._fetch_campaigns()
        return self.campaigns

    async def list_characters(self) -> List[Character]:
        self.characters = await self._fetch_characters()
        return self.characters

    async def refresh_ai_status(self) -> AIStatus:
        self.ai_status = await self.gateway.ai_status()
        return self.ai_status

    async def load_all(self) -> None:
        """Load campaigns, characters and AI status concurrently."""
        await asyncio.gather(self.list_campaigns(), self.list_characters(), self.refresh_ai_status())

    def find_character(self, character_id: str) -> Optional[Character]:
        return next((c for c in self.characters if c.id == character_id), None)

    async def _sync_character(self, character: Character) -> None:
        """Best-effort upsert so the server knows the character before the start call."""
        errors = CharacterValidator.validate_character(character)
        if errors:
            logger.warning("Skipping sync of invalid character", character_id=character.id, errors=errors)
            return
        try:
            await self.gateway.create_character(character)
        except HTTPStatusError as e:
            if e.status_code not in _SYNCED_STATUSES:
                logger.warning("Character sync rejected", character_id=character.id, status_code=e.status_code)
        except GatewayError as e:
            logger.warning("Character sync failed", character_id=character.id, error=str(e))

    async def start_campaign(
        self,
        character_id: str,
        template_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> Optional[StartedCampaign]:
        """
        Start a campaign for ``character_id``.

        Returns ``None`` if a start is already in progress. On failure the
        banner text is stored in ``error_message`` and the error is re-raised.
        """
        if self.is_starting:
            logger.debug("Campaign start already in progress")
            return None
        self.is_starting = True
        self.error_message = None
        try:
            character = self.find_character(character_id)
            if character is not None:
                await self._sync_character(character)
            return await self.gateway.start_campaign(character_id, template_id=template_id, title=title)
        except GatewayError as e:
            self.error_message = user_message(e, "start campaign")
            raise
        finally:
            self.is_starting = False
