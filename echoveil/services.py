"""Process-wide services, built once and passed explicitly to consumers."""

from dataclasses import dataclass
from typing import Optional

import httpx

from config.logging_config import get_logger, setup_logging
from config.settings import Settings

from .api.gateway_client import GatewayClient
from .campaign.campaign_manager import CampaignManager
from .character_generation.character_builder import CharacterBuilder
from .character_generation.models import Character
from .character_generation.notes_autosave import NotesAutosaver
from .core.preferences import ClientPreferences
from .dice.roller import DiceRoller
from .session.game_session import GameSession
from .session.status_monitor import AIStatusMonitor

logger = get_logger(__name__)


@dataclass
class Services:
    """
    The client's long-lived collaborators.

    Nothing here is a module-level singleton; tests build a ``Services``
    with a mock transport and pass it where needed.
    """

    settings: Settings
    preferences: ClientPreferences
    gateway: GatewayClient
    dice: DiceRoller

    @classmethod
    def build(
        cls,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        configure_logging: bool = False,
    ) -> "Services":
        settings = settings or Settings()
        if configure_logging:
            setup_logging(settings.log_level, settings.log_file)
        settings.create_directories()
        preferences = ClientPreferences(settings.data_dir, settings.server_url)
        gateway = GatewayClient.from_settings(settings, preferences, transport=transport)
        logger.info("Services ready", server_url=gateway.base_url, device_id=preferences.device_id)
        return cls(settings=settings, preferences=preferences, gateway=gateway, dice=DiceRoller())

    def set_server_url(self, url: str) -> None:
        """Persist a new base URL; the gateway uses it from the next call."""
        self.preferences.server_url = url
        self.gateway.base_url = self.preferences.server_url

    def reset_server_url(self) -> None:
        self.preferences.reset_server_url()
        self.gateway.base_url = self.preferences.server_url

    def campaign_manager(self) -> CampaignManager:
        return CampaignManager(self.gateway)

    def character_builder(self) -> CharacterBuilder:
        return CharacterBuilder(self.gateway)

    def game_session(self, campaign_id: str, character: Optional[Character] = None) -> GameSession:
        return GameSession(self.gateway, campaign_id, character=character)

    def status_monitor(self, on_change=None) -> AIStatusMonitor:
        return AIStatusMonitor(self.gateway, interval=self.settings.ai_status_poll_interval, on_change=on_change)

    def notes_autosaver(self, character: Character) -> NotesAutosaver:
        return NotesAutosaver(self.gateway, character, delay=self.settings.notes_autosave_delay)

    async def close(self) -> None:
        await self.gateway.close()

    async def __aenter__(self) -> "Services":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
