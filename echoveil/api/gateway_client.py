"""HTTP client for the Echoveil game server."""

from typing import Any, Dict, List, Optional, Type, TypeVar, Union

import httpx
import pydantic
from structlog import get_logger

from ..campaign.demo import demo_campaign
from ..campaign.models import (
    AIStatus,
    Campaign,
    CampaignSettings,
    CampaignSummary,
    CombatActionResult,
    NarrativeActionResult,
    StartedCampaign,
    TravelResult,
)
from ..character_generation.models import (
    BackgroundOption,
    Character,
    ClassOption,
    PowerOption,
    SpeciesOption,
)
from ..core.error_handling import (
    ActionRejectedError,
    DecodeError,
    GatewayError,
    HTTPStatusError,
    TransportError,
    with_fallback,
)
from .schemas import (
    ActionResponse,
    AIStatusSchema,
    BackgroundSchema,
    CampaignSchema,
    CampaignSummarySchema,
    CharacterSchema,
    ClassSchema,
    CombatActionResponse,
    PowerSchema,
    SessionSummaryResponse,
    SettingsResponse,
    SpeciesSchema,
    StartCampaignResponse,
    TravelResponse,
)

logger = get_logger(__name__)

SchemaT = TypeVar("SchemaT", bound=pydantic.BaseModel)

DEVICE_ID_HEADER = "X-Device-Id"


class GatewayClient:
    """Typed request/response mapping over the game server's REST API.

    No session state is kept between calls apart from the base URL and the
    device identifier. Every failure surfaces as a ``GatewayError``
    subclass; ``health_check`` and ``ai_status`` never raise.
    """

    def __init__(
        self,
        base_url: str,
        device_id: str,
        request_timeout: float = 60.0,
        read_timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url.rstrip("/")
        self.device_id = device_id
        self.read_timeout = read_timeout
        self._client = httpx.AsyncClient(
            timeout=request_timeout,
            headers={
                DEVICE_ID_HEADER: device_id,
                "Accept": "application/json",
            },
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings, preferences, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Build a client from ``Settings`` and persisted ``ClientPreferences``."""
        return cls(
            base_url=preferences.server_url,
            device_id=preferences.device_id,
            request_timeout=settings.request_timeout,
            read_timeout=settings.read_timeout,
            transport=transport,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    @base_url.setter
    def base_url(self, value: str) -> None:
        self._base_url = value.rstrip("/")
        logger.info("Gateway base URL changed", base_url=self._base_url)

    async def close(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "GatewayClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    # Transport helpers

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        timeout: Optional[float] = None,
        allow_status: tuple = (),
    ) -> httpx.Response:
        kwargs: Dict[str, Any] = {}
        if json is not None:
            kwargs["json"] = json
        if timeout is not None:
            kwargs["timeout"] = timeout

        try:
            response = await self._client.request(method, f"{self._base_url}{path}", **kwargs)
        except httpx.RequestError as e:
            logger.warning("Gateway unreachable", method=method, endpoint=path, error=str(e))
            raise TransportError(str(e) or type(e).__name__, path) from e

        if not response.is_success and response.status_code not in allow_status:
            logger.warning(
                "Gateway returned error status",
                method=method,
                endpoint=path,
                status_code=response.status_code,
            )
            raise HTTPStatusError(path, response.status_code)

        logger.debug("Gateway request completed", method=method, endpoint=path, status_code=response.status_code)
        return response

    @staticmethod
    def _json(response: httpx.Response, path: str) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise DecodeError(path, f"body is not JSON: {e}") from e

    def _decode(self, response: httpx.Response, schema: Type[SchemaT], path: str, payload: Any = None) -> SchemaT:
        if payload is None:
            payload = self._json(response, path)
        try:
            return schema.model_validate(payload)
        except pydantic.ValidationError as e:
            raise DecodeError(path, f"{schema.__name__}: {e.error_count()} invalid field(s)") from e

    def _decode_list(self, response: httpx.Response, schema: Type[SchemaT], path: str) -> List[SchemaT]:
        payload = self._json(response, path)
        if not isinstance(payload, list):
            raise DecodeError(path, f"expected a list, got {type(payload).__name__}")
        return [self._decode(response, schema, path, payload=item) for item in payload]

    # Connectivity

    async def health_check(self) -> bool:
        """Return whether the server answers ``/health`` with a 2xx."""
        try:
            await self._request("GET", "/health")
        except GatewayError:
            return False
        return True

    async def ai_status(self) -> AIStatus:
        """AI backend availability; a synthetic offline status on any failure."""
        path = "/api/ai/status"
        try:
            response = await self._request("GET", path)
            return self._decode(response, AIStatusSchema, path).to_domain()
        except GatewayError as e:
            logger.warning("AI status unavailable, reporting offline", error=str(e))
            return AIStatus.offline()

    # Characters

    async def list_characters(self) -> List[Character]:
        path = "/api/characters"
        response = await self._request("GET", path)
        return [item.to_domain() for item in self._decode_list(response, CharacterSchema, path)]

    async def fetch_character(self, character_id: str) -> Character:
        path = f"/api/characters/{character_id}"
        response = await self._request("GET", path, timeout=self.read_timeout)
        return self._decode(response, CharacterSchema, path).to_domain()

    async def create_character(self, character: Union[Character, Dict[str, Any]]) -> Character:
        """Create a character from a ``Character`` or a builder payload."""
        path = "/api/characters"
        body = character.to_dict() if isinstance(character, Character) else character
        response = await self._request("POST", path, json=body)
        created = self._decode(response, CharacterSchema, path).to_domain()
        logger.info("Character created", character_id=created.id, name=created.name)
        return created

    async def update_character(self, character: Character) -> Character:
        path = f"/api/characters/{character.id}"
        response = await self._request("PUT", path, json=character.to_dict())
        return self._decode(response, CharacterSchema, path).to_domain()

    async def delete_character(self, character_id: str) -> None:
        """Delete a character; an already-missing character counts as deleted."""
        path = f"/api/characters/{character_id}"
        response = await self._request("DELETE", path, allow_status=(404,))
        logger.info("Character deleted", character_id=character_id, status_code=response.status_code)

    async def patch_character_notes(self, character_id: str, notes: str, backstory: str) -> None:
        path = f"/api/characters/{character_id}"
        await self._request("PATCH", path, json={"notes": notes, "backstory": backstory})

    # Campaigns

    async def list_campaigns(self) -> List[CampaignSummary]:
        path = "/api/game/campaigns"
        response = await self._request("GET", path, timeout=self.read_timeout)
        return [item.to_domain() for item in self._decode_list(response, CampaignSummarySchema, path)]

    async def get_campaign(self, campaign_id: str) -> Campaign:
        """Fetch a campaign, raising on any failure."""
        path = f"/api/game/campaign/{campaign_id}"
        response = await self._request("GET", path, timeout=self.read_timeout)
        return self._decode(response, CampaignSchema, path).to_domain()

    @with_fallback(lambda self, campaign_id: demo_campaign(campaign_id))
    async def fetch_campaign(self, campaign_id: str) -> Campaign:
        """Fetch a campaign, substituting the offline demo campaign on failure."""
        return await self.get_campaign(campaign_id)

    async def start_campaign(
        self,
        character_id: str,
        template_id: Optional[str] = None,
        title: Optional[str] = None,
    ) -> StartedCampaign:
        path = "/api/game/start"
        body: Dict[str, Any] = {"characterId": character_id}
        if template_id is not None:
            body["templateId"] = template_id
        if title is not None:
            body["title"] = title
        response = await self._request("POST", path, json=body)
        started = self._decode(response, StartCampaignResponse, path).to_domain()
        logger.info("Campaign started", campaign_id=started.campaign_id, template_id=template_id)
        return started

    async def submit_action(self, campaign_id: str, action: str) -> NarrativeActionResult:
        path = "/api/game/action"
        response = await self._request("POST", path, json={"campaignId": campaign_id, "action": action})
        decoded = self._decode(response, ActionResponse, path)
        if not decoded.success:
            raise ActionRejectedError(path, decoded.error)
        return decoded.to_domain()

    async def submit_combat_action(
        self,
        campaign_id: str,
        action: str,
        target_id: Optional[str] = None,
    ) -> CombatActionResult:
        path = "/api/game/combat/action"
        body = {"campaign_id": campaign_id, "action": action, "target_id": target_id}
        response = await self._request("POST", path, json=body)
        decoded = self._decode(response, CombatActionResponse, path)
        if not decoded.success:
            raise ActionRejectedError(path, decoded.error)
        return decoded.to_domain()

    async def undo_last_action(self, campaign_id: str) -> Campaign:
        path = f"/api/game/campaign/{campaign_id}/last-action"
        response = await self._request("DELETE", path)
        payload = self._json(response, path)
        if isinstance(payload, dict) and isinstance(payload.get("campaign"), dict):
            payload = payload["campaign"]
        return self._decode(response, CampaignSchema, path, payload=payload).to_domain()

    async def update_settings(self, campaign_id: str, settings: CampaignSettings) -> CampaignSettings:
        """Persist difficulty and GM style; returns what the server stored."""
        path = f"/api/game/campaign/{campaign_id}/settings"
        response = await self._request("PUT", path, json=settings.to_dict())
        return self._decode(response, SettingsResponse, path).to_domain(settings)

    async def session_summary(self, campaign_id: str) -> str:
        path = f"/api/game/campaign/{campaign_id}/summary"
        response = await self._request("GET", path)
        return self._decode(response, SessionSummaryResponse, path).summary

    async def travel(self, campaign_id: str, destination: str) -> TravelResult:
        path = "/api/game/travel"
        response = await self._request("POST", path, json={"campaignId": campaign_id, "destination": destination})
        return self._decode(response, TravelResponse, path).to_domain()

    # Builder catalogs

    async def fetch_species(self) -> List[SpeciesOption]:
        path = "/api/data/species"
        response = await self._request("GET", path)
        return [item.to_domain() for item in self._decode_list(response, SpeciesSchema, path)]

    async def fetch_classes(self) -> List[ClassOption]:
        path = "/api/data/classes"
        response = await self._request("GET", path)
        return [item.to_domain() for item in self._decode_list(response, ClassSchema, path)]

    async def fetch_backgrounds(self) -> List[BackgroundOption]:
        path = "/api/data/backgrounds"
        response = await self._request("GET", path)
        return [item.to_domain() for item in self._decode_list(response, BackgroundSchema, path)]

    async def fetch_powers(self, kind: str) -> List[PowerOption]:
        """Powers of one kind, ``"force"`` or ``"tech"``."""
        if kind not in ("force", "tech"):
            raise ValueError(f"Unknown power kind: {kind}")
        path = f"/api/data/powers/{kind}"
        response = await self._request("GET", path)
        return [item.to_domain() for item in self._decode_list(response, PowerSchema, path)]
