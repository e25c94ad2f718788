"""Admin tour form: validate locally, then submit one write to the tours API."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, List, Optional, Union

import httpx
from pydantic import Field
from pydantic import ValidationError as PydanticValidationError

from ..models.tour import Difficulty
from ..schemas.common import CamelModel

logger = logging.getLogger(__name__)

TOURS_CACHE_KEY = "tours"
ADMIN_TOURS_PATH = "/dashboard/admin/tours"


class FormState(str, Enum):
    """Admin form state enumeration."""
    IDLE = "IDLE"
    VALIDATING = "VALIDATING"
    SUBMITTING = "SUBMITTING"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"


class TourFormSchema(CamelModel):
    """Rules the tour form enforces before anything is sent."""

    name: str = Field(..., min_length=3, max_length=255)
    description: str = Field(..., min_length=50)
    difficulty: Difficulty
    duration: int = Field(..., gt=0)
    max_participants: int = Field(..., gt=0)
    base_price: float = Field(..., ge=0)

    marine_life_ids: List[str] = Field(..., min_length=1)
    seasons: List[str] = Field(..., min_length=1)
    conservation_info: str = Field(..., min_length=20)
    departure_port: str = Field(..., min_length=2)
    marine_area: str = Field(..., min_length=2)
    expedition_type: str = Field(..., min_length=2)
    start_location_id: str = Field(..., min_length=1)
    end_location_id: str = Field(..., min_length=1)

    published: bool = False
    tide_dependency: bool = False
    safety_briefing: Optional[str] = None
    highlights: Optional[List[str]] = None
    inclusions: Optional[List[str]] = None
    exclusions: Optional[List[str]] = None
    images: List[str] = Field(default_factory=list)
    required_equipment: List[str] = Field(default_factory=list)
    tour_type_id: Optional[str] = None
    guide_id: Optional[str] = None
    category_id: Optional[str] = None
    location_id: Optional[str] = None


Callback = Callable[[str], Union[None, Awaitable[None]]]


@dataclass
class SubmitResult:
    state: FormState
    field_errors: dict[str, str] = field(default_factory=dict)
    error: Optional[str] = None
    tour: Optional[dict[str, Any]] = None
    dropped: bool = False


def _field_errors(error: PydanticValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for item in error.errors():
        path = ".".join(str(part) for part in item["loc"]) or "form"
        errors.setdefault(path, item["msg"])
    return errors


def _server_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        for key in ("error", "detail", "title"):
            if isinstance(body.get(key), str):
                return body[key]
    return f"Request failed with status {response.status_code}"


async def _call(callback: Optional[Callback], argument: str) -> None:
    if callback is None:
        return
    outcome = callback(argument)
    if outcome is not None:
        await outcome


class AdminFormController:
    """
    Drives one tour form through IDLE, VALIDATING, SUBMITTING and SUCCESS or ERROR.

    Creates a tour when no ``tour_id`` is known and patches it otherwise.
    Submissions arriving while one is in flight are dropped. Failures keep the
    entered values and are never retried.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        tour_id: Optional[str] = None,
        initial_values: Optional[dict[str, Any]] = None,
        invalidate: Optional[Callback] = None,
        navigate: Optional[Callback] = None,
    ):
        self.client = client
        self.tour_id = tour_id
        self.values: dict[str, Any] = dict(initial_values or {})
        self.invalidate = invalidate
        self.navigate = navigate

        self.state = FormState.IDLE
        self.field_errors: dict[str, str] = {}
        self.error: Optional[str] = None
        self._in_flight = False

    @property
    def is_submitting(self) -> bool:
        return self._in_flight

    async def submit(self, values: Optional[dict[str, Any]] = None) -> SubmitResult:
        """
        Validate and submit the form.

        Args:
            values: Form values in camelCase; defaults to the values already held

        Returns:
            The outcome; ``dropped`` is set when another submission was in flight
        """
        if self._in_flight:
            logger.debug("Dropped tour form submission while another is in flight")
            return SubmitResult(state=self.state, dropped=True)

        self._in_flight = True
        try:
            if values is not None:
                self.values = dict(values)
            return await self._validate_and_send()
        finally:
            self._in_flight = False

    async def _validate_and_send(self) -> SubmitResult:
        self.state = FormState.VALIDATING
        self.field_errors = {}
        self.error = None

        try:
            form = TourFormSchema.model_validate(self.values)
        except PydanticValidationError as e:
            self.field_errors = _field_errors(e)
            self.state = FormState.IDLE
            return SubmitResult(state=self.state, field_errors=self.field_errors)

        self.state = FormState.SUBMITTING
        body = form.model_dump(mode="json", by_alias=True, exclude_none=True)

        try:
            if self.tour_id:
                response = await self.client.patch(f"/tours/{self.tour_id}", json=body)
            else:
                response = await self.client.post("/tours", json=body)
        except httpx.HTTPError as e:
            logger.warning("Tour form submission failed", extra={"tour_id": self.tour_id, "error": str(e)})
            return self._fail(f"Could not reach the server: {e}")

        if response.is_error:
            return self._fail(_server_message(response))

        tour = response.json()
        self.tour_id = tour.get("id", self.tour_id)
        self.state = FormState.SUCCESS

        await _call(self.invalidate, TOURS_CACHE_KEY)
        await _call(self.navigate, ADMIN_TOURS_PATH)

        logger.info("Tour form saved", extra={"tour_id": self.tour_id})
        return SubmitResult(state=self.state, tour=tour)

    def _fail(self, message: str) -> SubmitResult:
        self.state = FormState.ERROR
        self.error = message
        return SubmitResult(state=self.state, error=message)
