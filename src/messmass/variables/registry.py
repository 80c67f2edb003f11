"""Variables metadata registry.

Loads the variable catalogue from the variables-config API and keeps it in
an in-memory cache with a TTL, so formula validation does not hit the API
on every keystroke.
"""

import time
from typing import Any, Callable, Optional

import httpx
from pydantic import ValidationError

from messmass.core.config import settings
from messmass.core.exceptions import VariablesFetchError
from messmass.core.logging import get_logger
from messmass.formula.parser import MANUAL_PREFIX, PARAM_PREFIX, STATS_PREFIX
from messmass.schemas.variable import VariableDefinition

logger = get_logger(__name__)


class VariablesRegistry:
    """In-memory, TTL-cached view of the variables catalogue.

    Cache TTL: configurable (default 5 minutes / 300 seconds)
    """

    def __init__(
        self,
        api_url: str | None = None,
        ttl: int | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the registry.

        Args:
            api_url: Variables-config endpoint (defaults to settings)
            ttl: Cache lifetime in seconds (defaults to settings)
            timeout: Request timeout in seconds (defaults to settings)
            transport: Optional httpx transport, used by tests
            clock: Monotonic time source
        """
        self.api_url = api_url or settings.variables_api_url
        self.ttl = settings.variables_cache_ttl if ttl is None else ttl
        self.timeout = settings.variables_request_timeout if timeout is None else timeout
        self._transport = transport
        self._clock = clock
        self._variables: list[VariableDefinition] | None = None
        self._loaded_at: float = 0.0

    def is_cache_valid(self) -> bool:
        """True while cached data is younger than the TTL."""
        if self._variables is None:
            return False
        return self._clock() - self._loaded_at < self.ttl

    def invalidate(self) -> None:
        """Drop cached variables, e.g. after the catalogue was edited."""
        self._variables = None
        self._loaded_at = 0.0

    def set_variables(self, variables: list[VariableDefinition]) -> None:
        """Replace the cache with an already-loaded catalogue."""
        self._variables = list(variables)
        self._loaded_at = self._clock()

    async def fetch_available_variables(self) -> list[VariableDefinition]:
        """
        Get all variables, from cache when fresh, otherwise from the API.

        Returns:
            Variable definitions, or an empty list if the API is unavailable
        """
        if self.is_cache_valid() and self._variables is not None:
            logger.debug("Variables cache hit")
            return self._variables

        try:
            variables = await self._load()
        except VariablesFetchError as e:
            logger.error(f"Failed to fetch variables: {e.message}")
            return []

        self.set_variables(variables)
        logger.info(f"Loaded {len(variables)} variables from {self.api_url}")
        return variables

    async def _load(self) -> list[VariableDefinition]:
        """Fetch and parse the catalogue."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            try:
                response = await client.get(self.api_url)
                response.raise_for_status()
                data: Any = response.json()
            except httpx.HTTPError as e:
                raise VariablesFetchError(f"Variables API request failed: {e}") from e
            except ValueError as e:
                raise VariablesFetchError(f"Variables API returned invalid JSON: {e}") from e

        if not isinstance(data, dict) or not data.get("success") or not isinstance(
            data.get("variables"), list
        ):
            raise VariablesFetchError("Invalid variables API response")

        try:
            return [VariableDefinition.model_validate(item) for item in data["variables"]]
        except ValidationError as e:
            raise VariablesFetchError(f"Invalid variable definition: {e}") from e

    def cached_variables(self) -> list[VariableDefinition]:
        """
        Synchronous access for contexts that cannot await.

        Returns whatever is cached, even if stale; empty before the first fetch.
        """
        if not self.is_cache_valid():
            logger.warning("Synchronous variable access - returning cached data only")
        return list(self._variables or [])

    def is_valid_variable(self, name: str) -> bool:
        """
        Check whether a formula token names a known variable.

        PARAM and MANUAL tokens are always valid. With an empty cache every
        name is accepted, so validation does not block before the first fetch.
        """
        if name.startswith((PARAM_PREFIX, MANUAL_PREFIX)):
            return True

        variables = self.cached_variables()
        if not variables:
            logger.warning(f"Variables cache empty, cannot validate: {name}")
            return True

        bare = name[len(STATS_PREFIX) :] if name.startswith(STATS_PREFIX) else name
        return any(v.name in (name, bare) for v in variables)

    def get_variable_example(self, name: str) -> str | None:
        """Example formula for a variable, if the catalogue has one."""
        for variable in self.cached_variables():
            if variable.name == name:
                return variable.example_usage
        return None
