"""Process-wide bilingual reference food index."""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field

from pydantic import ValidationError

from nutrition_resolver.adapters.cnf_client import CnfClient
from nutrition_resolver.adapters.provider_models import CnfFoodRow
from nutrition_resolver.domain.reference import (
    IndexLanguage,
    IndexState,
    ReferenceFood,
    ReferenceMatch,
)
from nutrition_resolver.services.matching import best_match

_logger = logging.getLogger(__name__)


@dataclass
class ReferenceIndex:
    """Lazily loaded English/French food lists with single-flight loading.

    ``ensure_loaded`` is the only mutator. Callers that arrive while a load is
    in flight await the same task. A failed load leaves the index empty and is
    only retried once ``retry_after_seconds`` have passed.
    """

    client: CnfClient
    retry_after_seconds: float = 300.0
    clock: Callable[[], float] = time.monotonic
    _state: IndexState = field(default=IndexState.UNLOADED, init=False)
    _foods: dict[IndexLanguage, list[ReferenceFood]] = field(
        default_factory=dict, init=False
    )
    _display_names: dict[int, str] = field(default_factory=dict, init=False)
    _load_task: "asyncio.Task[None] | None" = field(default=None, init=False)
    _failed_at: float | None = field(default=None, init=False)

    @property
    def state(self) -> IndexState:
        return self._state

    def foods(self, language: IndexLanguage) -> list[ReferenceFood]:
        """Return the loaded foods for a language (empty until loaded)."""
        return self._foods.get(language, [])

    async def ensure_loaded(self) -> IndexState:
        """Load both lists once; concurrent callers share the in-flight load."""
        if self._state is IndexState.LOADED:
            return self._state
        if (
            self._state is IndexState.FAILED
            and self._failed_at is not None
            and self.clock() - self._failed_at < self.retry_after_seconds
        ):
            return self._state
        if self._load_task is None:
            self._state = IndexState.LOADING
            self._load_task = asyncio.ensure_future(self._load())
        await asyncio.shield(self._load_task)
        return self._state

    async def match(self, query: str) -> ReferenceMatch | None:
        """Return the best accepted match across both languages."""
        await self.ensure_loaded()
        best: ReferenceMatch | None = None
        for language in IndexLanguage:
            found = best_match(query, self.foods(language))
            if found is None:
                continue
            food, score = found
            if best is None or score > best.score:
                best = ReferenceMatch(
                    code=food.code,
                    display_name=self._display_names.get(food.code, food.description),
                    score=score,
                    language=language,
                )
        return best

    def reset(self) -> None:
        """Forget loaded data so the next lookup loads again."""
        self._state = IndexState.UNLOADED
        self._foods = {}
        self._display_names = {}
        self._load_task = None
        self._failed_at = None

    async def _load(self) -> None:
        try:
            results = await asyncio.gather(
                *(self._fetch(language) for language in IndexLanguage),
                return_exceptions=True,
            )
            foods: dict[IndexLanguage, list[ReferenceFood]] = {}
            for language, result in zip(IndexLanguage, results, strict=True):
                if isinstance(result, BaseException):
                    _logger.warning(
                        "Reference index %s list failed to load: %s",
                        language.value,
                        result,
                    )
                    continue
                foods[language] = result

            if not foods:
                self._state = IndexState.FAILED
                self._failed_at = self.clock()
                self._foods = {}
                self._display_names = {}
                return

            self._foods = foods
            self._display_names = {
                food.code: food.description
                for food in foods.get(IndexLanguage.ENGLISH, [])
            }
            self._state = IndexState.LOADED
            _logger.info(
                "Reference index loaded: %s",
                {language.value: len(items) for language, items in foods.items()},
            )
        finally:
            self._load_task = None

    async def _fetch(self, language: IndexLanguage) -> list[ReferenceFood]:
        rows = await self.client.list_foods(language.value)
        if not isinstance(rows, list):
            raise ValueError(f"Unexpected food list payload: {type(rows).__name__}")
        foods: list[ReferenceFood] = []
        for row in rows:
            try:
                parsed = CnfFoodRow.model_validate(row)
            except ValidationError:
                continue
            foods.append(
                ReferenceFood(
                    code=parsed.food_code, description=parsed.food_description
                )
            )
        return foods
