"""
LiveQuery: Collection Session

Keeps a locally held list (or single item) consistent with a remote
collection. Two writers share one state cell:

  fetch_page()    acquire gate -> request -> merge page -> release gate
  _on_realtime()  fold a realtime batch into the current items

Both express their writes as transitions over the snapshot current at
write time, so a realtime batch that lands while a fetch is awaiting the
transport survives the page merge.

Lifecycle: start() (or `async with`) fetches the first page and registers
the realtime handler; set_ref() re-activates on a new reference; close()
releases every subscription.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from livequery.client.cache import snapshot_key
from livequery.client.context import LiveQueryContext
from livequery.client.models import CollectionPage, RequestDefaults, RequestOptions
from livequery.client.realtime import CONNECTED, Subscription
from livequery.config import settings
from livequery.kernel.filters import normalize_filters
from livequery.kernel.gate import FetchGate
from livequery.kernel.reconciler import apply_realtime
from livequery.kernel.refs import resolve_ref, split_ref
from livequery.kernel.state import StateCell
from livequery.kernel.types import (
    CURSOR_KEY,
    FIELDS_KEY,
    LIMIT_KEY,
    CacheOption,
    Cursor,
    Entity,
    FilterExpressionList,
    RefInfo,
    SyncState,
    WireFilters,
)

logger = logging.getLogger(__name__)


@dataclass
class CollectionOptions:
    """Per-session options."""

    limit: int | None = None
    where: FilterExpressionList | None = None
    fields: str | None = None
    realtime: bool = True
    auto_fetch: bool = True
    cache: CacheOption | bool | None = None
    hooks: list[Callable[[RequestOptions], RequestOptions]] = field(default_factory=list)
    reload_after_error: bool | None = None

    @property
    def page_size(self) -> int:
        return self.limit or settings.DEFAULT_LIMIT

    def cache_identity(self) -> dict[str, Any]:
        return {"limit": self.page_size, "where": self.where, "fields": self.fields}


class CollectionSync:
    """One session: state, fetch gate and subscriptions for one reference."""

    def __init__(
        self,
        ctx: LiveQueryContext,
        ref: str | None,
        options: CollectionOptions | None = None,
    ):
        self.ctx = ctx
        self.options = options or CollectionOptions()
        self.cell: StateCell[SyncState] = StateCell(self._initial_state())
        self.ref: str | None = None
        self.ref_info: RefInfo | None = None
        self.gate = FetchGate()
        self._generation = 0
        self._cached: list[Entity] | None = None
        self._wiped: tuple[Entity, ...] | None = None
        self._realtime_sub: Subscription | None = None
        self._connected_sub: Subscription | None = None
        self._tasks: set[asyncio.Task] = set()
        self._bind(ref)

    # -- state views ---------------------------------------------------------

    @property
    def state(self) -> SyncState:
        return self.cell.value

    @property
    def items(self) -> list[Entity]:
        """Current items; the cached snapshot while the first page is loading."""
        s = self.state
        if s.loading and not s.items and self._cached:
            return list(self._cached)
        return list(s.items)

    @property
    def loading(self) -> bool:
        return self.state.loading

    @property
    def error(self) -> BaseException | None:
        return self.state.error

    @property
    def has_more(self) -> bool:
        return self.state.has_more

    @property
    def cursor(self) -> Cursor:
        return self.state.cursor

    @property
    def filters(self) -> WireFilters:
        return self.state.filters

    @property
    def empty(self) -> bool:
        return self.state.empty

    def subscribe(self, listener: Callable[[SyncState], None]) -> Callable[[], None]:
        return self.cell.subscribe(listener)

    # -- fetch / merge -------------------------------------------------------

    def _initial_state(self) -> SyncState:
        return SyncState(
            loading=self.options.auto_fetch,
            filters=normalize_filters(self.options.where),
        )

    def _commit(self, generation: int, transition: Callable[[SyncState], SyncState]) -> None:
        # Results from before a reference change belong to a discarded session
        if generation != self._generation:
            return
        self.cell.update(transition)

    def _build_request(
        self,
        ref: str,
        info: RefInfo,
        filters: WireFilters,
        cursor: Cursor,
        cache: CacheOption,
        defaults: RequestDefaults,
    ) -> RequestOptions:
        query: dict[str, Any] = {**defaults.query, **filters}
        query[LIMIT_KEY] = self.options.page_size
        query[FIELDS_KEY] = self.options.fields
        query[CURSOR_KEY] = cursor
        return RequestOptions(
            uri=ref,
            is_collection=info.is_collection,
            cache=cache,
            query={k: v for k, v in query.items() if v is not None},
            headers=dict(defaults.headers),
            hooks=list(self.options.hooks),
        )

    async def fetch_page(
        self,
        filters: FilterExpressionList | None = None,
        cache: CacheOption | bool | None = None,
        reset: bool = True,
    ) -> None:
        """
        Fetch one page and merge it into state.

        Dropped silently when another fetch is in flight or the session has
        no reference. A transport failure is recorded in state, then re-raised.
        """
        if self.ref_info is None:
            return
        gate = self.gate
        if not gate.try_enter():
            logger.debug("collection: fetch already in flight for ref=%s, dropping", self.ref)
            return

        generation = self._generation
        ref, info = self.ref, self.ref_info
        try:
            requested = dict(filters or {})
            cursor = requested.pop(CURSOR_KEY, None)
            wire = normalize_filters(requested)
            cache_option = CacheOption.coerce(self.options.cache if cache is None else cache)

            if reset:
                self._wiped = self.state.items
            self._commit(
                generation,
                lambda s: replace(
                    s,
                    loading=True,
                    error=None,
                    filters=wire,
                    items=() if reset else s.items,
                ),
            )

            defaults = await self.ctx.options()
            request = self._build_request(ref, info, wire, cursor, cache_option, defaults)
            data = await self.ctx.request(request)

            if info.is_collection:
                self._merge_page(generation, CollectionPage.model_validate(data or {}))
            else:
                self._merge_item(generation, data)
        except Exception as e:
            logger.error("collection: fetch failed for ref=%s: %s", ref, e)
            # A failed reset gives back the page set it wiped, with realtime changes applied
            wiped = (self._wiped or ()) if generation == self._generation else ()
            self._commit(generation, lambda s: replace(s, items=s.items + wiped, error=e, loading=False))
            raise
        finally:
            if generation == self._generation:
                self._wiped = None
            gate.exit()

    def _merge_page(self, generation: int, page: CollectionPage) -> None:
        was_empty = not self.state.items
        self._commit(
            generation,
            lambda s: replace(
                s,
                items=s.items + tuple(page.items),
                cursor=page.cursor,
                has_more=page.has_more,
                error=None,
                loading=False,
            ),
        )
        if was_empty and generation == self._generation:
            self._store_snapshot()

    def _merge_item(self, generation: int, data: Any) -> None:
        items = (dict(data),) if data else ()
        self._commit(
            generation,
            lambda s: replace(s, items=items, cursor=None, has_more=False, error=None, loading=False),
        )
        if generation == self._generation:
            self._store_snapshot()

    def _store_snapshot(self) -> None:
        if self.ref is None:
            return
        key = snapshot_key(self.ref, self.options.cache_identity())
        self.ctx.cache.set(key, [dict(i) for i in self.state.items])

    async def fetch_more(self) -> None:
        """Append the next page after the current cursor."""
        await self.fetch_page({**self.state.filters, CURSOR_KEY: self.state.cursor}, reset=False)

    async def reload(self) -> None:
        """Refetch the first page under the active filters, bypassing the cache."""
        await self.fetch_page(dict(self.state.filters), CacheOption(), reset=True)

    async def reset(self) -> None:
        """Drop all filters and refetch."""
        await self.fetch_page({}, reset=True)

    async def set_filter(self, filters: FilterExpressionList) -> None:
        """Replace the active filters; the existing page set is discarded."""
        await self.fetch_page(filters, CacheOption(), reset=True)

    # -- realtime ------------------------------------------------------------

    def _on_realtime(self, payload: Mapping[str, Any]) -> None:
        batch = payload.get("items") if isinstance(payload, Mapping) else None
        batch = batch or []
        if self._wiped:
            self._wiped = apply_realtime(self._wiped, batch, include_added=False)

        def fold(s: SyncState) -> SyncState:
            items = apply_realtime(s.items, batch)
            return s if items is s.items else replace(s, items=items)

        self.cell.update(fold)

    def _on_connected(self, attempt: int) -> None:
        if self.ref_info is None or attempt == 0:
            return
        reload_after_error = self.options.reload_after_error
        if reload_after_error is None:
            reload_after_error = settings.RELOAD_AFTER_ERROR
        if self.state.error is not None and not reload_after_error:
            logger.info("collection: reconnected with error for ref=%s, not reloading", self.ref)
            return
        logger.info("collection: reconnected (attempt %d), reloading ref=%s", attempt, self.ref)
        self._spawn(self.reload())

    # -- lifecycle -----------------------------------------------------------

    def _bind(self, ref: str | None) -> None:
        # A reference with no path segments leaves the session inactive
        self.ref_info = resolve_ref(ref) if ref and split_ref(ref) else None
        self.ref = ref if self.ref_info is not None else None
        self._cached = None
        self._wiped = None
        if self.ref:
            self._cached = self.ctx.cache.get(snapshot_key(self.ref, self.options.cache_identity()))

    def _spawn(self, coro) -> asyncio.Task:
        task = asyncio.create_task(self._triggered(coro))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _triggered(self, coro) -> None:
        try:
            await coro
        except Exception:
            # Recorded in state and logged by fetch_page; background triggers stop here
            return

    async def start(self) -> None:
        """Activate: register realtime and connectivity handlers, fetch the first page."""
        if self._connected_sub is None:
            self._connected_sub = self.ctx.hub.subscribe(CONNECTED, self._on_connected)
        if self.ref_info is None:
            return

        if self.options.realtime and self._realtime_sub is None:
            self._realtime_sub = self.ctx.hub.subscribe(self.ref_info.subscription_key, self._on_realtime)

        if self.options.auto_fetch:
            await self._triggered(self.fetch_page(self.options.where, reset=True))

    async def set_ref(self, ref: str | None) -> None:
        """Switch to a new reference: tear down, reset state, re-activate."""
        if (ref or None) == self.ref:
            return
        self._release_realtime()
        self._generation += 1
        self.gate = FetchGate()
        self._bind(ref)
        self.cell.set(self._initial_state())
        await self.start()

    def _release_realtime(self) -> None:
        if self._realtime_sub is not None:
            self._realtime_sub.close()
            self._realtime_sub = None

    async def close(self) -> None:
        """Release every subscription and cancel background reloads."""
        self._release_realtime()
        if self._connected_sub is not None:
            self._connected_sub.close()
            self._connected_sub = None
        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()

    async def __aenter__(self) -> CollectionSync:
        await self.start()
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()
