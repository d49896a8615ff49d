"""
Cached queries and mutations over the posts procedures.

Reads go through the :class:`QueryCache`; every successful mutation is
published on the :class:`MutationBus`, where :func:`invalidate_on_mutation`
marks the affected queries stale. A failed mutation publishes nothing.
"""
import logging
from typing import Any, Callable, Dict, Optional

from postboard.client.api import PostsApi, ProcedureError
from postboard.client.cache import QueryCache, QueryKey
from postboard.client.events import MutationBus, MutationKind, PostMutation
from postboard.client.params import PostsParams

logger = logging.getLogger(__name__)

POSTS_KEY: QueryKey = ("posts",)


def all_posts_key(params: Optional[PostsParams] = None) -> QueryKey:
    """Key for ``posts.getAll``; without params it is the prefix for every page."""
    base = POSTS_KEY + ("getAll",)
    if params is None:
        return base
    return base + (tuple(sorted(params.to_input().items())),)


def post_key(post_id) -> QueryKey:
    return POSTS_KEY + ("getOne", (("id", str(post_id)),))


def invalidate_on_mutation(cache: QueryCache) -> Callable[[PostMutation], None]:
    """Build a bus handler that invalidates the queries a mutation affects."""

    def handler(event: PostMutation) -> None:
        cache.invalidate(all_posts_key())
        if event.kind in (MutationKind.UPDATED, MutationKind.REMOVED):
            cache.invalidate(post_key(event.post_id))

    return handler


class PostQueries:
    def __init__(
        self,
        api: PostsApi,
        cache: Optional[QueryCache] = None,
        bus: Optional[MutationBus] = None,
        auto_invalidate: bool = True,
    ):
        self.api = api
        self.cache = cache if cache is not None else QueryCache()
        self.bus = bus if bus is not None else MutationBus()
        self._unsubscribe = None
        if auto_invalidate:
            self._unsubscribe = self.bus.subscribe(invalidate_on_mutation(self.cache))

    def close(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    # Queries
    def get_all(self, params: Optional[PostsParams] = None) -> Dict[str, Any]:
        params = params or PostsParams()
        return self.cache.fetch(all_posts_key(params), lambda: self._load_all(params))

    def get_one(self, post_id) -> Dict[str, Any]:
        return self.cache.fetch(post_key(post_id), lambda: self.api.get_one(str(post_id)))

    def prefetch_all(self, params: Optional[PostsParams] = None) -> bool:
        params = params or PostsParams()
        return self.cache.prefetch(all_posts_key(params), lambda: self._load_all(params))

    def prefetch_one(self, post_id) -> bool:
        return self.cache.prefetch(post_key(post_id), lambda: self.api.get_one(str(post_id)))

    def _load_all(self, params: PostsParams) -> Dict[str, Any]:
        return self.api.get_all(page=params.page, page_size=params.page_size, q=params.q)

    # Mutations
    def create(self, title: Optional[str] = None, content: Optional[str] = None, *, on_success=None, on_error=None):
        return self._mutate(
            lambda: self.api.create(title=title, content=content),
            lambda data: PostMutation(MutationKind.CREATED, str(data["id"]), data),
            on_success,
            on_error,
        )

    def update(self, post_id, title: Optional[str] = None, content: Optional[str] = None, *, on_success=None, on_error=None):
        return self._mutate(
            lambda: self.api.update(str(post_id), title=title, content=content),
            lambda data: PostMutation(MutationKind.UPDATED, str(post_id), data),
            on_success,
            on_error,
        )

    def remove(self, post_id, *, on_success=None, on_error=None):
        return self._mutate(
            lambda: self.api.remove(str(post_id)),
            lambda data: PostMutation(MutationKind.REMOVED, str(data.get("id", post_id)), data),
            on_success,
            on_error,
        )

    def _mutate(self, call, to_event, on_success, on_error):
        try:
            data = call()
        except Exception as exc:
            if isinstance(exc, ProcedureError):
                logger.warning("mutation_failed: code=%s message=%s", exc.code, exc.message)
            else:
                logger.warning("mutation_failed: error=%r", exc)
            if on_error:
                on_error(exc)
            raise
        self.bus.publish(to_event(data))
        if on_success:
            on_success(data)
        return data
