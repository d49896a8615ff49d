"""
Python client for the posts procedures with a query cache that is
invalidated by mutations.
"""
from .api import PostsApi, ProcedureError
from .cache import QueryCache
from .events import MutationBus, MutationKind, PostMutation
from .params import PostsParams
from .queries import PostQueries, all_posts_key, invalidate_on_mutation, post_key

__all__ = [
    "PostsApi",
    "ProcedureError",
    "QueryCache",
    "MutationBus",
    "MutationKind",
    "PostMutation",
    "PostsParams",
    "PostQueries",
    "all_posts_key",
    "post_key",
    "invalidate_on_mutation",
]
