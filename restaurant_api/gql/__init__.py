"""
GraphQL Layer

Strawberry schema and the per-request context used by the FastAPI router.
"""

from restaurant_api.gql.context import GraphQLContext, get_context
from restaurant_api.gql.schema import build_schema, schema

__all__ = ["GraphQLContext", "get_context", "build_schema", "schema"]
