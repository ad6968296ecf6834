"""
GraphQL Schema

Merges the per-area query and mutation types into one Strawberry schema.
Outside development, messages of unexpected errors are masked; application
errors (RestaurantAPIError) keep their message.
"""

import strawberry
from graphql import GraphQLError
from strawberry.extensions import MaskErrors
from strawberry.tools import merge_types

from restaurant_api.core.config import get_settings
from restaurant_api.core.errors import RestaurantAPIError
from restaurant_api.gql.auth import AuthMutation, AuthQuery
from restaurant_api.gql.catalog import CatalogMutation, CatalogQuery
from restaurant_api.gql.ordering import OrderingMutation, OrderingQuery
from restaurant_api.gql.restaurant import RestaurantMutation, RestaurantQuery
from restaurant_api.gql.team import TeamMutation, TeamQuery

Query = merge_types(
    "Query",
    (RestaurantQuery, CatalogQuery, OrderingQuery, TeamQuery, AuthQuery),
)
Mutation = merge_types(
    "Mutation",
    (RestaurantMutation, CatalogMutation, OrderingMutation, TeamMutation, AuthMutation),
)


def should_mask_error(error: GraphQLError) -> bool:
    return not isinstance(error.original_error, RestaurantAPIError)


def build_schema(mask_errors: bool = False) -> strawberry.Schema:
    extensions = []
    if mask_errors:
        extensions.append(
            MaskErrors(should_mask_error=should_mask_error, error_message="Unexpected error.")
        )
    return strawberry.Schema(query=Query, mutation=Mutation, extensions=extensions)


schema = build_schema(mask_errors=get_settings().use_real_services)
