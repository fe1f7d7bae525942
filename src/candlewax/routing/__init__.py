"""URL routing, parameter binding, and dispatch outcomes."""

from candlewax.routing.outcomes import Forward, Outcome, Redirect, Render
from candlewax.routing.params import ParamResolver, type_cast_from_string
from candlewax.routing.route import DispatchTarget, RouteDescriptor
from candlewax.routing.router import Router, routes_from

__all__ = [
    "DispatchTarget",
    "Forward",
    "Outcome",
    "ParamResolver",
    "Redirect",
    "Render",
    "RouteDescriptor",
    "Router",
    "routes_from",
    "type_cast_from_string",
]
