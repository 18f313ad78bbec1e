"""Dependency injection helpers for FastAPI routes.

Application-wide objects (registry, service context, session factory) live
in ``app.state``; sessions are created per request.
"""

from collections.abc import Generator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from mdd_rest.database import session_scope
from mdd_rest.registry import ModelInfoRegistry
from mdd_rest.services import ServiceContext


def get_session(request: Request) -> Generator[Session, None, None]:
    """Dependency yielding the request's database session.

    The session is committed when the route succeeds and rolled back when
    it raises.

    Raises:
        RuntimeError: If the session factory is not initialized
    """
    session_factory = getattr(request.app.state, "session_factory", None)
    if session_factory is None:
        raise RuntimeError("Session factory not initialized. Check lifespan setup.")
    yield from session_scope(session_factory)


def get_service_context(request: Request) -> ServiceContext:
    """Dependency injection for ServiceContext from app.state.

    Args:
        request: FastAPI Request object

    Returns:
        The ServiceContext instance from app.state

    Raises:
        RuntimeError: If the context is not initialized
    """
    context = getattr(request.app.state, "service_context", None)
    if context is None:
        raise RuntimeError("ServiceContext not initialized. Check create_app setup.")
    return context


def get_registry(context: Annotated[ServiceContext, Depends(get_service_context)]) -> ModelInfoRegistry:
    return context.registry


# Type aliases for cleaner dependency injection
SessionDep = Annotated[Session, Depends(get_session)]
ContextDep = Annotated[ServiceContext, Depends(get_service_context)]
RegistryDep = Annotated[ModelInfoRegistry, Depends(get_registry)]
