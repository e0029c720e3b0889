"""
API Router Aggregator.

Combines all v1 API routers into a single router for the main app.
"""

from fastapi import APIRouter

from hirehiker.api.v1 import problems, sessions, messages, analysis, workspace, github

api_router = APIRouter()

# Include all v1 routers with their prefixes and tags
api_router.include_router(
    problems.router,
    prefix="/problems",
    tags=["Problems"],
)

api_router.include_router(
    sessions.router,
    prefix="/sessions",
    tags=["Sessions"],
)

api_router.include_router(
    messages.router,
    prefix="/sessions",
    tags=["Messages"],
)

api_router.include_router(
    analysis.router,
    prefix="/sessions",
    tags=["Analysis"],
)

api_router.include_router(
    workspace.router,
    prefix="/sessions",
    tags=["Workspace"],
)

api_router.include_router(
    github.router,
    prefix="/github",
    tags=["GitHub"],
)
