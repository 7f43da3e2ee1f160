from fastapi import APIRouter

router = APIRouter(prefix="/github", tags=["github"])

# Import route modules to register endpoints on the router
from reviewbot.github import webhooks  # noqa: E402, F401
