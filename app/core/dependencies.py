"""
FastAPI dependency injection utilities.

Provides reusable dependencies for authentication and for the per-user
review workspace.
"""

from typing import Annotated

from fastapi import Depends, Request

from app.core.auth import get_bearer_token, get_current_user, require_role
from app.core.config import Settings, get_settings
from app.core.logging import LoggerMixin
from app.domain.models.transaction import CurrentUser
from app.services.review_workspace import ReviewWorkspace


class WorkspaceRegistry(LoggerMixin):
    """Keeps one review workspace per signed-in employee.

    A workspace is bound to the token it was opened with; a new token for
    the same user closes the old workspace and opens a fresh one.
    """

    def __init__(self, settings: Settings, gateway):
        self.settings = settings
        self.gateway = gateway
        self._workspaces: dict[str, tuple[str, ReviewWorkspace]] = {}

    def get(self, user: CurrentUser, token: str) -> ReviewWorkspace:
        entry = self._workspaces.get(user.user_id)
        if entry is not None:
            bound_token, workspace = entry
            if bound_token == token and not workspace.closed:
                return workspace
            workspace.close()

        review = self.settings.review
        workspace = ReviewWorkspace(
            self.gateway.with_token(token),
            user,
            required_role=review.required_role,
            tz=review.tzinfo,
            max_batch_size=review.max_batch_size,
            dashboard_preview_size=review.dashboard_preview_size,
        )
        self._workspaces[user.user_id] = (token, workspace)
        self.logger.info("review_workspace_opened", user_id=user.user_id)
        return workspace

    def discard(self, user_id: str) -> None:
        entry = self._workspaces.pop(user_id, None)
        if entry is not None:
            entry[1].close()
            self.logger.info("review_workspace_closed", user_id=user_id)

    def close_all(self) -> None:
        for _, workspace in self._workspaces.values():
            workspace.close()
        self._workspaces.clear()


def require_employee(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """
    Dependency that enforces the employee role required by the review workflow.

    Raises:
        ForbiddenError: If user lacks required role
    """
    return require_role(get_settings().review.required_role)(user)


def get_workspace_registry(request: Request) -> WorkspaceRegistry:
    return request.app.state.workspaces


def get_workspace(
    request: Request,
    user: CurrentUser = Depends(require_employee),
    token: str = Depends(get_bearer_token),
) -> ReviewWorkspace:
    return get_workspace_registry(request).get(user, token)


RequireEmployee = Annotated[CurrentUser, Depends(require_employee)]
Workspace = Annotated[ReviewWorkspace, Depends(get_workspace)]
