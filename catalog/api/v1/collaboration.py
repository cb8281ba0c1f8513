"""
Collaboration endpoints - comments and reactions on projects.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from catalog.api.deps import CurrentUser, DbSession, Hub
from catalog.kernel.collaboration.collaboration_service import CollaborationService
from catalog.kernel.models.collaboration import Comment
from catalog.schemas.collaboration import CommentCreate, CommentResponse, ReactionResponse
from catalog.schemas.common import SuccessResponse

router = APIRouter()


def _comment_response(comment: Comment) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        project_id=comment.project_id,
        author_id=comment.author_id,
        author_name=comment.author.full_name if comment.author else None,
        content=comment.content,
        created_at=comment.created_at,
    )


@router.post(
    "/projects/{project_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    project_id: uuid.UUID,
    data: CommentCreate,
    user: CurrentUser,
    db: DbSession,
    hub: Hub,
):
    """Comment on a project; the owner is notified unless they are an admin."""
    comment = await CollaborationService(db, hub.bus).create_comment(project_id, user.id, data.content)
    return _comment_response(comment)


@router.get("/projects/{project_id}/comments", response_model=List[CommentResponse])
async def list_comments(project_id: uuid.UUID, user: CurrentUser, db: DbSession, hub: Hub):
    """Comments on a project, newest first."""
    comments = await CollaborationService(db, hub.bus).list_comments(project_id)
    return [_comment_response(c) for c in comments]


@router.delete("/comments/{comment_id}", response_model=SuccessResponse)
async def delete_comment(comment_id: uuid.UUID, user: CurrentUser, db: DbSession, hub: Hub):
    """Delete one of the caller's own comments."""
    await CollaborationService(db, hub.bus).delete_comment(comment_id, user.id)
    return SuccessResponse(message="Comment deleted")


@router.post("/projects/{project_id}/reactions", response_model=ReactionResponse)
async def toggle_reaction(project_id: uuid.UUID, user: CurrentUser, db: DbSession, hub: Hub):
    """React to a project, or withdraw the reaction if already given."""
    state = await CollaborationService(db, hub.bus).toggle_reaction(project_id, user.id)
    return ReactionResponse(
        project_id=state.project_id,
        user_id=state.user_id,
        reacted=state.reacted,
        total_reactions=state.total_reactions,
    )
