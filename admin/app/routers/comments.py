import logging

from fastapi import APIRouter, Depends, status

from admin.app.schemas import CommentCreate, CommentsResponse
from app.models.comment import Comment
from app.services.comment_tree import CommentArena
from core.backend import BackendAPIError, BackendClient, get_backend, to_http_exception
from core.cache_service import CommentTreeCache, get_comment_tree_cache

router = APIRouter()
logger = logging.getLogger(__name__)

# Backend answers that mean our cached tree no longer matches the server
CONFLICT_STATUSES = {404, 409}


async def _load_tree(post_id: str, backend: BackendClient, cache: CommentTreeCache) -> CommentArena:
    arena = cache.get(post_id)
    if arena is not None:
        return arena
    try:
        raw = await backend.comments(post_id)
    except BackendAPIError as e:
        raise to_http_exception(e) from e
    return cache.set(post_id, [Comment.model_validate(c) for c in raw])


@router.get("/{post_id}", response_model=CommentsResponse)
async def get_comments(
    post_id: str,
    backend: BackendClient = Depends(get_backend),
    cache: CommentTreeCache = Depends(get_comment_tree_cache),
):
    """Дерево комментариев поста"""
    arena = await _load_tree(post_id, backend, cache)
    return {
        "post_id": post_id,
        "count": arena.top_level_count,
        "total": len(arena),
        "comments": arena.to_tree(),
    }


@router.post("/{post_id}", response_model=Comment, status_code=status.HTTP_201_CREATED)
async def create_comment(
    post_id: str,
    data: CommentCreate,
    backend: BackendClient = Depends(get_backend),
    cache: CommentTreeCache = Depends(get_comment_tree_cache),
):
    """Создаёт комментарий или ответ; дерево в кэше меняется только после ответа сервера"""
    try:
        created = await backend.create_comment(
            post_id, data.name, data.message, data.parent_id, data.is_admin
        )
    except BackendAPIError as e:
        if e.status_code in CONFLICT_STATUSES:
            cache.invalidate(post_id)
        raise to_http_exception(e) from e

    comment = Comment.model_validate(created)
    cache.apply_comment(post_id, comment, data.parent_id)
    logger.info(
        "Comment created",
        extra={"post_id": post_id, "comment_id": comment.id, "parent_id": data.parent_id},
    )
    return comment


@router.delete("/{post_id}/{comment_id}")
async def delete_comment(
    post_id: str,
    comment_id: str,
    backend: BackendClient = Depends(get_backend),
    cache: CommentTreeCache = Depends(get_comment_tree_cache),
):
    """Удаляет комментарий вместе со всеми ответами"""
    try:
        await backend.delete_comment(comment_id)
    except BackendAPIError as e:
        if e.status_code in CONFLICT_STATUSES:
            cache.invalidate(post_id)
        raise to_http_exception(e) from e

    cache.apply_removal(post_id, comment_id)
    logger.info("Comment deleted", extra={"post_id": post_id, "comment_id": comment_id})
    return {"message": "Comment deleted successfully"}


@router.post("/{post_id}/refresh", response_model=CommentsResponse)
async def refresh_comments(
    post_id: str,
    backend: BackendClient = Depends(get_backend),
    cache: CommentTreeCache = Depends(get_comment_tree_cache),
):
    """Сбрасывает кэш и загружает дерево с сервера заново"""
    cache.invalidate(post_id)
    return await get_comments(post_id, backend, cache)
