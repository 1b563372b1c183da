"""
Кэш деревьев комментариев по постам (в памяти процесса)
"""

import logging
import time
from collections.abc import Callable, Sequence

from app.models.comment import Comment
from app.services.comment_tree import CommentArena
from core.config import get_settings

logger = logging.getLogger(__name__)


class CommentTreeCache:
    """Держит последнее подтверждённое сервером дерево комментариев каждого поста.

    Изменения применяются только после успешного ответа бэкенда; при конфликте
    запись инвалидируется и дерево загружается заново.
    """

    PREFIX = "comments:post"

    def __init__(self, ttl: int | None = None, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl if ttl is not None else get_settings().comment_cache_ttl
        self._clock = clock
        self._memory_cache: dict[str, tuple[float, CommentArena]] = {}

    def _key(self, post_id: str) -> str:
        return f"{self.PREFIX}:{post_id}"

    def get(self, post_id: str) -> CommentArena | None:
        """
        Получение дерева комментариев поста из кэша

        Args:
            post_id: ID поста

        Returns:
            Optional[CommentArena]: Дерево или None, если его нет или оно устарело
        """
        cache_key = self._key(post_id)
        cached = self._memory_cache.get(cache_key)
        if cached is None:
            logger.info("Comment cache miss", extra={"post_id": post_id})
            return None

        stored_at, arena = cached
        if self._clock() - stored_at > self.ttl:
            logger.info("Comment cache expired", extra={"post_id": post_id})
            del self._memory_cache[cache_key]
            return None

        logger.info("Comment cache hit", extra={"post_id": post_id, "count": len(arena)})
        return arena

    def set(self, post_id: str, tree: Sequence[Comment]) -> CommentArena:
        """Сохранить дерево, полученное от сервера, вместо прежнего."""
        arena = CommentArena.from_tree(tree)
        self._memory_cache[self._key(post_id)] = (self._clock(), arena)
        logger.info("Cached comment tree", extra={"post_id": post_id, "count": len(arena)})
        return arena

    def apply_comment(self, post_id: str, comment: Comment, parent_id: str | None = None) -> bool:
        """
        Добавить созданный сервером комментарий или ответ в закэшированное дерево

        Returns:
            bool: False, если дерева нет в кэше, родитель не найден или такой id уже есть
        """
        arena = self.get(post_id)
        if arena is None:
            return False

        if parent_id is None:
            applied = arena.add_comment(comment)
        else:
            applied = arena.insert_reply(parent_id, comment)

        if not applied:
            # Our copy is out of date; the next read refetches it
            logger.warning(
                "Comment could not be applied to cached tree",
                extra={"post_id": post_id, "parent_id": parent_id, "comment_id": comment.id},
            )
            self.invalidate(post_id)
        return applied

    def apply_removal(self, post_id: str, comment_id: str) -> bool:
        """Удалить комментарий и все ответы на него из закэшированного дерева."""
        arena = self.get(post_id)
        if arena is None:
            return False
        removed = arena.remove(comment_id)
        if not removed:
            logger.warning(
                "Deleted comment not found in cached tree",
                extra={"post_id": post_id, "comment_id": comment_id},
            )
            self.invalidate(post_id)
        return removed

    def invalidate(self, post_id: str) -> None:
        self._memory_cache.pop(self._key(post_id), None)
        logger.info("Invalidated comment cache", extra={"post_id": post_id})

    @property
    def size(self) -> int:
        """Число постов в кэше (включая устаревшие записи)"""
        return len(self._memory_cache)

    def clear(self) -> None:
        self._memory_cache.clear()


# Глобальный экземпляр кэша
comment_tree_cache = CommentTreeCache()


async def get_comment_tree_cache() -> CommentTreeCache:
    """Получение экземпляра кэша деревьев комментариев"""
    return comment_tree_cache
