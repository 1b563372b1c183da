"""Editing of nested comment trees after the backend confirmed a change.

Two flavours are provided:

* `insert_reply` / `remove_node` work on the nested list returned by
  `GET /comments/{post_id}` and return a new list, leaving the input intact.
* `CommentArena` keeps the same tree as an index of nodes keyed by id with
  parent and children lists, so inserts and removals touch only the affected
  entries. It is rebuilt from the server representation whenever the cached
  copy is refetched.
"""
from __future__ import annotations

from collections.abc import Iterator, Sequence

from app.models.comment import Comment


def _as_leaf(comment: Comment) -> Comment:
    # A fresh reply never carries replies of its own
    return comment.model_copy(update={"replies": []})


def insert_reply(tree: Sequence[Comment], parent_id: str, reply: Comment) -> list[Comment]:
    """Добавить ответ в конец `replies` первого узла с `parent_id` (обход в глубину).

    Если узел не найден, дерево возвращается без изменений.
    """
    new_tree, _ = _insert(tree, parent_id, _as_leaf(reply))
    return new_tree


def _insert(
    nodes: Sequence[Comment], parent_id: str, reply: Comment
) -> tuple[list[Comment], bool]:
    result = list(nodes)
    for i, node in enumerate(result):
        if node.id == parent_id:
            result[i] = node.model_copy(update={"replies": [*node.replies, reply]})
            return result, True
        if node.replies:
            replies, found = _insert(node.replies, parent_id, reply)
            if found:
                result[i] = node.model_copy(update={"replies": replies})
                return result, True
    return result, False


def remove_node(tree: Sequence[Comment], target_id: str) -> list[Comment]:
    """Удалить все узлы с `target_id` вместе с их поддеревьями на любой глубине."""
    result = []
    for node in tree:
        if node.id == target_id:
            continue
        if node.replies:
            replies = remove_node(node.replies, target_id)
            if len(replies) != len(node.replies) or any(
                a is not b for a, b in zip(replies, node.replies)
            ):
                node = node.model_copy(update={"replies": replies})
        result.append(node)
    return result


def iter_comments(tree: Sequence[Comment]) -> Iterator[Comment]:
    """Depth-first walk over every comment of the tree."""
    for node in tree:
        yield node
        yield from iter_comments(node.replies)


class CommentArena:
    """Comment tree stored as nodes keyed by id.

    `_nodes` holds each comment without its replies; `_children` holds ordered
    child ids, with the key `None` standing for the top level.
    """

    def __init__(self) -> None:
        self._nodes: dict[str, Comment] = {}
        self._parent: dict[str, str | None] = {}
        self._children: dict[str | None, list[str]] = {None: []}

    @classmethod
    def from_tree(cls, tree: Sequence[Comment]) -> CommentArena:
        arena = cls()
        for node in tree:
            arena._add(node, None)
        return arena

    def _add(self, comment: Comment, parent_id: str | None) -> bool:
        # Duplicate ids keep the first occurrence, as depth-first lookup would
        if comment.id in self._nodes:
            return False
        self._nodes[comment.id] = comment.model_copy(update={"replies": []})
        self._parent[comment.id] = parent_id
        self._children[comment.id] = []
        self._children[parent_id].append(comment.id)
        for reply in comment.replies:
            self._add(reply, comment.id)
        return True

    def __contains__(self, comment_id: object) -> bool:
        return comment_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    @property
    def top_level_count(self) -> int:
        return len(self._children[None])

    def get(self, comment_id: str) -> Comment | None:
        node = self._nodes.get(comment_id)
        if node is None:
            return None
        return node.model_copy(update={"replies": self._build(comment_id)})

    def parent_of(self, comment_id: str) -> str | None:
        return self._parent.get(comment_id)

    def add_comment(self, comment: Comment) -> bool:
        """Append a new top-level comment. Returns False if the id is already present."""
        return self._add(comment, None)

    def insert_reply(self, parent_id: str, reply: Comment) -> bool:
        """Append `reply` (without replies of its own) under `parent_id`.

        Returns False if the parent is unknown or the reply is already present.
        """
        if parent_id not in self._nodes:
            return False
        return self._add(_as_leaf(reply), parent_id)

    def remove(self, comment_id: str) -> bool:
        """Drop a comment with its whole subtree. Returns False if it is unknown."""
        if comment_id not in self._nodes:
            return False
        parent_id = self._parent[comment_id]
        self._children[parent_id].remove(comment_id)
        stack = [comment_id]
        while stack:
            current = stack.pop()
            stack.extend(self._children.pop(current, []))
            self._nodes.pop(current, None)
            self._parent.pop(current, None)
        return True

    def to_tree(self) -> list[Comment]:
        return self._build(None)

    def _build(self, parent_id: str | None) -> list[Comment]:
        return [
            self._nodes[child_id].model_copy(update={"replies": self._build(child_id)})
            for child_id in self._children[parent_id]
        ]
