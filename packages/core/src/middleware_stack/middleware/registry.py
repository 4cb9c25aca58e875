"""MiddlewareStack — ordered, mutable registry folded into a handler chain."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..instrumentation import get_notifier
from ..primitives.exceptions import FrozenStackError, UnknownMiddlewareError
from .definition import MiddlewareDefinition
from .pipeline import build_chain
from .proxy import EVENT_NAME

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Sequence

    from ..ports.notifier import INotifier

logger = logging.getLogger(__name__)


class MiddlewareStack:
    """Collects middleware definitions in order and builds the call chain.

    Entries are identified by key (usually the middleware class), never by
    object identity; duplicate keys are allowed and lookups resolve to the
    first match. The first entry becomes the outermost wrapper.

    The stack has two phases. During configuration any mutation may be
    called; :meth:`build` freezes the entries, after which every mutation
    raises :class:`FrozenStackError`. :meth:`copy` returns an unfrozen copy.
    """

    def __init__(
        self, configure: Callable[[MiddlewareStack], None] | None = None
    ) -> None:
        self._middlewares: list[MiddlewareDefinition] | tuple[
            MiddlewareDefinition, ...
        ] = []
        if configure is not None:
            configure(self)

    # ── Inspection ───────────────────────────────────────────────

    @property
    def middlewares(self) -> tuple[MiddlewareDefinition, ...]:
        """Snapshot of the current entries, outermost first."""
        return tuple(self._middlewares)

    @property
    def frozen(self) -> bool:
        return isinstance(self._middlewares, tuple)

    @property
    def last(self) -> MiddlewareDefinition | None:
        return self._middlewares[-1] if self._middlewares else None

    def __iter__(self) -> Iterator[MiddlewareDefinition]:
        return iter(tuple(self._middlewares))

    def __len__(self) -> int:
        return len(self._middlewares)

    def __getitem__(self, index: int) -> MiddlewareDefinition:
        return self._middlewares[index]

    def __contains__(self, reference: object) -> bool:
        return any(m == reference for m in self._middlewares)

    def __repr__(self) -> str:
        names = ", ".join(m.display_name for m in self._middlewares)
        return f"MiddlewareStack([{names}])"

    # ── Registration ─────────────────────────────────────────────

    def use(
        self,
        middleware: Any,
        /,
        *args: Any,
        block: Callable[..., Any] | None = None,
        **options: Any,
    ) -> None:
        """Append a middleware, making it the innermost one so far.

        Parameters
        ----------
        middleware:
            The key: a class (or other callable) invoked as
            ``middleware(app, *args, **options)`` at build time.
        *args, **options:
            Captured now and passed verbatim to the constructor.
        block:
            Optional callable passed to the constructor as ``block=``.
        """
        entries = self._entries("use")
        entries.append(self._definition(middleware, args, options, block))
        self._log_insert(entries, len(entries) - 1)

    def unshift(
        self,
        middleware: Any,
        /,
        *args: Any,
        block: Callable[..., Any] | None = None,
        **options: Any,
    ) -> None:
        """Prepend a middleware, making it the outermost one."""
        entries = self._entries("unshift")
        entries.insert(0, self._definition(middleware, args, options, block))
        self._log_insert(entries, 0)

    def insert(
        self,
        index: Any,
        middleware: Any,
        /,
        *args: Any,
        block: Callable[..., Any] | None = None,
        **options: Any,
    ) -> None:
        """Insert a middleware right before *index* (a position or a key).

        An integer equal to ``len(stack)`` appends. Raises
        :class:`UnknownMiddlewareError` when *index* does not resolve.
        """
        entries = self._entries("insert")
        position = self._assert_index(
            entries, index, "insert before", allow_end=True
        )
        entries.insert(position, self._definition(middleware, args, options, block))
        self._log_insert(entries, position)

    insert_before = insert

    def insert_after(
        self,
        index: Any,
        middleware: Any,
        /,
        *args: Any,
        block: Callable[..., Any] | None = None,
        **options: Any,
    ) -> None:
        """Insert a middleware right after the entry at *index* (a position or a key)."""
        entries = self._entries("insert")
        position = self._assert_index(entries, index, "insert after") + 1
        entries.insert(position, self._definition(middleware, args, options, block))
        self._log_insert(entries, position)

    def swap(
        self,
        target: Any,
        middleware: Any,
        /,
        *args: Any,
        block: Callable[..., Any] | None = None,
        **options: Any,
    ) -> None:
        """Replace the entry at *target* with a new middleware, keeping its position."""
        entries = self._entries("swap")
        position = self._assert_index(entries, target, "swap")
        replaced = entries[position]
        entries[position] = self._definition(middleware, args, options, block)
        logger.debug(
            "Swapped middleware %s for %s at index %d",
            replaced.display_name,
            entries[position].display_name,
            position,
        )

    def delete(self, target: Any) -> int:
        """Remove every entry whose key equals *target*; return how many."""
        entries = self._entries("delete")
        kept = [m for m in entries if m != target]
        removed = len(entries) - len(kept)
        entries[:] = kept
        logger.debug("Deleted %d middleware entries matching %r", removed, target)
        return removed

    def move(self, target: Any, source: Any) -> None:
        """Move the entry at *source* to just before the entry at *target*.

        Both references are positions or keys; *target* is resolved after
        *source* has been taken out. On failure the stack is left untouched.
        """
        entries = list(self._entries("move"))
        moved = entries.pop(self._assert_index(entries, source, "move"))
        position = self._assert_index(entries, target, "move before", allow_end=True)
        entries.insert(position, moved)
        self._middlewares = entries
        self._log_insert(entries, position)

    move_before = move

    def move_after(self, target: Any, source: Any) -> None:
        """Move the entry at *source* to just after the entry at *target*."""
        entries = list(self._entries("move"))
        moved = entries.pop(self._assert_index(entries, source, "move"))
        position = self._assert_index(entries, target, "move after") + 1
        entries.insert(position, moved)
        self._middlewares = entries
        self._log_insert(entries, position)

    def add(
        self,
        middleware: type[Any] | None = None,
        *,
        block: Callable[..., Any] | None = None,
        **options: Any,
    ) -> Any:
        """Decorator-style :meth:`use`.

        Usage::

            @stack.add
            class RequestId: ...

            @stack.add(header="X-Request-Id")
            class RequestId: ...
        """
        if middleware is None:

            def wrapper(cls: type[Any]) -> type[Any]:
                self.use(cls, block=block, **options)
                return cls

            return wrapper

        self.use(middleware, block=block, **options)
        return middleware

    def clear(self) -> None:
        """Remove all entries."""
        self._entries("clear").clear()

    # ── Building ─────────────────────────────────────────────────

    def build(self, app: Any, *, notifier: INotifier | None = None) -> Any:
        """Freeze the stack and fold it into a handler chain ending at *app*.

        The notifier (the context default when omitted) is asked once whether
        anything listens for :data:`EVENT_NAME`; if so every layer is wrapped
        in an instrumentation proxy. Constructor errors abort the build.
        May be called repeatedly; each call builds fresh instances.
        """
        if not self.frozen:
            self._middlewares = tuple(self._middlewares)
        if notifier is None:
            notifier = get_notifier()
        instrumenting = notifier.is_subscribed(EVENT_NAME)
        chain = build_chain(
            self._middlewares, app, notifier=notifier if instrumenting else None
        )
        logger.debug(
            "Built middleware chain of %d layer(s) (instrumented=%s)",
            len(self._middlewares),
            instrumenting,
        )
        return chain

    def copy(self) -> MiddlewareStack:
        """Return an unfrozen stack with an independent entry sequence."""
        duplicate = type(self)()
        duplicate._middlewares = list(self._middlewares)
        return duplicate

    __copy__ = copy

    # ── Internals ────────────────────────────────────────────────

    def _entries(self, operation: str) -> list[MiddlewareDefinition]:
        if isinstance(self._middlewares, tuple):
            raise FrozenStackError(operation)
        return self._middlewares

    @staticmethod
    def _definition(
        middleware: Any,
        args: tuple[Any, ...],
        options: dict[str, Any],
        block: Callable[..., Any] | None,
    ) -> MiddlewareDefinition:
        return MiddlewareDefinition(middleware, args, options, block)

    @staticmethod
    def _assert_index(
        entries: Sequence[MiddlewareDefinition],
        reference: Any,
        operation: str,
        *,
        allow_end: bool = False,
    ) -> int:
        """Resolve a position or key to an index, or raise.

        Integers must address an existing entry (or, with *allow_end*, the
        slot after the last one); negative integers count from the end.
        """
        if isinstance(reference, int) and not isinstance(reference, bool):
            index = reference + len(entries) if reference < 0 else reference
            upper = len(entries) if allow_end else len(entries) - 1
            if 0 <= index <= upper:
                return index
            raise UnknownMiddlewareError(reference, operation)
        for index, entry in enumerate(entries):
            if entry == reference:
                return index
        raise UnknownMiddlewareError(reference, operation)

    @staticmethod
    def _log_insert(entries: Sequence[MiddlewareDefinition], index: int) -> None:
        logger.debug(
            "Registered middleware %s at index %d", entries[index].display_name, index
        )
