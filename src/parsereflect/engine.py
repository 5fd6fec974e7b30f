"""Reflection engine: locate, parse and extract syntax fragments.

One ``ReflectionEngine`` instance holds the immutable collaborators (parser,
locator, host environment) and the mutable bounded ``SourceCache``. Every
reflection object keeps a reference to the engine that created it.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

from parsereflect.cache import SourceCache, canonical_path
from parsereflect.config.models import ReflectConfig
from parsereflect.core.errors import NotFoundError, ParseReflectError
from parsereflect.host import HostEnvironment
from parsereflect.locator import Locator
from parsereflect.syntax.nodes import (
    ClassConstStatement,
    ClassLikeNode,
    ConstDeclarator,
    Expr,
    FileSyntaxTree,
    MethodNode,
    NamespaceNode,
    PropertyDeclarator,
    PropertyStatement,
)
from parsereflect.syntax.treesitter import PhpParser

if TYPE_CHECKING:
    from parsereflect.reflection.class_like import ClassLike
    from parsereflect.reflection.file import ReflectionFile, ReflectionFileNamespace

log = structlog.get_logger(__name__)


class ReflectionEngine:
    """
    Entry point for static reflection.

    Usage::

        engine = ReflectionEngine(Psr4Locator.from_composer_json("composer.json"))
        cls = engine.get_class("App\\Model\\User")
        cls.get_constants()

        # Reflect unsaved content without touching the cache
        file = engine.get_file("src/Draft.php", content=editor_buffer)
    """

    def __init__(
        self,
        locator: Locator,
        *,
        parser: PhpParser | None = None,
        host: HostEnvironment | None = None,
        max_cached_files: int | None = None,
    ) -> None:
        self._locator = locator
        self._parser = parser or PhpParser()
        self._host = host or HostEnvironment.default()
        self._cache = SourceCache(max_cached_files)
        self._active = threading.local()

    @classmethod
    def from_config(
        cls,
        locator: Locator,
        config: ReflectConfig | None = None,
        *,
        parser: PhpParser | None = None,
    ) -> ReflectionEngine:
        """Build an engine from loaded settings (cache size, host constants)."""
        config = config or ReflectConfig()
        return cls(
            locator,
            parser=parser,
            host=HostEnvironment.default(config.host.constants),
            max_cached_files=config.cache.max_cached_files,
        )

    @property
    def locator(self) -> Locator:
        return self._locator

    @property
    def host(self) -> HostEnvironment:
        return self._host

    @property
    def cache(self) -> SourceCache:
        return self._cache

    def set_maximum_cached_files(self, limit: int | None) -> None:
        """Change cache capacity, dropping the oldest files if over it."""
        self._cache.resize(limit)

    # ------------------------------------------------------------------
    # Locating and parsing
    # ------------------------------------------------------------------

    def locate_class_file(self, class_name: str) -> str:
        """Return the file declaring a class.

        Raises:
            NotFoundError: The locator does not know the class.
        """
        file_name = self._locator.locate_class(class_name.lstrip("\\"))
        if not file_name:
            raise NotFoundError.class_not_located(class_name)
        return file_name

    def parse_file(self, file_name: str | Path, content: bytes | str | None = None) -> FileSyntaxTree:
        """Parse a file, serving repeated requests from the cache.

        Explicit ``content`` always re-parses and never populates the cache.
        """
        path = canonical_path(file_name)
        if content is not None:
            log.debug("source_parsed_inline", file=path)
            return self._parser.parse(content, path)

        tree, hit = self._cache.get_or_parse(
            path, lambda key: self._parser.parse(Path(key).read_bytes(), key)
        )
        log.debug("source_cache_hit" if hit else "source_cache_miss", file=path)
        return tree

    def parse_file_namespace(self, file_name: str | Path, namespace_name: str) -> NamespaceNode:
        """Return the first namespace section named ``namespace_name``.

        Raises:
            NotFoundError: The file has no such section.
        """
        tree = self.parse_file(file_name)
        wanted = namespace_name.strip("\\").lower()
        for namespace in tree.namespaces:
            if namespace.name.lower() == wanted:
                return namespace
        raise NotFoundError.namespace_not_found(namespace_name, str(file_name))

    def parse_class(self, class_name: str) -> ClassLikeNode:
        """Locate and parse a class-like; the node carries its file path.

        Raises:
            NotFoundError: The class can not be located or is absent from its file.
        """
        class_name = class_name.lstrip("\\")
        file_name = self.locate_class_file(class_name)
        namespace_name, _, short_name = class_name.rpartition("\\")
        try:
            namespace = self.parse_file_namespace(file_name, namespace_name)
        except NotFoundError as e:
            raise NotFoundError.class_not_in_file(class_name, file_name) from e

        wanted = short_name.lower()
        for stmt in namespace.stmts:
            if isinstance(stmt, ClassLikeNode) and stmt.name.lower() == wanted:
                return stmt
        raise NotFoundError.class_not_in_file(class_name, file_name)

    def parse_class_method(self, class_name: str, method_name: str) -> MethodNode:
        """Return a method declared directly in the class (no inheritance)."""
        node = self.parse_class(class_name)
        wanted = method_name.lower()
        for stmt in node.stmts:
            if isinstance(stmt, MethodNode) and stmt.name.lower() == wanted:
                return stmt
        raise NotFoundError.method_not_found(class_name, method_name)

    def parse_class_property(
        self, class_name: str, property_name: str
    ) -> tuple[PropertyStatement, PropertyDeclarator]:
        """Return the property statement (modifiers) and its declarator."""
        node = self.parse_class(class_name)
        for stmt in node.stmts:
            if isinstance(stmt, PropertyStatement):
                for prop in stmt.props:
                    if prop.name == property_name:
                        return stmt, prop
        raise NotFoundError.property_not_found(class_name, property_name)

    def parse_class_constant(
        self, class_name: str, constant_name: str
    ) -> tuple[ClassConstStatement, ConstDeclarator]:
        """Return the constant statement (modifiers) and its declarator."""
        node = self.parse_class(class_name)
        for stmt in node.stmts:
            if isinstance(stmt, ClassConstStatement):
                for const in stmt.consts:
                    if const.name == constant_name:
                        return stmt, const
        raise NotFoundError.constant_not_found(class_name, constant_name)

    def parse_expression(self, code: str, namespace: str = "") -> Expr:
        """Parse an expression given as text, e.g. a default value."""
        return self._parser.parse_expression(code, namespace)

    # ------------------------------------------------------------------
    # Reflection factories
    # ------------------------------------------------------------------

    def get_class(self, class_name: str) -> ClassLike:
        """Reflect a class-like, preferring the host's own built-ins."""
        from parsereflect.reflection.class_like import ReflectionClass

        native = self._host.get_class(class_name)
        if native is not None:
            return native
        return ReflectionClass(self, class_name)

    def get_file(self, file_name: str | Path, content: bytes | str | None = None) -> ReflectionFile:
        from parsereflect.reflection.file import ReflectionFile

        return ReflectionFile(self, canonical_path(file_name), self.parse_file(file_name, content))

    def get_file_namespace(self, file_name: str | Path, namespace_name: str) -> ReflectionFileNamespace:
        from parsereflect.reflection.file import ReflectionFileNamespace

        path = canonical_path(file_name)
        return ReflectionFileNamespace(self, path, self.parse_file_namespace(path, namespace_name))

    # ------------------------------------------------------------------
    # Cycle detection
    # ------------------------------------------------------------------

    def resolving(
        self, kind: str, key: str, on_cycle: Callable[[], ParseReflectError]
    ) -> _ResolvingGuard:
        """Mark ``key`` as in progress for ``kind`` on the current call chain.

        Raises the error built by ``on_cycle`` when ``key`` is already in
        progress, instead of recursing forever.
        """
        active: dict[str, set[str]] | None = getattr(self._active, "sets", None)
        if active is None:
            active = self._active.sets = {}
        return _ResolvingGuard(active.setdefault(kind, set()), key.lower(), on_cycle)


class _ResolvingGuard:
    """Context manager for ``ReflectionEngine.resolving``; never touches a raised error."""

    def __init__(
        self, in_progress: set[str], key: str, on_cycle: Callable[[], ParseReflectError]
    ) -> None:
        self._in_progress = in_progress
        self._key = key
        self._on_cycle = on_cycle

    def __enter__(self) -> None:
        if self._key in self._in_progress:
            raise self._on_cycle()
        self._in_progress.add(self._key)

    def __exit__(self, *exc_info: object) -> bool:
        self._in_progress.discard(self._key)
        return False
