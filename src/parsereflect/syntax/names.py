"""Name resolution for PHP namespaces and ``use`` imports.

Mirrors the host language rules:

- Class-like references resolve through class imports, then the current
  namespace. ``self``/``parent``/``static`` stay untouched.
- Constant references are resolved only when qualified or imported with
  ``use const``; an unqualified constant keeps its short name, since the
  runtime falls back from the namespace to the global scope.
- Builtin type names (``int``, ``array``, ...) are never namespaced.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from parsereflect.syntax.nodes import SPECIAL_CLASS_NAMES, Name

BUILTIN_TYPES = frozenset(
    {
        "array",
        "bool",
        "callable",
        "false",
        "float",
        "int",
        "iterable",
        "mixed",
        "never",
        "null",
        "object",
        "string",
        "true",
        "void",
    }
)


@dataclass
class NameScope:
    """Import table for one namespace section."""

    namespace: str = ""
    classes: dict[str, str] = field(default_factory=dict)  # lower-cased alias -> FQN
    functions: dict[str, str] = field(default_factory=dict)  # lower-cased alias -> FQN
    constants: dict[str, str] = field(default_factory=dict)  # alias (case-sensitive) -> FQN

    def add_use(self, kind: str, fq_name: str, alias: str | None = None) -> str:
        """Register an import and return the alias it is visible under."""
        fq_name = fq_name.lstrip("\\")
        alias = alias or fq_name.rsplit("\\", 1)[-1]
        if kind == "function":
            self.functions[alias.lower()] = fq_name
        elif kind == "const":
            self.constants[alias] = fq_name
        else:
            self.classes[alias.lower()] = fq_name
        return alias

    def _prefixed(self, name: str) -> str:
        return f"{self.namespace}\\{name}" if self.namespace else name

    def _resolve_qualified(self, raw: str) -> str:
        """Resolve a name that contains a namespace separator."""
        if raw.lower().startswith("namespace\\"):
            return self._prefixed(raw[len("namespace\\") :])
        first, _, rest = raw.partition("\\")
        imported = self.classes.get(first.lower())
        if imported is not None:
            return f"{imported}\\{rest}"
        return self._prefixed(raw)

    def resolve_class(self, raw: str) -> Name:
        """Resolve a class-like reference as written in source."""
        raw = raw.strip()
        if raw.startswith("\\"):
            return Name(raw[1:], fully_qualified=True)
        if raw.lower() in SPECIAL_CLASS_NAMES:
            return Name(raw.lower())
        if "\\" in raw:
            return Name(self._resolve_qualified(raw), fully_qualified=True)
        imported = self.classes.get(raw.lower())
        if imported is not None:
            return Name(imported, fully_qualified=True)
        return Name(self._prefixed(raw), fully_qualified=True)

    def resolve_constant(self, raw: str) -> Name:
        """Resolve a constant reference as written in source."""
        raw = raw.strip()
        if raw.startswith("\\"):
            return Name(raw[1:], fully_qualified=True)
        if "\\" in raw:
            return Name(self._resolve_qualified(raw), fully_qualified=True)
        imported = self.constants.get(raw)
        if imported is not None:
            return Name(imported, fully_qualified=True)
        return Name(raw)

    def resolve_type(self, raw: str) -> str:
        """Resolve a name used in a type declaration."""
        raw = raw.strip()
        if raw.lower() in BUILTIN_TYPES:
            return raw.lower()
        return self.resolve_class(raw).value
