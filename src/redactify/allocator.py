"""
Generic name allocation for redactify.

Maps each declared identifier to a generic, index-based replacement and
remembers every mapping for the rest of the call.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

from .config import ChangeKind

# Names the surrounding ecosystem calls by name; never renamed
PRESERVED_NAMES: frozenset[str] = frozenset({
    # ECMAScript / React
    "constructor", "render", "componentDidMount", "componentDidUpdate",
    "componentWillUnmount", "shouldComponentUpdate", "getDerivedStateFromProps",
    "getSnapshotBeforeUpdate", "componentDidCatch", "useState", "useEffect",
    "useContext", "useReducer", "useCallback", "useMemo", "useRef",
    "useLayoutEffect", "toString", "valueOf", "toJSON", "then",
    # Python dunders
    "__init__", "__new__", "__del__", "__repr__", "__str__", "__eq__",
    "__hash__", "__len__", "__iter__", "__next__", "__enter__", "__exit__",
    "__call__", "__getattr__", "__setattr__", "__getitem__", "__setitem__",
    "__contains__", "__post_init__", "main",
    # PHP magic methods
    "__construct", "__destruct", "__get", "__set", "__isset", "__unset",
    "__toString", "__invoke", "__clone", "__sleep", "__wakeup",
    # C# / Java
    "Main", "ToString", "Equals", "GetHashCode", "Dispose", "equals", "hashCode",
})

_CONSTANT_RE = re.compile(r"^(?=[A-Z0-9_]*[A-Z])[A-Z_][A-Z0-9_]*$")


def variable_template(identifier: str) -> str:
    """Case-based generic name prefix for a variable."""
    if _CONSTANT_RE.match(identifier):
        return "CONSTANT_"
    if identifier[:1].isupper():
        return "Variable"
    if identifier.startswith("_"):
        return "_variable"
    return "variable"


class NameAllocator:
    """
    Allocates generic names and holds the rename mapping for one call.

    The mapping is append-only: once an identifier is claimed under one
    category it keeps its generic name. A generated name that is already
    used as a token in the original text, or was already handed out, gets a
    numeric suffix so two identifiers never merge into one.
    """

    def __init__(self, original_tokens: Iterable[str] = ()):
        self.mapping: dict[str, str] = {}
        self._taken: set[str] = set(original_tokens)
        self._issued: set[str] = set()

    def candidates(self, identifiers: Iterable[str]) -> list[str]:
        """Identifiers still eligible for allocation, in order."""
        return [
            name for name in identifiers
            if name not in self.mapping and name not in PRESERVED_NAMES
        ]

    def allocate(self, identifier: str, ordinal: int, kind: ChangeKind) -> str:
        """Return the generic name for ``identifier``, creating it if needed."""
        if identifier in self.mapping:
            return self.mapping[identifier]

        if kind is ChangeKind.CLASS:
            base = f"GenericClass{ordinal}"
        elif kind is ChangeKind.FUNCTION:
            base = f"genericFunction{ordinal}"
        else:
            base = f"{variable_template(identifier)}{ordinal}"

        generic = base
        suffix = 2
        while generic in self._issued or (generic in self._taken and generic != identifier):
            generic = f"{base}_{suffix}"
            suffix += 1

        self._issued.add(generic)
        self.mapping[identifier] = generic
        return generic
