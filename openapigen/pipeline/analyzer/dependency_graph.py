"""
Name/dependency graph over declarations.

Supports dependency-closed selection and a deterministic topological
emission order (ties broken by registration order).
"""

from __future__ import annotations

import heapq
from collections.abc import Iterable


class NameGraph:
    """Directed graph: declaration name -> names it references."""

    def __init__(self):
        self._edges: dict[str, set[str]] = {}
        self._order: dict[str, int] = {}

    def add(self, name: str, depends_on: Iterable[str] = (), order: int | None = None) -> None:
        """Add (or update) a node and its outgoing edges."""
        if name not in self._order:
            self._order[name] = len(self._order) if order is None else order
        self._edges.setdefault(name, set()).update(depends_on)

    def __contains__(self, name: str) -> bool:
        return name in self._edges

    def __len__(self) -> int:
        return len(self._edges)

    def closure(self, roots: Iterable[str], exclude: Iterable[str] = ()) -> set[str]:
        """
        Compute the transitive closure of roots over the dependency edges.

        Args:
            roots: Names to start from (unknown names are ignored)
            exclude: Names that are neither included nor followed

        Returns:
            Set of reachable, known names
        """
        excluded = set(exclude)
        closed: set[str] = set()
        stack = [r for r in roots if r in self._edges and r not in excluded]
        while stack:
            name = stack.pop()
            if name in closed:
                continue
            closed.add(name)
            for dep in self._edges[name]:
                if dep in self._edges and dep not in excluded and dep not in closed:
                    stack.append(dep)
        return closed

    def topological_order(self, names: Iterable[str]) -> list[str]:
        """
        Order names so that every name comes after the names it depends on.

        Kahn's algorithm with a min-heap on registration order. When only
        cycles remain, the earliest-registered name lying on a cycle is
        emitted next and its unmet dependencies become forward references.

        Args:
            names: The (closed) set of names to order

        Returns:
            Ordered list of names
        """
        selected = set(names)
        pending = {n: {d for d in self._edges.get(n, ()) if d in selected and d != n} for n in selected}
        dependents: dict[str, set[str]] = {n: set() for n in selected}
        for name, deps in pending.items():
            for dep in deps:
                dependents[dep].add(name)

        ready = [(self._order.get(n, 0), n) for n, deps in pending.items() if not deps]
        heapq.heapify(ready)
        remaining = set(selected)
        ordered: list[str] = []

        while remaining:
            if ready:
                _, name = heapq.heappop(ready)
                if name not in remaining:
                    continue
            else:
                name = self._cycle_breaker(remaining, pending)

            remaining.discard(name)
            ordered.append(name)
            for dependent in dependents[name]:
                deps = pending[dependent]
                if name in deps:
                    deps.discard(name)
                    if not deps and dependent in remaining:
                        heapq.heappush(ready, (self._order.get(dependent, 0), dependent))

        return ordered

    def _cycle_breaker(self, remaining: set[str], pending: dict[str, set[str]]) -> str:
        """Earliest-registered remaining name that can reach itself through pending edges."""
        candidates = sorted(remaining, key=lambda n: (self._order.get(n, 0), n))
        for name in candidates:
            if self._reaches(name, name, pending):
                return name
        return candidates[0]

    @staticmethod
    def _reaches(start: str, target: str, pending: dict[str, set[str]]) -> bool:
        seen: set[str] = set()
        stack = list(pending[start])
        while stack:
            name = stack.pop()
            if name == target:
                return True
            if name in seen:
                continue
            seen.add(name)
            stack.extend(pending[name])
        return False
