"""
InfOpt Deletion Planning - Dependents-First Ordering
====================================================

A cascading delete removes an object together with everything that depends on
it, directly or transitively. The objects have to go leaves first: a measure
before the variable it integrates, a variable before the parameter it is
indexed by. Otherwise a dependency list would point at a retired slot while the
cascade is half done.

DeletionPlan collects the dependency links met while walking outward from the
object being deleted and orders them.

Usage:
    plan = DeletionPlan(param_index)
    plan.add_dependent(param_index, variable_index)
    plan.add_dependent(variable_index, constraint_index)

    plan.order()   # [constraint_index, variable_index, param_index]

A link that would close a loop raises ``ValueError``: dependency loops cannot
be built through the model API, so finding one means the bookkeeping is
corrupt.
"""

from collections import defaultdict
from typing import Any, Callable, Dict, Generic, List, Optional, Set, TypeVar

K = TypeVar("K")


class DeletionPlan(Generic[K]):
    """
    Dependency links reachable from a root object, ordered for deletion.

    Attributes:
        root: The object whose deletion started the cascade
        dependents: object -> objects that depend on it
        dependencies: object -> objects it depends on
    """

    def __init__(self, root: K):
        self.root = root
        self.dependents: Dict[K, Set[K]] = defaultdict(set)
        self.dependencies: Dict[K, Set[K]] = defaultdict(set)
        self._members: Dict[K, None] = {root: None}

    def add_dependent(self, target: K, dependent: K) -> bool:
        """
        Record that ``dependent`` depends on ``target``.

        Returns:
            True if the link is new, False if it was already recorded

        Raises:
            ValueError: If the link would make an object depend on itself
        """
        if dependent in self.dependents[target]:
            return False
        if self._reaches(dependent, target):
            raise ValueError(f"Dependency loop between {target!r} and {dependent!r}")

        self._members.setdefault(target)
        self._members.setdefault(dependent)
        self.dependents[target].add(dependent)
        self.dependencies[dependent].add(target)
        return True

    def order(self, sort_key: Optional[Callable[[K], Any]] = None) -> List[K]:
        """
        Every member, each placed before anything it depends on.

        Args:
            sort_key: Orders members that become ready together. Ties are
                taken largest key first; without a key they keep the order
                in which they were recorded.
        """
        remaining = {obj: len(self.dependents[obj]) for obj in self._members}
        ready = [obj for obj in self._members if remaining[obj] == 0]
        result: List[K] = []

        while ready:
            if sort_key is not None:
                ready.sort(key=sort_key, reverse=True)
            obj = ready.pop(0)
            result.append(obj)
            for target in self.dependencies[obj]:
                remaining[target] -= 1
                if remaining[target] == 0:
                    ready.append(target)

        assert len(result) == len(self._members), "dependency loop in plan"
        return result

    def _reaches(self, start: K, goal: K) -> bool:
        stack = [start]
        seen: Set[K] = set()
        while stack:
            current = stack.pop()
            if current == goal:
                return True
            if current not in seen:
                seen.add(current)
                stack.extend(self.dependents.get(current, ()))
        return False

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, obj: K) -> bool:
        return obj in self._members

    def __repr__(self) -> str:
        links = sum(len(deps) for deps in self.dependents.values())
        return f"DeletionPlan(root={self.root!r}, objects={len(self)}, links={links})"
