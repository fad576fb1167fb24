"""
Module ordering for bundle assembly.

The bundle loader instantiates modules eagerly in listed order, and each
module can be instantiated only once. So every module must come after all
of its dependencies, except where the dependencies form a cycle: modules of
one circular component cannot all precede each other, they are reported as
circular instead and get their exports bound lazily by the loader.
"""

import logging
from dataclasses import dataclass, field

from .module_store import ModuleStore

logger = logging.getLogger(__name__)


@dataclass
class ModuleOrderResult:
    """
    Result of ordering the modules reachable from an entry point.

    Attributes:
        modules: Reachable known modules, dependencies before dependents
        circular_dependent_modules: Members of circular components
        absent_modules: Referenced names that are not in the store
    """

    modules: list[str] = field(default_factory=list)
    circular_dependent_modules: set[str] = field(default_factory=set)
    absent_modules: set[str] = field(default_factory=set)

    def to_dict(self) -> dict[str, list[str]]:
        """Convert to JSON-serializable dict with stable ordering."""
        return {
            "modules": list(self.modules),
            "circular_dependent_modules": sorted(self.circular_dependent_modules),
            "absent_modules": sorted(self.absent_modules),
        }


class ModuleOrderer:
    """Computes instantiation order and circular components over a module store."""

    def __init__(self, store: ModuleStore):
        self.store = store

    def get_module_order(self, entry_name: str) -> ModuleOrderResult:
        """
        Order every module reachable from entry_name.

        Uses Tarjan's strongly connected components algorithm with an explicit
        stack, so deep graphs do not hit the recursion limit. Components are
        completed dependencies-first, which is exactly the order we need; inside
        a component modules keep the order they were discovered in.

        Args:
            entry_name: Canonical name of the entry module

        Returns:
            ModuleOrderResult for the reachable part of the graph
        """
        result = ModuleOrderResult()
        if not self.store.has(entry_name):
            result.absent_modules.add(entry_name)
            return result

        index: dict[str, int] = {entry_name: 0}
        lowlink: dict[str, int] = {entry_name: 0}
        component_stack: list[str] = [entry_name]
        on_stack: set[str] = {entry_name}
        # (module name, position of next dependency to visit)
        work: list[tuple[str, int]] = [(entry_name, 0)]

        while work:
            name, pos = work[-1]
            deps = self.store.get(name).dependencies

            if pos < len(deps):
                work[-1] = (name, pos + 1)
                dep = deps[pos]
                if not self.store.has(dep):
                    result.absent_modules.add(dep)
                elif dep not in index:
                    index[dep] = lowlink[dep] = len(index)
                    component_stack.append(dep)
                    on_stack.add(dep)
                    work.append((dep, 0))
                elif dep in on_stack:
                    lowlink[name] = min(lowlink[name], index[dep])
                continue

            work.pop()
            if work:
                parent = work[-1][0]
                lowlink[parent] = min(lowlink[parent], lowlink[name])

            if lowlink[name] != index[name]:
                continue

            component: list[str] = []
            while True:
                member = component_stack.pop()
                on_stack.discard(member)
                component.append(member)
                if member == name:
                    break
            component.sort(key=index.__getitem__)

            if len(component) > 1 or name in deps:
                result.circular_dependent_modules.update(component)
            result.modules.extend(component)

        logger.debug(
            "Ordered %d module(s) from %s: %d circular, %d absent",
            len(result.modules),
            entry_name,
            len(result.circular_dependent_modules),
            len(result.absent_modules),
        )
        return result
