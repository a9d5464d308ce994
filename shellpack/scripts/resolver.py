"""
Script Dependency Resolver.

Scripts declare prerequisites with import directives::

    #@import installbrew.sh

The resolver discovers the transitive import graph of an entry script,
rejects cycles and returns an execution order in which every script comes
after everything it imports.

Key features:
- Breadth-first discovery over any ScriptStore
- Iterative DFS cycle detection naming a node on the cycle
- Kahn's algorithm with lexicographic tie-breaks (reproducible order)
- Only ``.sh`` entries are scheduled for execution
"""

import logging

from shellpack.errors import CircularDependency, ScriptNotFound, UnresolvedDependencies
from shellpack.scripts.stores import ScriptStore

logger = logging.getLogger(__name__)

IMPORT_DIRECTIVE = "#@import "
EXECUTABLE_SUFFIX = ".sh"

# script name -> names it imports (edges point dependent -> dependency)
DependencyGraph = dict[str, list[str]]


def parse_imports(content: str) -> list[str]:
    """
    Extract import directives from script text.

    Args:
        content: Script source

    Returns:
        Imported script names in order of appearance, without duplicates
    """
    imports = []
    for line in content.splitlines():
        stripped = line.strip()
        if not stripped.startswith(IMPORT_DIRECTIVE):
            continue
        name = stripped[len(IMPORT_DIRECTIVE):].strip()
        if name and name not in imports:
            imports.append(name)
    return imports


def detect_cycles(graph: DependencyGraph) -> None:
    """
    Fail if the graph contains a cycle.

    Raises:
        CircularDependency: Naming a node that lies on a cycle
    """
    visited: set[str] = set()

    for start in sorted(graph):
        if start in visited:
            continue

        visiting = {start}
        stack = [(start, iter(graph.get(start, [])))]

        while stack:
            node, children = stack[-1]
            child = next(children, None)

            if child is None:
                stack.pop()
                visiting.discard(node)
                visited.add(node)
                continue

            if child in visiting:
                raise CircularDependency(child)
            if child in visited:
                continue

            visiting.add(child)
            stack.append((child, iter(graph.get(child, []))))


def topological_order(graph: DependencyGraph) -> list[str]:
    """
    Order the graph so that every script follows all of its imports.

    Args:
        graph: Import graph

    Returns:
        All nodes, dependencies first

    Raises:
        CircularDependency: If the graph has a cycle
        UnresolvedDependencies: If some nodes could not be ordered
    """
    detect_cycles(graph)

    # in_degree counts unresolved imports; dependents is the reverse edge list
    in_degree: dict[str, int] = {}
    dependents: dict[str, list[str]] = {}
    for node, imports in graph.items():
        in_degree.setdefault(node, 0)
        dependents.setdefault(node, [])
        for dep in imports:
            in_degree.setdefault(dep, 0)
            dependents.setdefault(dep, []).append(node)
            in_degree[node] += 1

    queue = [node for node, degree in in_degree.items() if degree == 0]
    result = []

    while queue:
        # Sort by name for deterministic order
        queue.sort()
        node = queue.pop(0)
        result.append(node)

        for dependent in dependents[node]:
            in_degree[dependent] -= 1
            if in_degree[dependent] == 0:
                queue.append(dependent)

    if len(result) != len(in_degree):
        raise UnresolvedDependencies([n for n in in_degree if n not in result])

    return result


class DependencyResolver:
    """Resolves the import graph of scripts held in a ScriptStore."""

    def __init__(self, store: ScriptStore):
        self.store = store

    def _read_text(self, name: str) -> str:
        data = self.store.read(name)
        if data is None:
            raise ScriptNotFound(name)
        return data.decode("utf-8", errors="replace")

    def build_graph(self, entry_script: str) -> DependencyGraph:
        """
        Discover every script reachable from entry_script.

        Raises:
            ScriptNotFound: If entry_script or any import cannot be located
        """
        graph: DependencyGraph = {}
        to_process = [entry_script]

        while to_process:
            current = to_process.pop(0)
            if current in graph:
                continue

            imports = parse_imports(self._read_text(current))
            graph[current] = imports
            logger.debug("Script %s imports %s", current, imports)

            for name in imports:
                if name not in graph:
                    to_process.append(name)

        return graph

    def resolve_all(self, entry_script: str) -> list[str]:
        """Return every discovered script, dependencies first."""
        return topological_order(self.build_graph(entry_script))

    def resolve(self, entry_script: str) -> list[str]:
        """
        Return the scripts to execute for entry_script, in order.

        Non-executable entries (data or indirection files) take part in
        ordering but are not returned.

        Raises:
            ScriptNotFound, CircularDependency, UnresolvedDependencies
        """
        return [
            name
            for name in self.resolve_all(entry_script)
            if name.endswith(EXECUTABLE_SUFFIX)
        ]
