"""Formula dependency tracking for MessMass.

Tracks which derived variables depend on which stats fields, for
evaluation ordering and circular reference detection.
"""

from collections import defaultdict, deque


class FormulaDependencyGraph:
    """
    Track derived variable dependencies.

    Maintains a bidirectional graph:
    - dependencies: variable -> set of derived variables that use it
    - reverse: derived variable -> set of variables its formula references
    """

    def __init__(self):
        """Initialize empty dependency graph."""
        # If variable A changes, every variable in dependencies[A] is stale
        self.dependencies: dict[str, set[str]] = defaultdict(set)

        # To compute derived variable A, every variable in reverse[A] is needed
        self.reverse: dict[str, set[str]] = defaultdict(set)

    def add_variable(self, name: str, depends_on: set[str]) -> tuple[bool, str | None]:
        """
        Add a derived variable to the graph.

        Args:
            name: Derived variable name
            depends_on: Variables its formula references

        Returns:
            Tuple of (success, error_message)
        """
        if self.detect_circular_reference(name, depends_on):
            return False, "Circular reference detected in formula dependencies"

        self.reverse[name] = set(depends_on)
        for dep in depends_on:
            self.dependencies[dep].add(name)

        return True, None

    def get_affected_variables(self, changed: str) -> list[str]:
        """
        Get derived variables that need recalculation when a variable changes.

        Breadth-first over transitive dependents.
        """
        affected = []
        to_process = deque([changed])
        seen = set()

        while to_process:
            current = to_process.popleft()

            if current in seen:
                continue
            seen.add(current)

            for dependent in sorted(self.dependencies.get(current, ())):
                if dependent not in seen:
                    affected.append(dependent)
                    to_process.append(dependent)

        return affected

    def get_evaluation_order(self, names: set[str]) -> list[str]:
        """
        Get evaluation order for a set of derived variables.

        Kahn's algorithm; ties are broken alphabetically so the order is
        stable between runs.

        Args:
            names: Derived variable names to order

        Returns:
            Ordered list of names, or empty list if a cycle is detected
        """
        in_degree = {name: 0 for name in names}

        for name in names:
            for dep in self.reverse.get(name, ()):
                if dep in names:
                    in_degree[name] += 1

        queue = deque(sorted(name for name in names if in_degree[name] == 0))

        result = []
        while queue:
            name = queue.popleft()
            result.append(name)

            for dependent in sorted(self.dependencies.get(name, ())):
                if dependent in in_degree:
                    in_degree[dependent] -= 1
                    if in_degree[dependent] == 0:
                        queue.append(dependent)

        if len(result) != len(names):
            return []

        return result

    def detect_circular_reference(self, name: str, depends_on: set[str]) -> bool:
        """
        Check whether adding this dependency set would create a cycle.

        Depth-first walk from the new dependencies looking for name.
        """
        if not depends_on:
            return False

        if name in depends_on:
            return True

        visited = set()
        to_check = list(depends_on)

        while to_check:
            current = to_check.pop()

            if current == name:
                return True

            if current in visited:
                continue
            visited.add(current)

            to_check.extend(self.reverse.get(current, ()))

        return False
