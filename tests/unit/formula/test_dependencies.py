"""Unit tests for FormulaDependencyGraph."""

from messmass.formula.dependencies import FormulaDependencyGraph

CYCLE_ERROR = "Circular reference detected in formula dependencies"


class TestFormulaDependencyGraph:
    """Tests for FormulaDependencyGraph class."""

    def test_initialization(self):
        """Test that graph initializes correctly."""
        graph = FormulaDependencyGraph()
        assert len(graph.dependencies) == 0
        assert len(graph.reverse) == 0

    def test_add_variable_no_deps(self):
        """Test adding a derived variable with no dependencies."""
        graph = FormulaDependencyGraph()
        success, error = graph.add_variable("constant", set())
        assert success is True
        assert error is None
        assert graph.reverse["constant"] == set()

    def test_add_variable_with_deps(self):
        """Test adding a derived variable with dependencies."""
        graph = FormulaDependencyGraph()
        success, error = graph.add_variable("remoteFans", {"indoor", "outdoor"})
        assert success is True
        assert error is None
        assert graph.reverse["remoteFans"] == {"indoor", "outdoor"}
        assert graph.dependencies["indoor"] == {"remoteFans"}

    def test_self_circular_reference(self):
        """Test detecting a self-referencing variable."""
        graph = FormulaDependencyGraph()
        assert graph.add_variable("x", {"x"}) == (False, CYCLE_ERROR)

    def test_direct_circular_reference(self):
        """Test detecting direct circular reference (A -> B -> A)."""
        graph = FormulaDependencyGraph()
        graph.add_variable("a", {"b"})
        assert graph.add_variable("b", {"a"}) == (False, CYCLE_ERROR)

    def test_indirect_circular_reference(self):
        """Test detecting indirect circular reference (A -> B -> C -> A)."""
        graph = FormulaDependencyGraph()
        graph.add_variable("a", {"b"})
        graph.add_variable("b", {"c"})
        success, error = graph.add_variable("c", {"a"})
        assert success is False
        assert error == CYCLE_ERROR
        # The rejected edge is not recorded
        assert "c" not in graph.reverse

    def test_get_affected_variables(self):
        """Test transitive dependents of a changed field."""
        graph = FormulaDependencyGraph()
        graph.add_variable("remoteFans", {"indoor", "outdoor"})
        graph.add_variable("totalFans", {"remoteFans", "stadium"})
        graph.add_variable("allImages", {"selfies"})
        assert graph.get_affected_variables("indoor") == ["remoteFans", "totalFans"]
        assert graph.get_affected_variables("stadium") == ["totalFans"]
        assert graph.get_affected_variables("female") == []

    def test_get_evaluation_order(self):
        """Test that dependencies come before dependents."""
        graph = FormulaDependencyGraph()
        graph.add_variable("totalFans", {"remoteFans", "stadium"})
        graph.add_variable("remoteFans", {"indoor", "outdoor"})
        graph.add_variable("allImages", {"selfies"})
        order = graph.get_evaluation_order({"totalFans", "remoteFans", "allImages"})
        assert order == ["allImages", "remoteFans", "totalFans"]

    def test_get_evaluation_order_ignores_outside_names(self):
        """Test ordering a subset of the graph."""
        graph = FormulaDependencyGraph()
        graph.add_variable("b", {"a"})
        assert graph.get_evaluation_order({"b"}) == ["b"]

    def test_get_evaluation_order_cycle(self):
        """Test that a cycle forced into the graph yields an empty order."""
        graph = FormulaDependencyGraph()
        graph.reverse["a"] = {"b"}
        graph.reverse["b"] = {"a"}
        graph.dependencies["a"] = {"b"}
        graph.dependencies["b"] = {"a"}
        assert graph.get_evaluation_order({"a", "b"}) == []
