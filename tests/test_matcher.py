"""Tests for supertype lookup and subtype matching."""

from servicescan.analysis.matcher import SubtypeMatcher
from servicescan.analysis.supertypes import SupertypeGraph
from servicescan.models import TypeKind, TypeRef


class TestSupertypeGraph:
    """Test direct supertype edges."""

    def test_superclass_before_interfaces(self, make_type):
        """Classes yield the superclass first, then interfaces in order."""
        base = make_type("Base")
        first = make_type("First", kind=TypeKind.INTERFACE)
        second = make_type("Second", kind=TypeKind.INTERFACE)
        decl = make_type(
            "Impl",
            superclass=base.ref(),
            interfaces=[first.ref(), second.ref()],
        )

        supertypes = SupertypeGraph().direct_supertypes(decl)

        assert [ref.declaration for ref in supertypes] == [base, first, second]

    def test_interface_yields_extended_interfaces(self, make_type):
        """Interfaces only yield the interfaces they extend."""
        parent = make_type("Parent", kind=TypeKind.INTERFACE)
        child = make_type("Child", kind=TypeKind.INTERFACE, interfaces=[parent.ref()])

        supertypes = SupertypeGraph().direct_supertypes(child)

        assert [ref.declaration for ref in supertypes] == [parent]

    def test_no_supertypes(self, make_type):
        """A type without bases has no supertypes."""
        assert SupertypeGraph().direct_supertypes(make_type("Root")) == []

    def test_external_reference_has_no_supertypes(self):
        """External references expose no supertypes."""
        assert SupertypeGraph().direct_supertypes(TypeRef(name="lib.Base")) == []

    def test_resolved_reference_follows_declaration(self, make_type):
        """Resolved references expose their declaration's supertypes."""
        base = make_type("Base")
        decl = make_type("Impl", superclass=base.ref())

        supertypes = SupertypeGraph().direct_supertypes(decl.ref())

        assert supertypes[0].declaration is base


class TestSubtypeMatcher:
    """Test transitive subtype matching."""

    def test_type_matches_itself(self, plugin_contract):
        """The closure is reflexive."""
        assert SubtypeMatcher().is_subtype(plugin_contract, "com.acme.Plugin")

    def test_direct_implementation(self, make_type, plugin_contract):
        """A type implementing the contract directly matches."""
        impl = make_type("FooPlugin", interfaces=[plugin_contract.ref()])

        assert SubtypeMatcher().is_subtype(impl, "com.acme.Plugin")

    def test_transitive_through_superclass(self, make_type, plugin_contract):
        """Contracts implemented by a superclass are inherited."""
        base = make_type("BasePlugin", interfaces=[plugin_contract.ref()])
        middle = make_type("Middle", superclass=base.ref())
        leaf = make_type("Leaf", superclass=middle.ref())

        assert SubtypeMatcher().is_subtype(leaf, "com.acme.Plugin")

    def test_transitive_through_interfaces(self, make_type, plugin_contract):
        """Interfaces extending the contract carry it to implementers."""
        extended = make_type(
            "RichPlugin", kind=TypeKind.INTERFACE, interfaces=[plugin_contract.ref()]
        )
        impl = make_type("RichImpl", interfaces=[extended.ref()])

        assert SubtypeMatcher().is_subtype(impl, "com.acme.Plugin")

    def test_external_contract_matches_by_name(self, make_type):
        """Contracts outside the scanned program match on the reference name."""
        impl = make_type("Task", interfaces=[TypeRef(name="concurrent.futures.Executor")])

        assert SubtypeMatcher().is_subtype(impl, "concurrent.futures.Executor")

    def test_unrelated_type_does_not_match(self, make_type, plugin_contract):
        """Types outside the contract's hierarchy do not match."""
        other = make_type("Other", interfaces=[TypeRef(name="com.acme.Codec")])

        assert not SubtypeMatcher().is_subtype(other, "com.acme.Plugin")

    def test_name_must_match_exactly(self, make_type, plugin_contract):
        """Partial or differently separated names never match."""
        impl = make_type("FooPlugin", interfaces=[plugin_contract.ref()])
        matcher = SubtypeMatcher()

        assert not matcher.is_subtype(impl, "Plugin")
        assert not matcher.is_subtype(impl, "com.acme.Plugin2")
        assert not matcher.is_subtype(impl, "com.acme$Plugin")

    def test_cycle_terminates(self, make_type):
        """A cyclic supertype graph does not loop forever."""
        first = make_type("First")
        second = make_type("Second", superclass=first.ref())
        first.superclass = second.ref()

        assert not SubtypeMatcher().is_subtype(first, "com.acme.Plugin")

    def test_self_reference_terminates(self, make_type, plugin_contract):
        """A type listing itself as a supertype is still searched fully."""
        decl = make_type("Loop", interfaces=[plugin_contract.ref()])
        decl.superclass = decl.ref()

        assert SubtypeMatcher().is_subtype(decl, "com.acme.Plugin")

    def test_cycle_with_contract_outside(self, make_type, plugin_contract):
        """A match is still found past a cycle."""
        first = make_type("First")
        second = make_type("Second", superclass=first.ref(), interfaces=[plugin_contract.ref()])
        first.superclass = second.ref()

        assert SubtypeMatcher().is_subtype(first, "com.acme.Plugin")

    def test_deep_hierarchy(self, make_type, plugin_contract):
        """Very deep hierarchies do not hit the recursion limit."""
        current = make_type("Level0", interfaces=[plugin_contract.ref()])
        for depth in range(1, 5000):
            current = make_type(f"Level{depth}", superclass=current.ref())

        assert SubtypeMatcher().is_subtype(current, "com.acme.Plugin")

    def test_diamond(self, make_type, plugin_contract):
        """Diamond hierarchies match through either path."""
        extended = make_type("A", kind=TypeKind.INTERFACE, interfaces=[plugin_contract.ref()])
        base = make_type("B", interfaces=[plugin_contract.ref()])
        impl = make_type("Impl", superclass=base.ref(), interfaces=[extended.ref()])

        assert SubtypeMatcher().is_subtype(impl, "com.acme.Plugin")

    def test_nested_contract(self, make_type):
        """Nested contracts are matched by their nested binary name."""
        from servicescan.models import TypeDecl

        outer = make_type("Outer")
        contract = outer.add_member(TypeDecl(simple_name="Listener", kind=TypeKind.INTERFACE))
        impl = make_type("Impl", interfaces=[contract.ref()])

        assert SubtypeMatcher().is_subtype(impl, "com.acme.Outer$Listener")
        assert not SubtypeMatcher().is_subtype(impl, "com.acme.Outer.Listener")
