"""Service provider eligibility checks."""

from servicescan.models import Modifier, NestingKind, TypeDecl, TypeKind


def has_default_constructor(decl: TypeDecl) -> bool:
    """Check for a public constructor that takes no parameters."""
    for constructor in decl.constructors:
        if not constructor.is_public:
            continue
        if constructor.parameters:
            continue
        return True
    return False


def is_candidate(decl: TypeDecl) -> bool:
    """
    Decide whether a declaration can be registered as a service provider.

    A provider must be a public, concrete class that can be instantiated
    without an enclosing instance through a public no-argument constructor.

    Args:
        decl: Declaration to check

    Returns:
        True if the declaration is an eligible provider
    """
    if decl.kind != TypeKind.CLASS:
        return False
    if not decl.has_modifier(Modifier.PUBLIC):
        return False
    if decl.has_modifier(Modifier.ABSTRACT):
        return False
    if decl.nesting != NestingKind.TOP_LEVEL and not (
        decl.nesting == NestingKind.MEMBER and decl.has_modifier(Modifier.STATIC)
    ):
        return False
    return has_default_constructor(decl)
