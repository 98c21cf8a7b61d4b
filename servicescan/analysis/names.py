"""Binary name resolution for declared types."""

from typing import List, Union

from servicescan.models import TypeDecl, TypeRef

DEFAULT_NESTED_SEPARATOR = "$"
PACKAGE_SEPARATOR = "."


class NameResolver:
    """
    Produce canonical binary names.

    The package is joined with ``.``, enclosing types with the nested
    separator: ``com.acme.Outer$Inner``.
    """

    def __init__(self, nested_separator: str = DEFAULT_NESTED_SEPARATOR):
        self.nested_separator = nested_separator

    def binary_name(self, target: Union[TypeDecl, TypeRef]) -> str:
        """
        Get the binary name of a declaration or supertype reference.

        Args:
            target: Declaration or reference to name

        Returns:
            Binary name; unresolved references fall back to their own name
        """
        if isinstance(target, TypeRef):
            if target.declaration is None:
                return target.name
            target = target.declaration

        segments: List[str] = []
        current = target
        while current is not None:
            segments.append(current.simple_name)
            current = current.enclosing
        segments.reverse()

        name = self.nested_separator.join(segments)
        if target.package:
            return f"{target.package}{PACKAGE_SEPARATOR}{name}"
        return name
