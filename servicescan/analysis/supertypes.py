"""Direct supertype lookup over the declared-type model."""

from typing import List, Union

from servicescan.models import TypeDecl, TypeKind, TypeRef


class SupertypeGraph:
    """Expose the direct supertype edges of declarations and references."""

    def direct_supertypes(self, target: Union[TypeDecl, TypeRef]) -> List[TypeRef]:
        """
        Get the direct supertypes of a type.

        Classes yield their superclass first, then their interfaces.
        Interfaces yield the interfaces they extend. External references
        have no known supertypes.

        Args:
            target: Declaration or reference to inspect

        Returns:
            Ordered list of supertype references
        """
        if isinstance(target, TypeRef):
            if target.declaration is None:
                return []
            target = target.declaration

        supertypes: List[TypeRef] = []
        if target.kind != TypeKind.INTERFACE and target.superclass is not None:
            supertypes.append(target.superclass)
        supertypes.extend(target.interfaces)
        return supertypes
