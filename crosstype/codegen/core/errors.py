"""
Error vocabulary of the code generation core.

Every error is fatal to the target being generated and carries the
declaration (and member, when there is one) it was raised for.
"""

from typing import Optional


class GeneratorError(Exception):
    """Base exception for code generation errors."""

    def __init__(
        self,
        message: str,
        declaration: Optional[str] = None,
        member: Optional[str] = None,
    ):
        self.message = message
        self.declaration = declaration
        self.member = member
        super().__init__(self._format())

    def _format(self) -> str:
        if self.declaration and self.member:
            return f"{self.declaration}.{self.member}: {self.message}"
        if self.declaration:
            return f"{self.declaration}: {self.message}"
        return self.message


class IllegalIdentifier(GeneratorError):
    """An identifier cannot be made legal for the target convention."""

    def __init__(
        self,
        identifier: str,
        declaration: Optional[str] = None,
        member: Optional[str] = None,
        reason: str = "cannot be turned into a legal identifier",
    ):
        self.identifier = identifier
        super().__init__(f"'{identifier}' {reason}", declaration, member)


class DiscriminantCollision(GeneratorError):
    """Two non-skipped variants serialize to the same wire tag."""

    def __init__(self, enum_name: str, discriminant: str, variants: tuple):
        self.discriminant = discriminant
        self.variants = variants
        super().__init__(
            f"variants {', '.join(variants)} share the wire tag '{discriminant}'",
            enum_name,
        )


class PromotionNameCollision(GeneratorError):
    """A synthesized anonymous-variant struct name is already taken."""

    def __init__(self, enum_name: str, variant_name: str, struct_name: str):
        self.struct_name = struct_name
        super().__init__(
            f"promoted struct name '{struct_name}' collides with an existing declaration",
            enum_name,
            variant_name,
        )


class UnsupportedShape(GeneratorError):
    """A backend has no rendering rule for a construct of the graph."""

    pass
