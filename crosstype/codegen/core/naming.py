"""
Naming utilities for safe code generation.

Handles case conversion, identifier legalization, reserved-word conflicts
and the decision of whether a field or variant needs an explicit wire
alias to keep the serialized form unchanged.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, NamedTuple, Optional, Set, Tuple

from .errors import IllegalIdentifier
from ...logging_config import get_logger

logger = get_logger(__name__)


class NamingCase(Enum):
    """Different naming case styles."""

    SNAKE_CASE = "snake"  # user_name
    CAMEL_CASE = "camel"  # userName
    PASCAL_CASE = "pascal"  # UserName
    KEBAB_CASE = "kebab"  # user-name
    SCREAMING_SNAKE = "screaming_snake"  # USER_NAME
    ORIGINAL = "original"  # left as written, only legalized


# Words are split on punctuation first, then on case changes; digits stay
# attached to the word they follow ("ipv4Addr" -> ipv4, Addr)
_SEPARATORS = re.compile(r"[^A-Za-z0-9]+")
_WORDS = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+[0-9]*|[A-Z]+[0-9]*|[0-9]+")


def split_words(name: str) -> List[str]:
    """Split an identifier into its words."""
    words = []
    for chunk in _SEPARATORS.split(name):
        words.extend(_WORDS.findall(chunk))
    return words


def _upper_first(word: str) -> str:
    return word[:1].upper() + word[1:]


def convert_case(name: str, case: NamingCase) -> str:
    """
    Convert a name to the given case style.

    Conversion is purely structural and idempotent: converting an already
    converted name gives it back unchanged.
    """
    words = split_words(name)
    if not words:
        return ""

    if case == NamingCase.SNAKE_CASE:
        return "_".join(w.lower() for w in words)
    if case == NamingCase.SCREAMING_SNAKE:
        return "_".join(w.upper() for w in words)
    if case == NamingCase.KEBAB_CASE:
        return "-".join(w.lower() for w in words)
    if case == NamingCase.CAMEL_CASE:
        return words[0].lower() + "".join(_upper_first(w) for w in words[1:])
    if case == NamingCase.PASCAL_CASE:
        return "".join(_upper_first(w) for w in words)
    # ORIGINAL keeps the spelling and only replaces illegal characters
    return "_".join(_SEPARATORS.split(name)).strip("_") or "_".join(words)


def naming_case(value) -> NamingCase:
    """Accept a NamingCase or its configuration string."""
    if isinstance(value, NamingCase):
        return value
    return NamingCase(value)


class NameSanitizer:
    """Handles name sanitization and case conversion for one target language."""

    def __init__(
        self,
        reserved_words: Optional[Set[str]] = None,
        digit_prefix: str = "_",
        conflict_suffix: str = "_",
    ):
        """
        Initialize name sanitizer.

        Args:
            reserved_words: Words that cannot be used as identifiers
            digit_prefix: Prefix for identifiers starting with a digit
            conflict_suffix: Suffix appended to reserved words
        """
        self.reserved_words = reserved_words or set()
        self.digit_prefix = digit_prefix
        self.conflict_suffix = conflict_suffix
        self._name_cache: Dict[Tuple[str, NamingCase], str] = {}

    def sanitize_name(
        self,
        name: str,
        target_case: NamingCase = NamingCase.SNAKE_CASE,
        declaration: Optional[str] = None,
        member: Optional[str] = None,
    ) -> str:
        """
        Sanitize a name for safe use in the target language.

        Args:
            name: Original name to sanitize
            target_case: Desired case style
            declaration: Owning declaration, for error reporting
            member: Owning field or variant, for error reporting

        Returns:
            Legal identifier

        Raises:
            IllegalIdentifier: If the name has no usable characters at all
        """
        cache_key = (name, target_case)
        if cache_key in self._name_cache:
            return self._name_cache[cache_key]

        converted = convert_case(name, target_case)
        if not converted:
            raise IllegalIdentifier(name, declaration, member)

        if converted[0].isdigit():
            converted = f"{self.digit_prefix}{converted}"

        if self.is_reserved(converted):
            converted = f"{converted}{self.conflict_suffix}"

        self._name_cache[cache_key] = converted
        return converted

    def is_reserved(self, name: str) -> bool:
        return name in self.reserved_words


class ResolvedName(NamedTuple):
    """Emitted identifier plus the wire alias it needs, if any."""

    identifier: str
    alias: Optional[str] = None

    @property
    def wire_name(self) -> str:
        return self.alias if self.alias is not None else self.identifier


@dataclass(frozen=True)
class NamingContext:
    """What the resolver needs to know about one identifier."""

    case: NamingCase
    rename: Optional[str] = None
    declaration: Optional[str] = None
    member: Optional[str] = None


class NamingResolver:
    """
    Resolves source identifiers into target identifiers and wire aliases.

    The emitted identifier always derives from the source identifier so a
    rename only ever changes the serialized name. Whenever the serialized
    name (explicit rename, else the source identifier) differs from the
    emitted identifier, the alias carries it verbatim.
    """

    def __init__(self, sanitizer: NameSanitizer):
        self.sanitizer = sanitizer

    def resolve(self, identifier: str, context: NamingContext) -> ResolvedName:
        emitted = self.sanitizer.sanitize_name(
            identifier, context.case, context.declaration, context.member
        )
        wire_name = context.rename if context.rename is not None else identifier
        if wire_name == emitted:
            return ResolvedName(emitted)
        return ResolvedName(emitted, wire_name)

    def resolve_type_name(self, name: str, case: NamingCase) -> str:
        """Resolve a declaration name; declarations carry no wire alias."""
        return self.sanitizer.sanitize_name(name, case, declaration=name)

    def resolve_fields(
        self, declaration: str, fields: Iterable, case: NamingCase
    ) -> List[ResolvedName]:
        """
        Resolve every field of a declaration.

        Raises:
            IllegalIdentifier: If a field cannot be legalized or two fields
                end up with the same identifier
        """
        resolved = []
        seen: Dict[str, str] = {}
        for f in fields:
            name = self.resolve(
                f.name,
                NamingContext(case, f.rename, declaration=declaration, member=f.name),
            )
            if name.identifier in seen:
                raise IllegalIdentifier(
                    f.name,
                    declaration,
                    f.name,
                    reason=f"collides with field '{seen[name.identifier]}' "
                    f"as '{name.identifier}'",
                )
            seen[name.identifier] = f.name
            resolved.append(name)

        aliased = sum(1 for r in resolved if r.alias is not None)
        logger.debug(f"Resolved {len(resolved)} field name(s) of {declaration} ({aliased} aliased)")
        return resolved
