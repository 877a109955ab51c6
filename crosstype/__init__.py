"""
crosstype - cross-language type definition compiler.

Turns a language-neutral type graph (structs, enums, aliases, generics)
into wire-compatible declarations for several target languages.
"""

__version__ = "0.1.0"
