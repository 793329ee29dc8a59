"""Name conversions used when turning IDL names into type names."""


def to_camel_case(s: str) -> str:
    """Convert a snake_case name to CamelCase, e.g. ``create_order`` -> ``CreateOrder``.

    Only the first character of each underscore-separated word is upper-cased;
    the rest of the word is kept as it is. Empty words vanish.
    """
    return "".join(word[:1].upper() + word[1:] for word in s.split("_"))