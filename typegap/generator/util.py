"""Name formatting helpers."""


def to_camel_case(name: str) -> str:
    """Lower the leading capital of a PascalCase name.

    ``GetById`` becomes ``getById``; a leading acronym is lowered as a whole,
    so ``URLValue`` becomes ``urlValue``.
    """
    if not name or not name[0].isupper():
        return name

    upper = 0
    while upper < len(name) and name[upper].isupper():
        upper += 1

    if upper == 1 or upper == len(name):
        return name[:upper].lower() + name[upper:]
    # Keep the capital that starts the next word
    return name[: upper - 1].lower() + name[upper - 1 :]
