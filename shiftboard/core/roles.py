from shiftboard.core.constants import ROLE_CATEGORIES, CategoryKey


def category_for(role: str) -> CategoryKey:
    """
    Map a role label to its badge category.

    Exact, case-sensitive lookup in ROLE_CATEGORIES. Anything else,
    including variants like "serveur" or "", gets CategoryKey.DEFAULT.
    """
    if not isinstance(role, str):
        return CategoryKey.DEFAULT
    return ROLE_CATEGORIES.get(role, CategoryKey.DEFAULT)
