"""
Name standardization for v2 collection and predicate names.

v2 names are snake_case (``bank_account``, ``first_name``) and may carry a
leading underscore for system collections. v3 vocabularies use UpperCamelCase
class names and lowerCamelCase property names.
"""

from typing import Tuple


def capitalize(value: str) -> str:
    """Uppercase the first character only (``bankAccount`` → ``BankAccount``)."""
    return value[:1].upper() + value[1:]


def case_normalize(value: str) -> str:
    """snake_case → camelCase, keeping the case of the first character.

    >>> case_normalize("first_name")
    'firstName'
    >>> case_normalize("Bank_account")
    'BankAccount'
    """
    parts = [part for part in value.split("_") if part != ""]
    if not parts:
        return ""
    return parts[0] + "".join(capitalize(part) for part in parts[1:])


def remove_namespace(value: str) -> str:
    """Drop a ``prefix:`` namespace (``schema:Person`` → ``Person``)."""
    if ":" in value:
        return value.split(":", 1)[1]
    return value


def standardize_class_name(collection: str) -> str:
    """
    Class name for a v2 collection.

    >>> standardize_class_name("bank_account")
    'BankAccount'
    >>> standardize_class_name("_user")
    'User'
    """
    return capitalize(case_normalize(remove_namespace(collection).lstrip("_")))


def standardize_property_name(predicate: str) -> str:
    """
    Property name for a v2 local predicate name.

    >>> standardize_property_name("first_name")
    'firstName'
    """
    return case_normalize(predicate)


def split_predicate_name(full_name: str) -> Tuple[str, str]:
    """
    Split a v2 predicate name into (collection, local name).

    Raises:
        ValueError: If the name is not of the form ``collection/predicate``.
    """
    parts = full_name.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"{full_name!r} does not have a collection and predicate name (e.g. collection/predicate)"
        )
    return parts[0], parts[1]
