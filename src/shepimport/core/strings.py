"""
String utility functions for shepimport.

Provides the naming transformations shared by the parsers, the analyzer and
the emitters.
"""

from __future__ import annotations

import re

# Irregular plurals that don't follow standard rules
_IRREGULAR_PLURALS = {
    "person": "people",
    "child": "children",
    "man": "men",
    "woman": "women",
    "mouse": "mice",
    "datum": "data",
    "medium": "media",
    "criterion": "criteria",
    "index": "indices",
    "matrix": "matrices",
    "vertex": "vertices",
    # Common domain-specific terms
    "status": "statuses",
    "address": "addresses",
}

_IRREGULAR_SINGULARS = {plural: singular for singular, plural in _IRREGULAR_PLURALS.items()}

_WORD_RE = re.compile(r"[A-Z]+(?=[A-Z][a-z])|[A-Z]?[a-z]+|[A-Z]+|\d+")


def _match_case(source: str, replacement: str) -> str:
    if source[:1].isupper():
        return replacement[:1].upper() + replacement[1:]
    return replacement


def pluralize(word: str) -> str:
    """
    Convert a singular English word to its plural form.

    Examples:
        >>> pluralize("Task")
        'Tasks'
        >>> pluralize("Category")
        'Categories'
        >>> pluralize("person")
        'people'
    """
    if not word:
        return word

    lower_word = word.lower()

    if lower_word in _IRREGULAR_PLURALS:
        return _match_case(word, _IRREGULAR_PLURALS[lower_word])

    # Handle CamelCase - pluralize the last word only
    camel_match = re.match(r"^(.+)([A-Z][a-z]+)$", word)
    if camel_match:
        prefix, last_word = camel_match.groups()
        if prefix and last_word != word:
            return prefix + pluralize(last_word)

    if lower_word.endswith(("s", "x", "z", "ch", "sh")):
        return word + "es"
    elif lower_word.endswith("y"):
        if len(word) > 1 and lower_word[-2] in "aeiou":
            return word + "s"
        return word[:-1] + "ies"
    elif lower_word.endswith("fe"):
        return word[:-2] + "ves"
    return word + "s"


def singularize(word: str) -> str:
    """
    Convert a plural English word to its singular form.

    Only the endings produced by `pluralize` are undone; anything else is
    returned unchanged.

    Examples:
        >>> singularize("Tasks")
        'Task'
        >>> singularize("categories")
        'category'
        >>> singularize("Status")
        'Status'
    """
    if not word:
        return word

    lower_word = word.lower()

    if lower_word in _IRREGULAR_SINGULARS:
        return _match_case(word, _IRREGULAR_SINGULARS[lower_word])
    if lower_word in _IRREGULAR_PLURALS:
        return word

    camel_match = re.match(r"^(.+)([A-Z][a-z]+)$", word)
    if camel_match:
        prefix, last_word = camel_match.groups()
        if prefix and last_word != word:
            return prefix + singularize(last_word)

    if lower_word.endswith("ies") and len(word) > 3:
        return word[:-3] + "y"
    if lower_word.endswith("ves") and len(word) > 3:
        return word[:-3] + "fe"
    if lower_word.endswith(("sses", "xes", "zes", "ches", "shes")):
        return word[:-2]
    if lower_word.endswith(("ss", "us", "is")):
        return word
    if lower_word.endswith("s") and len(word) > 1:
        return word[:-1]
    return word


def split_words(text: str) -> list[str]:
    """
    Split an identifier or free text into words.

    Handles camelCase, PascalCase, snake_case, kebab-case and spaces.

    Examples:
        >>> split_words("handleAddTask")
        ['handle', 'Add', 'Task']
        >>> split_words("task-list item")
        ['task', 'list', 'item']
    """
    words: list[str] = []
    for chunk in re.split(r"[^A-Za-z0-9]+", text):
        if chunk:
            words.extend(_WORD_RE.findall(chunk))
    return words


def to_pascal_case(text: str) -> str:
    """
    Convert any identifier or label into PascalCase.

    Examples:
        >>> to_pascal_case("add user")
        'AddUser'
        >>> to_pascal_case("task_list")
        'TaskList'
        >>> to_pascal_case("TaskWithTags")
        'TaskWithTags'
    """
    return "".join(w[:1].upper() + w[1:] for w in split_words(text))


def app_identifier(text: str) -> str:
    """
    PascalCase identifier usable as an app and file name, or "" when nothing is left.

    Examples:
        >>> app_identifier("../../Task Tracker!")
        'TaskTracker'
        >>> app_identifier("3d shop")
        'App3DShop'
    """
    name = to_pascal_case(text)
    if name[:1].isdigit():
        name = f"App{name}"
    return name


def sanitize_name(text: str) -> str:
    """
    Collapse free text into a PascalCase identifier, lowercasing word tails.

    Mirrors how screen and button labels are turned into names:
    "My Task List" -> "MyTaskList", "ADD USER" -> "AddUser".
    """
    cleaned = re.sub(r"[^a-zA-Z0-9\s]", "", text)
    return "".join(w[:1].upper() + w[1:].lower() for w in cleaned.split())


def is_pascal_case(name: str) -> bool:
    """Check if a name starts with an uppercase letter and has no separators."""
    return bool(re.match(r"^[A-Z][A-Za-z0-9]*$", name))


def to_snake_case(name: str) -> str:
    """
    Convert an identifier to snake_case.

    Examples:
        >>> to_snake_case("TaskList")
        'task_list'
    """
    return "_".join(w.lower() for w in split_words(name))
