"""
Element styling to CSS-like properties.

Tailwind utility classes are grouped by category and mapped onto the CSS
property they set:

    flex md:flex-col p-4 hover:bg-blue-600 shadow-md

becomes ``display: flex``, ``flex-direction: column @md``,
``padding: 1rem``, ``background-color: var(--color-blue-600) :hover`` and
``box-shadow: var(--shadow)``. A class with no mapping is kept as a
``class`` property so nothing is lost. Inline ``style`` entries are copied
with kebab-case names; CSS-module references (``styles.card``) are kept
by name.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from enum import Enum

from ..core.ir import ElementStyle, StyleProperty, StyleSpec

RESPONSIVE_PREFIXES = ("sm", "md", "lg", "xl", "2xl")
STATE_PREFIXES = ("hover", "focus", "active", "disabled", "group-hover", "focus-within")


class StyleCategory(str, Enum):
    """Tailwind class groups, in output order."""

    LAYOUT = "layout"
    SPACING = "spacing"
    SIZING = "sizing"
    TYPOGRAPHY = "typography"
    COLORS = "colors"
    BORDERS = "borders"
    EFFECTS = "effects"
    OTHER = "other"
    RESPONSIVE = "responsive"
    STATES = "states"


_CATEGORY_PATTERNS: tuple[tuple[StyleCategory, re.Pattern[str]], ...] = (
    (
        StyleCategory.LAYOUT,
        re.compile(
            r"^(flex|grid|block|inline|hidden|absolute|relative|fixed|sticky|float|clear|overflow|z-"
            r"|items-|justify-|content-|place-|self-|order-)"
        ),
    ),
    (StyleCategory.SPACING, re.compile(r"^(p|px|py|pt|pr|pb|pl|m|mx|my|mt|mr|mb|ml|space-[xy]|gap)-")),
    (StyleCategory.SIZING, re.compile(r"^(w-|h-|min-w-|min-h-|max-w-|max-h-|size-)")),
    (StyleCategory.TYPOGRAPHY, re.compile(r"^text-(left|right|center|justify|xs|sm|base|lg|\d?xl)$")),
    (
        StyleCategory.TYPOGRAPHY,
        re.compile(
            r"^(font-|leading-|tracking-|whitespace-|break-|truncate|uppercase|lowercase|capitalize"
            r"|normal-case|italic|not-italic|underline|line-through|no-underline)"
        ),
    ),
    (StyleCategory.COLORS, re.compile(r"^(bg-|text-|from-|via-|to-|placeholder-)")),
    (StyleCategory.BORDERS, re.compile(r"^(border|rounded|ring|outline|divide)")),
    (
        StyleCategory.EFFECTS,
        re.compile(
            r"^(shadow|opacity|blur|brightness|contrast|grayscale|hue-rotate|invert|saturate|sepia"
            r"|backdrop|transition|duration|ease|delay|animate|cursor-)"
        ),
    ),
)

# Classes with one fixed CSS meaning
DIRECT_MAPPINGS: dict[str, tuple[str, str]] = {
    "flex": ("display", "flex"),
    "grid": ("display", "grid"),
    "block": ("display", "block"),
    "inline": ("display", "inline"),
    "inline-block": ("display", "inline-block"),
    "inline-flex": ("display", "inline-flex"),
    "hidden": ("display", "none"),
    "flex-row": ("flex-direction", "row"),
    "flex-col": ("flex-direction", "column"),
    "flex-row-reverse": ("flex-direction", "row-reverse"),
    "flex-col-reverse": ("flex-direction", "column-reverse"),
    "flex-wrap": ("flex-wrap", "wrap"),
    "flex-1": ("flex", "1 1 0%"),
    "justify-start": ("justify-content", "flex-start"),
    "justify-end": ("justify-content", "flex-end"),
    "justify-center": ("justify-content", "center"),
    "justify-between": ("justify-content", "space-between"),
    "justify-around": ("justify-content", "space-around"),
    "justify-evenly": ("justify-content", "space-evenly"),
    "items-start": ("align-items", "flex-start"),
    "items-end": ("align-items", "flex-end"),
    "items-center": ("align-items", "center"),
    "items-baseline": ("align-items", "baseline"),
    "items-stretch": ("align-items", "stretch"),
    "relative": ("position", "relative"),
    "absolute": ("position", "absolute"),
    "fixed": ("position", "fixed"),
    "sticky": ("position", "sticky"),
    "text-left": ("text-align", "left"),
    "text-center": ("text-align", "center"),
    "text-right": ("text-align", "right"),
    "text-justify": ("text-align", "justify"),
    "font-thin": ("font-weight", "100"),
    "font-light": ("font-weight", "300"),
    "font-normal": ("font-weight", "400"),
    "font-medium": ("font-weight", "500"),
    "font-semibold": ("font-weight", "600"),
    "font-bold": ("font-weight", "700"),
    "font-extrabold": ("font-weight", "800"),
    "font-black": ("font-weight", "900"),
    "italic": ("font-style", "italic"),
    "underline": ("text-decoration", "underline"),
    "line-through": ("text-decoration", "line-through"),
    "uppercase": ("text-transform", "uppercase"),
    "lowercase": ("text-transform", "lowercase"),
    "capitalize": ("text-transform", "capitalize"),
    "normal-case": ("text-transform", "none"),
    "overflow-auto": ("overflow", "auto"),
    "overflow-hidden": ("overflow", "hidden"),
    "overflow-visible": ("overflow", "visible"),
    "overflow-scroll": ("overflow", "scroll"),
    "cursor-pointer": ("cursor", "pointer"),
    "cursor-default": ("cursor", "default"),
    "cursor-not-allowed": ("cursor", "not-allowed"),
}

SPACING_PROPERTIES = {
    "p": "padding",
    "px": "padding-inline",
    "py": "padding-block",
    "pt": "padding-top",
    "pr": "padding-right",
    "pb": "padding-bottom",
    "pl": "padding-left",
    "m": "margin",
    "mx": "margin-inline",
    "my": "margin-block",
    "mt": "margin-top",
    "mr": "margin-right",
    "mb": "margin-bottom",
    "ml": "margin-left",
    "gap": "gap",
}

SIZE_PROPERTIES = {
    "w": "width",
    "h": "height",
    "min-w": "min-width",
    "min-h": "min-height",
    "max-w": "max-width",
    "max-h": "max-height",
}

SIZE_KEYWORDS = {
    "full": "100%",
    "screen": "100vh",
    "min": "min-content",
    "max": "max-content",
    "fit": "fit-content",
}

FONT_SIZES = {
    "xs": "0.75rem",
    "sm": "0.875rem",
    "base": "1rem",
    "lg": "1.125rem",
    "xl": "1.25rem",
    "2xl": "1.5rem",
    "3xl": "1.875rem",
    "4xl": "2.25rem",
    "5xl": "3rem",
    "6xl": "3.75rem",
    "7xl": "4.5rem",
    "8xl": "6rem",
    "9xl": "8rem",
}

BORDER_RADII = {
    "": "0.25rem",
    "none": "0",
    "sm": "0.125rem",
    "md": "0.375rem",
    "lg": "0.5rem",
    "xl": "0.75rem",
    "2xl": "1rem",
    "3xl": "1.5rem",
    "full": "9999px",
}

NAMED_COLORS = {
    "white": "#ffffff",
    "black": "#000000",
    "transparent": "transparent",
    "current": "currentColor",
}

COLOR_SCALES = (
    "gray|red|blue|green|yellow|purple|pink|indigo|slate|zinc|neutral|stone|orange|amber"
    "|lime|emerald|teal|cyan|sky|violet|fuchsia|rose"
)

_SPACING_RE = re.compile(r"^(p|px|py|pt|pr|pb|pl|m|mx|my|mt|mr|mb|ml|gap)-(.+)$")
_SIZE_RE = re.compile(r"^(min-w|min-h|max-w|max-h|w|h)-(.+)$")
_FONT_SIZE_RE = re.compile(r"^text-(xs|sm|base|lg|\d?xl)$")
_ROUNDED_RE = re.compile(r"^rounded(?:-(.+))?$")
_TEXT_COLOR_RE = re.compile(rf"^text-((?:{COLOR_SCALES})-\d+|white|black|transparent|current)$")
_BORDER_WIDTH_RE = re.compile(r"^border(?:-(\d+))?$")
_FRACTION_RE = re.compile(r"^(\d+)/(\d+)$")
_MODULE_REF_RE = re.compile(r"\bstyles\.(\w+)")
_KEBAB_RE = re.compile(r"([a-z0-9])([A-Z])")


def spacing_value(value: str) -> str:
    """
    CSS length for a Tailwind spacing step; one step is 0.25rem.

    Examples:
        >>> spacing_value("4")
        '1rem'
        >>> spacing_value("0.5")
        '0.125rem'
        >>> spacing_value("[18px]")
        '18px'
    """
    if value in ("auto", "0"):
        return value
    if value == "px":
        return "1px"
    if value.startswith("[") and value.endswith("]"):
        return value[1:-1]
    try:
        steps = float(value)
    except ValueError:
        return value
    return f"{steps * 0.25:g}rem"


def size_value(value: str) -> str:
    """
    Examples:
        >>> size_value("1/3")
        '33.333333%'
        >>> size_value("full")
        '100%'
    """
    if value in SIZE_KEYWORDS:
        return SIZE_KEYWORDS[value]
    fraction = _FRACTION_RE.match(value)
    if fraction and int(fraction.group(2)):
        percent = int(fraction.group(1)) / int(fraction.group(2)) * 100
        return f"{percent:.6f}".rstrip("0").rstrip(".") + "%"
    return spacing_value(value)


def color_value(color: str) -> str:
    """Named colors as CSS, palette colors as ``var(--color-<name>)``."""
    return NAMED_COLORS.get(color, f"var(--color-{color})")


def kebab_case(name: str) -> str:
    """``fontSize`` -> ``font-size``."""
    return _KEBAB_RE.sub(r"\1-\2", name).lower()


def categorize(class_name: str) -> StyleCategory:
    """Category of one Tailwind class; prefixed classes go by their prefix."""
    prefix, _, rest = class_name.partition(":")
    if rest:
        if prefix in RESPONSIVE_PREFIXES:
            return StyleCategory.RESPONSIVE
        if prefix in STATE_PREFIXES:
            return StyleCategory.STATES
    for category, pattern in _CATEGORY_PATTERNS:
        if pattern.match(class_name):
            return category
    return StyleCategory.OTHER


def group_classes(class_names: str) -> dict[StyleCategory, list[str]]:
    groups: dict[StyleCategory, list[str]] = {category: [] for category in StyleCategory}
    for class_name in class_names.split():
        groups[categorize(class_name)].append(class_name)
    return groups


def class_property(class_name: str) -> StyleProperty:
    """
    The CSS property one unprefixed Tailwind class sets.

    Examples:
        >>> class_property("max-w-md").property
        'max-width'
        >>> class_property("btn-primary")
        StyleProperty(property='class', value='btn-primary', responsive=None, state=None)
    """
    if class_name in DIRECT_MAPPINGS:
        css_property, value = DIRECT_MAPPINGS[class_name]
        return StyleProperty(property=css_property, value=value)

    match = _SPACING_RE.match(class_name)
    if match:
        return StyleProperty(property=SPACING_PROPERTIES[match.group(1)], value=spacing_value(match.group(2)))
    match = _SIZE_RE.match(class_name)
    if match:
        return StyleProperty(property=SIZE_PROPERTIES[match.group(1)], value=size_value(match.group(2)))
    match = _FONT_SIZE_RE.match(class_name)
    if match and match.group(1) in FONT_SIZES:
        return StyleProperty(property="font-size", value=FONT_SIZES[match.group(1)])
    match = _ROUNDED_RE.match(class_name)
    if match:
        size = match.group(1) or ""
        return StyleProperty(property="border-radius", value=BORDER_RADII.get(size, size))
    if class_name.startswith("bg-"):
        return StyleProperty(property="background-color", value=color_value(class_name[3:]))
    match = _TEXT_COLOR_RE.match(class_name)
    if match:
        return StyleProperty(property="color", value=color_value(match.group(1)))
    match = _BORDER_WIDTH_RE.match(class_name)
    if match:
        return StyleProperty(property="border-width", value=f"{match.group(1) or '1'}px")
    if class_name == "shadow" or class_name.startswith("shadow-"):
        return StyleProperty(property="box-shadow", value="var(--shadow)")

    return StyleProperty(property="class", value=class_name)


def tailwind_properties(class_names: str) -> list[StyleProperty]:
    """Properties for a class list: plain categories first, then breakpoints, then states."""
    properties: list[StyleProperty] = []
    for category, members in group_classes(class_names).items():
        for class_name in members:
            if category == StyleCategory.RESPONSIVE:
                breakpoint, _, base = class_name.partition(":")
                properties.append(class_property(base).model_copy(update={"responsive": breakpoint}))
            elif category == StyleCategory.STATES:
                state, _, base = class_name.partition(":")
                properties.append(class_property(base).model_copy(update={"state": state}))
            else:
                properties.append(class_property(class_name))
    return properties


def inline_properties(entries: dict[str, str]) -> list[StyleProperty]:
    return [StyleProperty(property=kebab_case(key), value=value) for key, value in entries.items()]


def element_style(spec: StyleSpec) -> ElementStyle | None:
    """Mapped style of one element, or None when it carries nothing usable."""
    properties: list[StyleProperty] = []
    module_classes: list[str] = []
    dynamic_class = None

    if spec.class_name and spec.class_expression:
        module_classes = _MODULE_REF_RE.findall(spec.class_name)
        if not module_classes:
            dynamic_class = " ".join(spec.class_name.split())
    elif spec.class_name:
        properties.extend(tailwind_properties(spec.class_name))

    properties.extend(inline_properties(spec.inline_properties))
    if not (properties or module_classes or dynamic_class):
        return None
    return ElementStyle(
        element_tag=spec.element_tag,
        properties=properties,
        module_classes=module_classes,
        dynamic_class=dynamic_class,
    )


def element_styles(specs: Iterable[StyleSpec]) -> list[ElementStyle]:
    styles = [element_style(spec) for spec in specs]
    return [style for style in styles if style is not None]
