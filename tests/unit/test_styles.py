"""Unit tests for element style mapping."""

from pathlib import Path

import pytest

from shepimport.analyzer.styles import (
    StyleCategory,
    categorize,
    class_property,
    element_style,
    element_styles,
    kebab_case,
    size_value,
    spacing_value,
    tailwind_properties,
)
from shepimport.analyzer.views import ViewBuilder
from shepimport.core.ir import StyleProperty, StyleSpec, View
from shepimport.emitter.shep import style_lines
from shepimport.parsers.component_parser import parse_component

STYLED_PAGE = """\
import styles from "./page.module.css";

export default function SettingsPage() {
  return (
    <main className="flex flex-col p-4 md:p-8">
      <section className={styles.card}>
        <h2 style={{ fontSize: 18, color: "navy" }}>Profile</h2>
      </section>
      <button className={`btn ${active ? "on" : ""}`}>Save</button>
      <p style="margin-top: 4px; color: gray">Saved</p>
    </main>
  );
}
"""


class TestCategorize:
    """Tests for grouping Tailwind classes."""

    @pytest.mark.parametrize(
        ("class_name", "category"),
        [
            ("flex", StyleCategory.LAYOUT),
            ("items-center", StyleCategory.LAYOUT),
            ("px-2", StyleCategory.SPACING),
            ("max-w-md", StyleCategory.SIZING),
            ("text-lg", StyleCategory.TYPOGRAPHY),
            ("text-center", StyleCategory.TYPOGRAPHY),
            ("text-gray-500", StyleCategory.COLORS),
            ("rounded-lg", StyleCategory.BORDERS),
            ("shadow-md", StyleCategory.EFFECTS),
            ("lg:grid", StyleCategory.RESPONSIVE),
            ("hover:underline", StyleCategory.STATES),
            ("btn-primary", StyleCategory.OTHER),
        ],
    )
    def test_categorize(self, class_name: str, category: StyleCategory) -> None:
        assert categorize(class_name) == category


class TestClassProperty:
    """Tests for mapping single classes onto CSS properties."""

    @pytest.mark.parametrize(
        ("class_name", "expected"),
        [
            ("hidden", ("display", "none")),
            ("justify-between", ("justify-content", "space-between")),
            ("font-semibold", ("font-weight", "600")),
            ("p-4", ("padding", "1rem")),
            ("mx-auto", ("margin-inline", "auto")),
            ("gap-2.5", ("gap", "0.625rem")),
            ("mt-[18px]", ("margin-top", "18px")),
            ("w-1/2", ("width", "50%")),
            ("h-screen", ("height", "100vh")),
            ("min-w-0", ("min-width", "0")),
            ("text-2xl", ("font-size", "1.5rem")),
            ("rounded", ("border-radius", "0.25rem")),
            ("rounded-full", ("border-radius", "9999px")),
            ("bg-white", ("background-color", "#ffffff")),
            ("bg-blue-600", ("background-color", "var(--color-blue-600)")),
            ("text-rose-700", ("color", "var(--color-rose-700)")),
            ("border", ("border-width", "1px")),
            ("border-2", ("border-width", "2px")),
            ("shadow-lg", ("box-shadow", "var(--shadow)")),
            ("btn-primary", ("class", "btn-primary")),
        ],
    )
    def test_class_property(self, class_name: str, expected: tuple[str, str]) -> None:
        prop = class_property(class_name)
        assert (prop.property, prop.value) == expected

    def test_value_helpers(self) -> None:
        assert spacing_value("px") == "1px"
        assert spacing_value("0") == "0"
        assert size_value("2/3") == "66.666667%"
        assert size_value("fit") == "fit-content"
        assert kebab_case("backgroundColor") == "background-color"


class TestTailwindProperties:
    """Tests for whole class lists."""

    def test_prefixed_classes_follow_plain_ones(self) -> None:
        assert tailwind_properties("hover:bg-black md:flex-row flex p-2") == [
            StyleProperty(property="display", value="flex"),
            StyleProperty(property="padding", value="0.5rem"),
            StyleProperty(property="flex-direction", value="row", responsive="md"),
            StyleProperty(property="background-color", value="#000000", state="hover"),
        ]

    def test_unmapped_classes_are_kept(self) -> None:
        assert tailwind_properties("card  card--wide") == [
            StyleProperty(property="class", value="card"),
            StyleProperty(property="class", value="card--wide"),
        ]


class TestElementStyle:
    """Tests for styles captured from components."""

    def test_component_styles(self) -> None:
        component = parse_component(STYLED_PAGE, Path("/p/app/settings/page.tsx"), "app/settings/page.tsx").component
        main, section, heading, button, paragraph = element_styles(component.styles)

        assert main.element_tag == "main"
        assert [(p.property, p.value, p.responsive) for p in main.properties] == [
            ("display", "flex", None),
            ("flex-direction", "column", None),
            ("padding", "1rem", None),
            ("padding", "2rem", "md"),
        ]
        assert section.module_classes == ["card"]
        assert section.properties == []
        assert heading.properties == [
            StyleProperty(property="font-size", value="18"),
            StyleProperty(property="color", value="navy"),
        ]
        assert button.dynamic_class == '`btn ${active ? "on" : ""}`'
        assert paragraph.properties == [
            StyleProperty(property="margin-top", value="4px"),
            StyleProperty(property="color", value="gray"),
        ]

    def test_nothing_usable_gives_no_style(self) -> None:
        assert element_style(StyleSpec(element_tag="div", class_name="  ")) is None

    def test_views_carry_styles(self) -> None:
        component = parse_component(STYLED_PAGE, Path("/p/app/settings/page.tsx"), "app/settings/page.tsx").component
        view = ViewBuilder(component).build()
        assert [s.element_tag for s in view.styles] == ["main", "section", "h2", "button", "p"]

    def test_style_lines(self) -> None:
        view = View(
            name="Settings",
            source_file="",
            styles=element_styles([StyleSpec(element_tag="main", class_name="p-4 hover:underline")]),
        )
        assert style_lines(view) == [
            "  // style main:",
            "  //   padding: 1rem",
            "  //   text-decoration: underline :hover",
        ]
