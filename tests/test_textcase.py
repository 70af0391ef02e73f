import pytest

from wpscaffold.textcase import camel_case, kebab_case, pascal_case, snake_case


@pytest.mark.parametrize(
    "text, kebab, snake, pascal, camel",
    [
        ("My Plugin", "my-plugin", "my_plugin", "MyPlugin", "myPlugin"),
        ("my-cool-theme", "my-cool-theme", "my_cool_theme", "MyCoolTheme", "myCoolTheme"),
        ("XMLSitemap Tools", "xml-sitemap-tools", "xml_sitemap_tools", "XmlSitemapTools", "xmlSitemapTools"),
        ("acme 2 widgets", "acme-2-widgets", "acme_2_widgets", "Acme2Widgets", "acme2Widgets"),
    ],
)
def test_conversions(text: str, kebab: str, snake: str, pascal: str, camel: str) -> None:
    assert kebab_case(text) == kebab
    assert snake_case(text) == snake
    assert pascal_case(text) == pascal
    assert camel_case(text) == camel


def test_empty() -> None:
    assert kebab_case("") == ""
    assert camel_case("  ") == ""
