import json

import pytest
import yaml
from pydantic import ValidationError

from figma_css.services.simplify_node_response import parse_figma_response
from figma_css.utils.design_tokens import (
    TokenGenerationOptions,
    generate_design_tokens,
    normalize_token_name,
    render_design_tokens,
)

DESIGN_SYSTEM_FILE = {
    "name": "Design System",
    "document": {
        "id": "0:0",
        "type": "DOCUMENT",
        "children": [
            {
                "id": "1:1",
                "name": "Brand Color",
                "type": "RECTANGLE",
                "absoluteBoundingBox": {"x": 0, "y": 0, "width": 40, "height": 40},
                "fills": [{"type": "SOLID", "color": {"r": 1, "g": 0, "b": 0, "a": 1}}],
            },
            {
                "id": "1:2",
                "name": "Spacing 16",
                "type": "RECTANGLE",
                "absoluteBoundingBox": {"x": 0, "y": 60, "width": 16, "height": 64},
            },
            {
                "id": "1:3",
                "name": "Typography",
                "type": "FRAME",
                "children": [
                    {
                        "id": "1:4",
                        "name": "Heading",
                        "type": "TEXT",
                        "characters": "Heading",
                        "style": {"fontFamily": "Inter", "fontSize": 32, "fontWeight": 700, "lineHeightPx": 40},
                    },
                ],
            },
            {
                "id": "1:5",
                "name": "Card Shadow",
                "type": "RECTANGLE",
                "effects": [
                    {"type": "DROP_SHADOW", "radius": 8, "offset": {"x": 0, "y": 4}, "color": {"r": 0, "g": 0, "b": 0, "a": 0.25}},
                ],
            },
            {"id": "1:6", "name": "Radius Large", "type": "RECTANGLE", "cornerRadius": 12},
            {"id": "1:7", "name": "Opacity 50", "type": "RECTANGLE", "opacity": 0.5},
            {
                "id": "1:8",
                "name": "Background Gradient",
                "type": "RECTANGLE",
                "fills": [
                    {
                        "type": "GRADIENT_LINEAR",
                        "gradientHandlePositions": [{"x": 0, "y": 0.5}, {"x": 1, "y": 0.5}],
                        "gradientStops": [
                            {"position": 0, "color": {"r": 1, "g": 1, "b": 1, "a": 1}},
                            {"position": 1, "color": {"r": 0, "g": 0, "b": 0, "a": 1}},
                        ],
                    },
                ],
            },
        ],
    },
}


@pytest.fixture
def design():
    return parse_figma_response(DESIGN_SYSTEM_FILE)


@pytest.fixture
def tokens(design):
    return generate_design_tokens(design, TokenGenerationOptions(format="json"))


def test_normalize_token_name():
    assert normalize_token_name("Brand Color") == "brand-color"
    assert normalize_token_name("Primary / Blue!") == "primary-blue"
    assert normalize_token_name("color-FILL_1") == "color-fill_1"
    assert normalize_token_name("1st Place") == "token-1st-place"


def test_color_tokens(tokens):
    assert tokens.colors["color-fill_1"].value == "#FF0000"
    assert tokens.colors["color-fill_1"].description == "Color extracted from style FILL_1"
    assert tokens.colors["color-brand-color"].value == "#FF0000"
    assert tokens.colors["color-brand-color"].type == "color"


def test_spacing_tokens_use_the_smaller_side(tokens):
    assert tokens.spacing["spacing-spacing-16"].value == "16px"


def test_typography_tokens_are_found_in_nested_nodes(tokens):
    heading = tokens.typography["typography-heading"]
    assert heading.type == "typography"
    assert heading.value == {
        "fontFamily": '"Inter", sans-serif',
        "fontSize": "32px",
        "fontWeight": "700",
        "lineHeight": "1.25",
    }


def test_radius_shadow_opacity_and_gradient_tokens(tokens):
    assert tokens.radii["radius-radius-large"].value == "12px"
    assert tokens.shadows["shadow-card-shadow"].value == "0px 4px 8px 0px rgba(0, 0, 0, 0.25)"
    assert tokens.opacity["opacity-opacity-50"].value == 0.5
    assert tokens.gradients["gradient-background-gradient"].value.startswith("linear-gradient(90deg, ")


def test_names_must_match_category_keywords(tokens):
    # "Brand Color" has a radius-free name, "Radius Large" has no shadow
    assert list(tokens.radii) == ["radius-radius-large"]
    assert list(tokens.shadows) == ["shadow-card-shadow"]


def test_css_output(tokens):
    css = render_design_tokens(tokens, TokenGenerationOptions(format="css", prefix="ds-"))

    assert css.startswith(":root {\n")
    assert css.endswith("}\n")
    assert "  --ds-color-brand-color: #FF0000;\n" in css
    assert "  --ds-spacing-spacing-16: 16px;\n" in css
    assert "  --ds-opacity-opacity-50: 0.5;\n" in css
    assert '  --ds-typography-heading-fontFamily: "Inter", sans-serif;\n' in css
    # Typography comes after every other group
    assert css.index("--ds-typography-heading") > css.index("--ds-gradient-background-gradient")


def test_scss_output(tokens):
    scss = render_design_tokens(tokens, TokenGenerationOptions(format="scss"))

    assert "// Colors\n" in scss
    assert "$color-brand-color: #FF0000; // Color extracted from node Brand Color\n" in scss
    assert "@mixin typography-heading {\n" in scss
    assert "  font-family: \"Inter\", sans-serif;\n" in scss
    assert "  line-height: 1.25;\n" in scss


def test_ts_output(tokens):
    ts = render_design_tokens(tokens, TokenGenerationOptions(format="ts"))

    assert ts.startswith("// Generated Design Tokens\n\nexport const designTokens = {\n")
    assert "    colorBrandColor: '#FF0000',\n" in ts
    assert "    typographyHeading: {\n" in ts
    assert "      fontSize: '32px',\n" in ts
    assert "export type ColorToken = keyof typeof designTokens.colors;\n" in ts
    assert "export type GradientToken = keyof typeof designTokens.gradients;\n" in ts


def test_json_and_yaml_outputs_parse_back(tokens):
    from_json = json.loads(render_design_tokens(tokens, TokenGenerationOptions(format="json")))
    from_yaml = yaml.safe_load(render_design_tokens(tokens, TokenGenerationOptions(format="yaml")))

    assert from_json["colors"]["color-brand-color"]["value"] == "#FF0000"
    assert from_json == from_yaml
    assert list(from_json) == ["colors", "typography", "spacing", "radii", "shadows", "opacity", "gradients"]


def test_tokens_are_written_to_output_path(design, tmp_path):
    output_path = tmp_path / "tokens" / "design-tokens.css"
    generate_design_tokens(design, TokenGenerationOptions(format="css", output_path=str(output_path)))

    assert output_path.exists()
    assert "--color-brand-color: #FF0000;" in output_path.read_text()


def test_no_file_without_output_path(design, tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    generate_design_tokens(design, TokenGenerationOptions(format="css"))

    assert list(tmp_path.iterdir()) == []


def test_unsupported_token_format_is_rejected():
    with pytest.raises(ValidationError):
        TokenGenerationOptions(format="less")


def test_design_is_not_modified(design):
    before = design.to_output()
    generate_design_tokens(design, TokenGenerationOptions(format="ts"))

    assert design.to_output() == before
