import yaml
import json

from figma_css.services.design_file import render_output
from figma_css.services.simplify_node_response import parse_figma_response

CARD = {
    "id": "1:1",
    "name": "Card",
    "type": "FRAME",
    "clipsContent": True,
    "layoutMode": "VERTICAL",
    "itemSpacing": 8,
    "paddingTop": 16,
    "paddingRight": 16,
    "paddingBottom": 16,
    "paddingLeft": 16,
    "absoluteBoundingBox": {"x": 0, "y": 0, "width": 240, "height": 160},
    "fills": [{"type": "SOLID", "color": {"r": 1, "g": 1, "b": 1, "a": 1}}],
    "cornerRadius": 8,
    "children": [
        {
            "id": f"1:{index}",
            "name": f"Label {index}",
            "type": "TEXT",
            "characters": f"Item {index}",
            "absoluteBoundingBox": {"x": 16, "y": 16 + index * 24, "width": 208, "height": 20},
            "style": {"fontFamily": "Inter", "fontSize": 14, "fontWeight": 400, "lineHeightPx": 20},
            "fills": [{"type": "SOLID", "color": {"r": 0.1, "g": 0.1, "b": 0.1, "a": 1}}],
        }
        for index in range(2, 8)
    ],
}

SAMPLE_RESPONSE = {
    "name": "Benchmark",
    "lastModified": "2024-01-01T00:00:00Z",
    "document": {"id": "0:0", "type": "DOCUMENT", "children": [CARD]},
}


def test_yaml_token_efficiency():
    """
    Tests if YAML serialization of simplified output is more concise (shorter
    string length) than the indented JSON the CLI writes.
    This is a proxy for "token efficiency" in terms of string length.
    """
    output = parse_figma_response(SAMPLE_RESPONSE).to_output()

    # default_flow_style=False makes it block style
    yaml_result = yaml.dump(output, sort_keys=False, default_flow_style=False)

    json_result = render_output(output, "json")

    print(f"\nYAML Output (length: {len(yaml_result)})")
    print(f"JSON Output (length: {len(json_result)})")

    assert len(yaml_result) < len(json_result), \
        f"Expected YAML to be shorter. YAML length: {len(yaml_result)}, JSON length: {len(json_result)}"


def test_simplified_output_is_smaller_than_source():
    """Interning repeated styles should shrink the document, not grow it."""
    output = parse_figma_response(SAMPLE_RESPONSE).to_output()

    source_size = len(json.dumps(SAMPLE_RESPONSE, separators=(',', ':')))
    # The simplified tree also carries derived CSS, so compare without it
    for node in output["nodes"]:
        _strip_css(node)
    simplified_size = len(json.dumps(output, separators=(',', ':')))

    assert simplified_size < source_size, \
        f"Expected simplified output to be smaller. Source: {source_size}, simplified: {simplified_size}"

    # Six labels share one text style and one fill
    styles = output["globalVars"]["styles"]
    assert len([key for key in styles if key.startswith("TEXT_STYLE_")]) == 1
    assert len([key for key in styles if key.startswith("FILL_")]) == 2


def _strip_css(node):
    node.pop("css", None)
    for child in node.get("children", []):
        _strip_css(child)
