import json

import pytest
import yaml

from figma_css.services.design_file import (
    DesignFileError,
    load_design_file,
    render_output,
    simplify_design_file,
)

SAMPLE_FILE = {
    "name": "Sample",
    "document": {
        "id": "0:0",
        "type": "DOCUMENT",
        "children": [
            {
                "id": "1:1",
                "name": "Button",
                "type": "RECTANGLE",
                "absoluteBoundingBox": {"x": 0, "y": 0, "width": 120, "height": 40},
                "fills": [{"type": "SOLID", "color": {"r": 0, "g": 0, "b": 1, "a": 1}}],
                "cornerRadius": 4,
            }
        ],
    },
}


def test_load_json_file(tmp_path):
    path = tmp_path / "design.json"
    path.write_text(json.dumps(SAMPLE_FILE))

    assert load_design_file(str(path)) == SAMPLE_FILE


@pytest.mark.parametrize("suffix", [".yaml", ".yml"])
def test_load_yaml_file(tmp_path, suffix):
    path = tmp_path / f"design{suffix}"
    path.write_text(yaml.dump(SAMPLE_FILE))

    assert load_design_file(str(path)) == SAMPLE_FILE


def test_missing_file_raises_design_file_error(tmp_path):
    path = tmp_path / "missing.json"
    with pytest.raises(DesignFileError) as exc_info:
        load_design_file(str(path))

    assert exc_info.value.path == str(path)
    assert isinstance(exc_info.value.__cause__, OSError)


def test_invalid_json_raises_design_file_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(DesignFileError, match="Invalid JSON"):
        load_design_file(str(path))


def test_invalid_yaml_raises_design_file_error(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("key: [unclosed")
    with pytest.raises(DesignFileError, match="Invalid YAML"):
        load_design_file(str(path))


def test_non_object_document_is_rejected(tmp_path):
    path = tmp_path / "list.json"
    path.write_text("[1, 2, 3]")
    with pytest.raises(DesignFileError, match="got list"):
        load_design_file(str(path))


def test_simplify_design_file(tmp_path):
    path = tmp_path / "design.json"
    path.write_text(json.dumps(SAMPLE_FILE))

    design = simplify_design_file(str(path))
    assert design.name == "Sample"
    assert design.nodes[0].css.background_color == "#0000FF"
    assert design.nodes[0].border_radius == "4px"


def test_render_output_yaml_keeps_key_order():
    rendered = render_output({"name": "Sample", "nodes": [], "globalVars": {"styles": {}}}, "yaml")

    assert rendered.splitlines()[0] == "name: Sample"
    assert yaml.safe_load(rendered) == {"name": "Sample", "nodes": [], "globalVars": {"styles": {}}}


def test_render_output_json():
    rendered = render_output({"name": "Sample"}, "json")
    assert rendered == '{\n  "name": "Sample"\n}'


def test_render_output_rejects_unknown_format():
    with pytest.raises(ValueError, match="Unsupported output format"):
        render_output({}, "xml")
