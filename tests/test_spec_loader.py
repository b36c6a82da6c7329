"""
Tests for craft description loading and validation.

Verifies:
- XML and YAML parsing, defaults, craft selection
- Structural validation failures are fatal
- YAML round trip through save_to_yaml
"""

from pathlib import Path

import pytest

from multirotor_mixer.errors import SpecificationError
from multirotor_mixer.specs import (
    CraftSpecification,
    CraftSpecLoader,
    FrameType,
    MotorPort,
    PayloadObject,
    load_spec,
    validate_spec,
)

EXAMPLES = Path(__file__).resolve().parent.parent / "examples"


CRAFTS_XML = """<?xml version="1.0"?>
<quatos_configuration>
    <craft id="quad" config="QUAD_X">
        <ports>
            <port rotation="1">2</port>
            <port rotation="-1">1</port>
            <port rotation="1">4</port>
            <port rotation="-1">3</port>
        </ports>
    </craft>
    <craft id="hex" config="hex_plus" configId="42">
        <ports>
            <port rotation="1">1</port>
            <port rotation="-1">2</port>
            <port rotation="1">3</port>
            <port rotation="-1">4</port>
            <port rotation="1">5</port>
            <port rotation="-1">6</port>
        </ports>
        <Distance><Motor>0.3</Motor><esc>0.12</esc></Distance>
        <mass><motor>70</motor><arm>30</arm></mass>
        <payload>
            <cube dimX="0.1" dimY="0.04" dimZ="0.03" offsetZ="-0.05">500</cube>
        </payload>
        <cube offsetx="0.1">20</cube>
    </craft>
    <craft id="quad" config="quad_plus">
        <ports>
            <port rotation="1">1</port>
            <port rotation="-1">2</port>
            <port rotation="1">3</port>
            <port rotation="-1">4</port>
        </ports>
    </craft>
    <craft id="tri" config="custom" motors="3">
        <geometry>
            <motor port="3" rotation="1">0.3, 0.0</motor>
            <motor port="1" rotation="-1">-0.1,0.25</motor>
            <motor port="2" rotation="1">-0.15,-0.2</motor>
        </geometry>
    </craft>
</quatos_configuration>
"""


def _craft_xml(body: str, attrs: str = 'id="c" config="quad_plus"') -> str:
    return f"<quatos_configuration><craft {attrs}>{body}</craft></quatos_configuration>"


QUAD_PORTS = (
    "<ports>"
    '<port rotation="1">1</port><port rotation="-1">2</port>'
    '<port rotation="1">3</port><port rotation="-1">4</port>'
    "</ports>"
)


# =============================================================================
# XML
# =============================================================================

def test_xml_first_craft_and_defaults():
    """Without an id, the first craft is used with default masses and distances."""
    spec = CraftSpecLoader().load_from_xml_string(CRAFTS_XML)

    assert spec.identifier == "quad"
    assert spec.frame_type is FrameType.QUAD_X
    assert spec.config_id == 5
    assert spec.ports == (2, 1, 4, 3)
    assert spec.spin_directions == (1, -1, 1, -1)
    assert spec.mass_motor_g == 100.0
    assert spec.mass_esc_g == 20.0
    assert spec.mass_arm_g == 80.0
    assert spec.dist_motor_m == 0.25
    assert spec.dist_esc_m == 0.1
    assert spec.payloads == ()


def test_xml_duplicate_id_first_wins():
    """Later crafts sharing an id are ignored."""
    spec = CraftSpecLoader().load_from_xml_string(CRAFTS_XML, craft_id="quad")

    assert spec.frame_type is FrameType.QUAD_X


def test_xml_selected_craft_fields():
    """Case-insensitive tags, config id override, partial masses and nested cubes."""
    spec = CraftSpecLoader().load_from_xml_string(CRAFTS_XML, craft_id="hex")

    assert spec.config_id == 42
    assert spec.dist_motor_m == 0.3
    assert spec.dist_esc_m == 0.12
    assert spec.mass_motor_g == 70.0
    assert spec.mass_esc_g == 20.0
    assert spec.mass_arm_g == 30.0
    assert len(spec.payloads) == 2

    battery, point = spec.payloads
    assert battery.mass_g == 500.0
    assert battery.dimensions == (0.1, 0.04, 0.03)
    assert battery.offset == (0.0, 0.0, -0.05)
    assert battery.is_solid
    assert point.offset == (0.1, 0.0, 0.0)
    assert not point.is_solid


def test_xml_custom_geometry():
    """Custom motors carry their own coordinates and ports."""
    spec = CraftSpecLoader().load_from_xml_string(CRAFTS_XML, craft_id="tri")

    assert spec.frame_type is FrameType.CUSTOM
    assert spec.config_id == 0
    assert spec.ports == (3, 1, 2)
    assert spec.custom_positions == ((0.3, 0.0), (-0.1, 0.25), (-0.15, -0.2))


def test_xml_craft_not_found():
    with pytest.raises(SpecificationError, match="not found"):
        CraftSpecLoader().load_from_xml_string(CRAFTS_XML, craft_id="nope")


def test_xml_parse_error():
    with pytest.raises(SpecificationError, match="parsing XML failed"):
        CraftSpecLoader().load_from_xml_string("<quatos_configuration><craft>")


def test_missing_config_type():
    with pytest.raises(SpecificationError, match="missing config type"):
        CraftSpecLoader().load_from_xml_string(_craft_xml(QUAD_PORTS, 'id="c"'))


def test_invalid_config_type():
    with pytest.raises(SpecificationError, match="invalid config type"):
        CraftSpecLoader().load_from_xml_string(_craft_xml(QUAD_PORTS, 'id="c" config="y6"'))


def test_custom_requires_motor_count():
    body = '<geometry><motor port="1" rotation="1">0.2,0</motor></geometry>'
    with pytest.raises(SpecificationError, match="motors attribute"):
        CraftSpecLoader().load_from_xml_string(_craft_xml(body, 'id="c" config="custom"'))


def test_missing_rotation():
    body = "<ports><port>1</port><port>2</port><port>3</port><port>4</port></ports>"
    with pytest.raises(SpecificationError, match="rotation"):
        CraftSpecLoader().load_from_xml_string(_craft_xml(body))


def test_duplicate_ports_fail_validation():
    """Validation errors are fatal and carry the ValidationResult."""
    body = (
        "<ports>"
        '<port rotation="1">1</port><port rotation="-1">1</port>'
        '<port rotation="1">3</port><port rotation="-1">4</port>'
        "</ports>"
    )
    with pytest.raises(SpecificationError) as excinfo:
        CraftSpecLoader().load_from_xml_string(_craft_xml(body))

    result = excinfo.value.result
    assert result is not None
    assert not result.is_valid
    assert any("more than once" in e.message for e in result.errors)


def test_wrong_motor_count_fails_validation():
    body = '<ports><port rotation="1">1</port><port rotation="-1">2</port></ports>'
    with pytest.raises(SpecificationError):
        CraftSpecLoader().load_from_xml_string(_craft_xml(body))


def test_load_from_file(tmp_path):
    path = tmp_path / "crafts.xml"
    path.write_text(CRAFTS_XML)

    spec = load_spec(path, craft_id="tri")
    assert spec.motor_count == 3


def test_load_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        CraftSpecLoader().load(tmp_path / "missing.xml")


def test_load_unknown_suffix(tmp_path):
    path = tmp_path / "crafts.json"
    path.write_text("{}")

    with pytest.raises(SpecificationError, match="Unsupported"):
        CraftSpecLoader().load(path)


def test_example_files_load():
    """The shipped example descriptions are valid."""
    loader = CraftSpecLoader()
    for craft_id in ("quad_plus_250", "hex_x_550", "octo_x_800", "y6_custom"):
        spec = loader.load(EXAMPLES / "crafts.xml", craft_id)
        assert spec.identifier == craft_id

    spec = loader.load(EXAMPLES / "crafts.yaml", "hex_plus_tarot")
    assert spec.frame_type is FrameType.HEX_PLUS
    assert len(spec.payloads) == 2
    assert spec.payloads[1].dimensions == (0.0, 0.0, 0.0)


# =============================================================================
# YAML / DICT
# =============================================================================

def test_dict_single_craft():
    """A bare craft mapping is accepted."""
    spec = CraftSpecLoader().load_from_dict({
        "id": "oct",
        "config": "octo_plus",
        "ports": [{"port": i + 1, "rotation": 1 if i % 2 == 0 else -1} for i in range(8)],
        "objects": [{"mass": 300, "offset": [0, 0, -0.05], "dimensions": [0.1, 0.05, 0.03]}],
    })

    assert spec.motor_count == 8
    assert spec.config_id == 30
    assert spec.payloads[0].mass_g == 300.0


def test_yaml_round_trip(tmp_path):
    """save_to_yaml output loads back to an equal specification."""
    spec = CraftSpecification(
        identifier="tri",
        frame_type=FrameType.CUSTOM,
        config_id=7,
        motors=(
            MotorPort(1, 1, (0.3, 0.0)),
            MotorPort(2, -1, (-0.1, 0.25)),
            MotorPort(3, 1, (-0.15, -0.2)),
        ),
        mass_motor_g=110.0,
        dist_esc_m=0.05,
        payloads=(PayloadObject(250.0, (0.0, 0.01, -0.03), (0.08, 0.03, 0.02)),),
    )
    path = tmp_path / "out" / "tri.yaml"

    loader = CraftSpecLoader()
    loader.save_to_yaml(spec, path)
    loaded = loader.load(path)

    assert loaded == spec


def test_yaml_parse_error(tmp_path):
    path = tmp_path / "bad.yaml"
    path.write_text("crafts: [\n  - id: a\n")

    with pytest.raises(SpecificationError):
        CraftSpecLoader().load_from_yaml(path)


# =============================================================================
# VALIDATOR
# =============================================================================

def test_validator_warns_on_same_spin():
    spec = CraftSpecification(
        identifier="q",
        frame_type=FrameType.QUAD_X,
        motors=tuple(MotorPort(i + 1, 1) for i in range(4)),
    )
    result = validate_spec(spec)

    assert result.is_valid
    assert any("yaw" in w.message for w in result.warnings)


def test_validator_errors():
    """Bad rotations, out-of-range ports and negative quantities."""
    spec = CraftSpecification(
        identifier="q",
        frame_type=FrameType.QUAD_PLUS,
        motors=(MotorPort(0, 1), MotorPort(2, 2), MotorPort(3, 1), MotorPort(17, -1)),
        mass_arm_g=-5.0,
    )
    result = validate_spec(spec)
    fields = {e.field for e in result.errors}

    assert not result.is_valid
    assert "motors[0].port" in fields
    assert "motors[1].rotation" in fields
    assert "motors[3].port" in fields
    assert "mass_arm_g" in fields
    assert "Validation FAILED" in str(result)


def test_validator_custom_needs_positions():
    spec = CraftSpecification(
        identifier="c",
        frame_type=FrameType.CUSTOM,
        motors=(MotorPort(1, 1, (0.2, 0.0)), MotorPort(2, -1), MotorPort(3, 1, (0.0, 0.0))),
    )
    result = validate_spec(spec)
    fields = [e.field for e in result.errors]

    assert "motors[1].position" in fields
    assert "motors[2].position" in fields
    print("Validator custom geometry checks: PASSED")


# =============================================================================
# MALFORMED SECTIONS
# =============================================================================

def _quad_dict(**overrides):
    data = {
        "id": "q",
        "config": "quad_plus",
        "ports": [{"port": i + 1, "rotation": 1 if i % 2 == 0 else -1} for i in range(4)],
    }
    data.update(overrides)
    return data


def test_scalar_object_entry_rejected():
    """Object entries must be mappings."""
    with pytest.raises(SpecificationError, match=r"craft 'q' objects\[0\]: expected a mapping"):
        CraftSpecLoader().load_from_dict(_quad_dict(objects=[5.0]))


def test_scalar_port_entry_rejected():
    ports = [{"port": 1, "rotation": 1}, 2, {"port": 3, "rotation": 1}, {"port": 4, "rotation": -1}]

    with pytest.raises(SpecificationError, match=r"craft 'q' ports\[1\]"):
        CraftSpecLoader().load_from_dict(_quad_dict(ports=ports))


def test_scalar_distance_rejected():
    with pytest.raises(SpecificationError, match="craft 'q' distance: expected a mapping"):
        CraftSpecLoader().load_from_dict(_quad_dict(distance=5))


def test_scalar_mass_and_section_lists_rejected():
    """Scalar mass sections, and scalars where lists belong."""
    loader = CraftSpecLoader()

    with pytest.raises(SpecificationError, match="mass"):
        loader.load_from_dict(_quad_dict(mass=100))
    with pytest.raises(SpecificationError, match="objects: expected a list"):
        loader.load_from_dict(_quad_dict(objects=5))
    with pytest.raises(SpecificationError, match="crafts: expected a list"):
        loader.load_from_dict({"crafts": "q"})


def test_scalar_geometry_entry_rejected():
    data = {"id": "t", "config": "custom", "motors": 3, "geometry": [0.3, 0.1, 0.2]}

    with pytest.raises(SpecificationError, match=r"craft 't' geometry\[0\]"):
        CraftSpecLoader().load_from_dict(data)
