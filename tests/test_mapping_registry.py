import pytest

from orca_converters.base import ConversionContext, ConverterRegistry
from orca_converters.mapping_registry import (
    create_filament_registry,
    create_physical_printer_registry,
    create_print_registry,
    create_printer_registry,
)


def convert(registry, settings, **context_args):
    context = ConversionContext(source=settings, **context_args)
    converted, unknown = registry.convert_dict(settings, context)
    return converted, unknown, context


def test_duplicate_mapping_rejected():
    """Two source keys may not write the same OrcaSlicer key."""
    registry = ConverterRegistry()
    registry.register_simple("perimeter_speed", "inner_wall_speed")
    with pytest.raises(ValueError, match="Duplicate mapping"):
        registry.register_simple("external_perimeter_speed", "inner_wall_speed")


def test_mutually_exclusive_keys_may_share_target():
    registry = ConverterRegistry()
    registry.register_mutually_exclusive("elefant_foot_compensation",
                                         "elefant_foot_compensation", "first_layer_size_compensation")
    registry.register_simple("elefant_foot_compensation", "elefant_foot_compensation")
    registry.register_simple("first_layer_size_compensation", "elefant_foot_compensation")
    converted, _, _ = convert(registry, {"first_layer_size_compensation": "0.15"})
    assert converted == {"elefant_foot_compensation": "0.15"}


def test_registries_build_without_conflicts():
    for create in (create_print_registry, create_filament_registry,
                   create_printer_registry, create_physical_printer_registry):
        assert create().converters


def test_fan_out_keys_share_the_value():
    converted, _, _ = convert(create_filament_registry(), {"bed_temperature": "60"})
    plate_temps = [converted[key] for key in ("hot_plate_temp", "cool_plate_temp",
                                              "eng_plate_temp", "textured_plate_temp")]
    assert all(temp == plate_temps[0] for temp in plate_temps)


def test_nil_produces_no_key():
    converted, _, _ = convert(create_print_registry(), {"perimeters": "nil", "top_solid_layers": "5"})
    assert "wall_loops" not in converted
    assert converted["top_shell_layers"] == "5"


def test_unknown_keys_reported():
    _, unknown, _ = convert(create_print_registry(), {"perimeters": "2", "not_a_setting": "1"})
    assert unknown == ["not_a_setting"]


def test_max_volumetric_speed_defaults_by_filament_type():
    registry = create_filament_registry()
    converted, _, _ = convert(registry, {"filament_type": "PLA", "filament_max_volumetric_speed": "0"})
    assert converted["filament_max_volumetric_speed"] == "15"

    converted, _, _ = convert(registry, {"filament_type": "PET", "filament_max_volumetric_speed": "0"})
    assert converted["filament_max_volumetric_speed"] == "10"
    assert converted["filament_type"] == "PETG"

    converted, _, _ = convert(registry, {"filament_type": "PLA", "filament_max_volumetric_speed": "12"})
    assert converted["filament_max_volumetric_speed"] == "12"


def test_max_volumetric_speed_unknown_type_left_out():
    converted, _, _ = convert(create_filament_registry(),
                              {"filament_type": "WOOD", "filament_max_volumetric_speed": "0"})
    assert "filament_max_volumetric_speed" not in converted
    assert converted["filament_type"] == "WOOD"


def test_filament_temperatures(filament_settings):
    converted, _, context = convert(create_filament_registry(), filament_settings)
    assert converted["nozzle_temperature"] == "210"
    assert converted["nozzle_temperature_initial_layer"] == "215"
    assert context.max_temperature == 215
    for plate in ("hot_plate_temp", "cool_plate_temp", "eng_plate_temp", "textured_plate_temp"):
        assert converted[plate] == "60"


def test_filament_special_cases(filament_settings):
    converted, _, _ = convert(create_filament_registry(), filament_settings)
    assert converted["overhang_fan_threshold"] == "0%"
    assert converted["filament_start_gcode"] == ["; Filament gcode\nM900 K0.05"]
    assert converted["compatible_printers"] == []
    assert converted["compatible_printers_condition"] == "nozzle_diameter[0]==0.4"


def test_compatible_condition_discarded():
    settings = {"compatible_prints_condition": "layer_height > 0.1"}
    converted, _, _ = convert(create_filament_registry(), settings,
                              keep_condition=lambda key, value: False)
    assert converted["compatible_prints_condition"] == ""


def test_print_special_cases(print_settings):
    converted, _, context = convert(create_print_registry(), print_settings, nozzle_size="0.4")
    assert converted["seam_position"] == "aligned"
    assert converted["sparse_infill_pattern"] == "gyroid"
    assert converted["infill_combination"] == "0"
    assert converted["print_sequence"] == "by layer"
    assert converted["fuzzy_skin_point_distance"] == "0.2"
    assert converted["support_type"] == "normal(auto)"
    assert converted["support_style"] == "snug"
    # Speeds and order flags wait for the second pass
    assert "inner_wall_speed" not in converted
    assert "perimeter_speed" not in converted
    assert context.tracked["infill_first"] is True
    assert context.tracked["external_perimeters_first"] is False
    assert context.tracked["ironing_type"] == "top"


def test_print_enum_tables():
    registry = create_print_registry()
    converted, _, _ = convert(registry, {
        "fill_pattern": "rectilinear",
        "seam_position": "rear",
        "top_fill_pattern": "nonexistent",
        "support_material_pattern": "pillars",
        "support_material_interface_pattern": "concentric",
        "draft_shield": "enabled",
        "infill_every_layers": "3",
        "output_filename_format": "[input_filename_base]_[layer_height]mm.gcode",
    })
    assert converted["sparse_infill_pattern"] == "zig-zag"
    assert converted["seam_position"] == "back"
    assert "top_surface_pattern" not in converted
    assert converted["support_base_pattern"] == "default"
    assert converted["support_interface_pattern"] == "concentric"
    assert converted["draft_shield"] == "1"
    assert converted["infill_combination"] == "1"
    assert converted["filename_format"] == "{input_filename_base}_{layer_height}mm.gcode"


def test_support_distances():
    registry = create_print_registry()
    converted, _, _ = convert(registry, {
        "support_material_contact_distance": "0.2",
        "support_material_bottom_contact_distance": "0",
        "support_material_xy_spacing": "50%",
        "external_perimeter_extrusion_width": "0.45",
        "support_material_layer_height": "0",
        "support_material_style": "organic",
    }, nozzle_size="0.4")
    assert converted["support_bottom_z_distance"] == "0.2"
    assert converted["support_object_xy_distance"] == "0.225"
    assert converted["independent_support_layer_height"] == "0"
    assert converted["support_type"] == "tree(manual)"
    assert converted["support_style"] == "organic"


def test_support_xy_spacing_falls_back_to_nozzle():
    converted, _, _ = convert(create_print_registry(), {
        "support_material_xy_spacing": "50%",
        "external_perimeter_extrusion_width": "0",
    }, nozzle_size="0.4")
    assert converted["support_object_xy_distance"] == "0.2"


def test_flow_ratios_and_wall_transition():
    converted, _, _ = convert(create_print_registry(), {
        "bridge_flow_ratio": "300%",
        "fill_top_flow_ratio": "95%",
        "wall_transition_length": "0.4",
        "extrusion_width": "",
    }, nozzle_size="0.4")
    assert converted["bridge_flow"] == "2"
    assert converted["top_solid_infill_flow_ratio"] == "0.95"
    assert converted["wall_transition_length"] == "100%"
    assert converted["line_width"] == "0"


def test_printer_multivalue_settings(printer_settings):
    converted, _, _ = convert(create_printer_registry(), printer_settings, nozzle_size="0.4")
    assert converted["machine_max_acceleration_x"] == ["9000", "1000"]
    assert converted["printable_area"] == ["0x0", "250x0", "250x210", "0x210"]
    assert converted["nozzle_diameter"] == "0.4"
    assert converted["max_layer_height"] == "0.3"
    assert converted["min_layer_height"] == "0.07"
    assert converted["retract_lift_enforce"] == "Bottom Only"
    assert converted["default_filament_profile"] == "Generic PLA"
    assert converted["gcode_flavor"] == "klipper"
    assert converted["machine_start_gcode"] == ["G28\nG1 Z5"]
    assert converted["printer_notes"] == ["Printer notes\nline 2"]


def test_physical_printer_host_type():
    converted, _, _ = convert(create_physical_printer_registry(),
                              {"host_type": "moonraker", "print_host": "voron.local"})
    assert converted == {"host_type": "octoprint", "print_host": "voron.local"}


def test_infill_every_single_layer_is_no_combination():
    registry = create_print_registry()
    for value, expected in (("0", "0"), ("1", "0"), ("2", "1")):
        converted, _, _ = convert(registry, {"infill_every_layers": value})
        assert converted["infill_combination"] == expected
