"""
Mapping registries for converting SuperSlicer/PrusaSlicer settings to OrcaSlicer format.

Transforms take (value, context) and return the OrcaSlicer value, or None to
leave the setting out so OrcaSlicer falls back to its own default.
"""
import logging

from orca_converters.base import ConversionResult, ConverterRegistry
from orca_converters.lookup_tables import (
    DEFAULT_INTERFACE_PATTERN,
    DEFAULT_MAX_VOLUMETRIC_SPEEDS,
    DEFAULT_SUPPORT_PATTERN,
    FILAMENT_TYPES,
    GCODE_FLAVORS,
    HOST_TYPES,
    INFILL_PATTERNS,
    INTERFACE_PATTERNS,
    SEAM_POSITIONS,
    SPEED_SEQUENCE,
    SUPPORT_PATTERNS,
    SUPPORT_STYLES,
    THUMBNAIL_FORMATS,
    ZHOP_ENFORCEMENT,
)
from orca_converters.values import (
    is_truthy,
    mm_to_percent,
    percent_to_mm,
    percent_to_ratio,
    split_quoted_list,
    to_number,
    unescape_gcode,
    unquote,
)

logger = logging.getLogger(__name__)


def create_print_registry():
    """Create registry for print profile settings."""
    registry = ConverterRegistry('print')

    # Layer height and shell settings
    registry.register_renames({
        "layer_height": "layer_height",
        "first_layer_height": "initial_layer_print_height",
        "top_solid_layers": "top_shell_layers",
        "bottom_solid_layers": "bottom_shell_layers",
        "top_solid_min_thickness": "top_shell_thickness",
        "bottom_solid_min_thickness": "bottom_shell_thickness",
        "interface_shells": "interface_shells",
        "ensure_vertical_shell_thickness": "ensure_vertical_shell_thickness",
        "min_width_top_surface": "min_width_top_surface",
    })

    # Perimeter/wall settings
    registry.register_renames({
        "perimeters": "wall_loops",
        "perimeter_generator": "wall_generator",
        "wall_distribution_count": "wall_distribution_count",
        "wall_transition_angle": "wall_transition_angle",
        "wall_transition_filter_deviation": "wall_transition_filter_deviation",
        "min_bead_width": "min_bead_width",
        "min_feature_size": "min_feature_size",
        "thin_walls": "detect_thin_wall",
        "overhangs": "detect_overhang_wall",
        "extra_perimeters_on_overhangs": "extra_perimeters_on_overhangs",
        "overhangs_reverse": "overhang_reverse",
        "overhangs_reverse_threshold": "overhang_reverse_threshold",
        "only_one_perimeter_first_layer": "only_one_wall_first_layer",
        "only_one_perimeter_top": "only_one_wall_top",
        "staggered_inner_seams": "staggered_inner_seams",
        "seam_gap": "seam_gap",
    })
    registry.register_simple("wall_transition_length", "wall_transition_length",
                             lambda value, ctx: mm_to_percent(ctx.nozzle_size, value))
    registry.register_simple("small_perimeter_min_length", "small_perimeter_threshold",
                             percent_of_nozzle)
    registry.register_simple("seam_position", "seam_position",
                             lookup(SEAM_POSITIONS, "seam_position"))

    # Wall/infill order is derived from both flags after the main pass
    registry.register_tracked("external_perimeters_first", "infill_first")

    # Infill settings
    registry.register_renames({
        "fill_density": "sparse_infill_density",
        "fill_angle": "infill_direction",
        "infill_anchor": "infill_anchor",
        "infill_anchor_max": "infill_anchor_max",
        "infill_overlap": "infill_wall_overlap",
        "solid_infill_below_area": "minimum_sparse_infill_area",
        "gap_fill_min_length": "filter_out_gap_fill",
    })
    registry.register_simple("fill_pattern", "sparse_infill_pattern",
                             lookup(INFILL_PATTERNS, "fill_pattern"))
    registry.register_simple("top_fill_pattern", "top_surface_pattern",
                             lookup(INFILL_PATTERNS, "top_fill_pattern"))
    registry.register_simple("bottom_fill_pattern", "bottom_surface_pattern",
                             lookup(INFILL_PATTERNS, "bottom_fill_pattern"))
    # Combining infill every 1 layer means no combination, hence > 1 rather than > 0
    registry.register_simple("infill_every_layers", "infill_combination",
                             lambda value, ctx: "1" if to_number(value) > 1 else "0")

    # Extrusion width settings
    registry.register_simple("extrusion_width", "line_width",
                             lambda value, ctx: "0" if value == "" else value)
    registry.register_renames({
        "first_layer_extrusion_width": "initial_layer_line_width",
        "perimeter_extrusion_width": "inner_wall_line_width",
        "external_perimeter_extrusion_width": "outer_wall_line_width",
        "infill_extrusion_width": "sparse_infill_line_width",
        "solid_infill_extrusion_width": "internal_solid_infill_line_width",
        "top_infill_extrusion_width": "top_surface_line_width",
        "support_material_extrusion_width": "support_line_width",
    })

    # Flow and bridge settings
    registry.register_renames({
        "extrusion_multiplier": "print_flow_ratio",
        "initial_layer_flow_ratio": "bottom_solid_infill_flow_ratio",
        "thick_bridges": "thick_bridges",
        "bridge_overlap_min": "bridge_density",
        "bridge_angle": "bridge_angle",
        "dont_support_bridges": "bridge_no_support",
    })
    registry.register_simple("bridge_flow_ratio", "bridge_flow",
                             lambda value, ctx: percent_to_ratio(value))
    registry.register_simple("fill_top_flow_ratio", "top_solid_infill_flow_ratio",
                             lambda value, ctx: percent_to_ratio(value))

    # Speed settings that are never relative to other speeds. The relative
    # ones are resolved after the main pass (see print_speeds.py).
    registry.register_renames({
        "bridge_speed_internal": "internal_bridge_speed",
        "brim_speed": "skirt_speed",
        "wipe_speed": "wipe_speed",
        "travel_speed": "travel_speed",
        "travel_speed_z": "travel_speed_z",
        "enable_dynamic_overhang_speeds": "enable_overhang_speed",
    })
    registry.register_tracked(*SPEED_SEQUENCE, "dynamic_overhang_speeds", as_flag=False)

    # Acceleration settings
    registry.register_renames({
        "default_acceleration": "default_acceleration",
        "bridge_acceleration": "bridge_acceleration",
        "first_layer_acceleration": "initial_layer_acceleration",
        "perimeter_acceleration": "inner_wall_acceleration",
        "external_perimeter_acceleration": "outer_wall_acceleration",
        "infill_acceleration": "sparse_infill_acceleration",
        "solid_infill_acceleration": "internal_solid_infill_acceleration",
        "top_solid_infill_acceleration": "top_surface_acceleration",
        "travel_acceleration": "travel_acceleration",
    })

    # Skirt/brim settings
    registry.register_renames({
        "skirts": "skirt_loops",
        "skirt_distance": "skirt_distance",
        "skirt_height": "skirt_height",
        "brim_type": "brim_type",
        "brim_width": "brim_width",
        "brim_separation": "brim_object_gap",
        "brim_ears": "brim_ears",
        "brim_ears_detection_length": "brim_ears_detection_length",
        "brim_ears_max_angle": "brim_ears_max_angle",
    })
    registry.register_simple("draft_shield", "draft_shield", convert_draft_shield)

    # Support settings
    registry.register_renames({
        "support_material": "enable_support",
        "support_material_angle": "support_angle",
        "support_material_enforce_layers": "enforce_support_layers",
        "support_material_spacing": "support_base_pattern_spacing",
        "support_material_contact_distance": "support_top_z_distance",
        "support_material_bottom_interface_layers": "support_interface_bottom_layers",
        "support_material_interface_contact_loops": "support_interface_loop_pattern",
        "support_material_interface_spacing": "support_interface_spacing",
        "support_material_interface_layers": "support_interface_top_layers",
        "support_material_buildplate_only": "support_on_build_plate_only",
        "support_material_threshold": "support_threshold_angle",
    })
    registry.register_simple("support_material_bottom_contact_distance", "support_bottom_z_distance",
                             convert_bottom_contact_distance)
    registry.register_simple("support_material_layer_height", "independent_support_layer_height",
                             lambda value, ctx: "1" if to_number(value) > 0 else "0")
    registry.register_simple("support_material_pattern", "support_base_pattern",
                             lambda value, ctx: value if value in SUPPORT_PATTERNS else DEFAULT_SUPPORT_PATTERN)
    registry.register_simple("support_material_interface_pattern", "support_interface_pattern",
                             lambda value, ctx: value if value in INTERFACE_PATTERNS else DEFAULT_INTERFACE_PATTERN)
    registry.register_simple("support_material_xy_spacing", "support_object_xy_distance",
                             convert_support_xy_spacing)
    # OrcaSlicer consolidates three support-material options to two
    registry.register_custom("support_material_style", convert_support_style)

    # Tree support settings
    registry.register_renames({
        "support_tree_angle": "tree_support_branch_angle",
        "support_tree_angle_slow": "tree_support_angle_slow",
        "support_tree_branch_diameter": "tree_support_branch_diameter",
        "support_tree_branch_diameter_angle": "tree_support_branch_diameter_angle",
        "support_tree_branch_diameter_double_wall": "tree_support_branch_diameter_double_wall",
        "support_tree_tip_diameter": "tree_support_tip_diameter",
        "support_tree_top_rate": "tree_support_top_rate",
    })

    # Raft settings
    registry.register_renames({
        "raft_layers": "raft_layers",
        "raft_contact_distance": "raft_contact_distance",
        "raft_expansion": "raft_expansion",
        "raft_first_layer_density": "raft_first_layer_density",
        "raft_first_layer_expansion": "raft_first_layer_expansion",
    })

    # Ironing settings. The ironing type is only emitted if ironing is enabled.
    registry.register_tracked("ironing")
    registry.register_tracked("ironing_type", as_flag=False)
    registry.register_renames({
        "ironing_angle": "ironing_angle",
        "ironing_flowrate": "ironing_flow",
        "ironing_spacing": "ironing_spacing",
        "ironing_speed": "ironing_speed",
    })

    # Wipe tower (prime tower) settings
    registry.register_renames({
        "wipe_tower": "enable_prime_tower",
        "wipe_tower_width": "prime_tower_width",
        "wipe_tower_brim_width": "prime_tower_brim_width",
        "wipe_tower_no_sparse_layers": "wipe_tower_no_sparse_layers",
        "ooze_prevention": "ooze_prevention",
        "standby_temperature_delta": "standby_temperature_delta",
    })

    # Travel settings
    registry.register_renames({
        "avoid_crossing_perimeters": "reduce_crossing_wall",
        "avoid_crossing_perimeters_max_detour": "max_travel_detour_distance",
        "only_retract_when_crossing_perimeters": "reduce_infill_retraction",
    })

    # Precision settings
    # Note: SuperSlicer calls it first_layer_size_compensation, PrusaSlicer elefant_foot_compensation
    registry.register_mutually_exclusive("elefant_foot_compensation",
                                         "elefant_foot_compensation", "first_layer_size_compensation")
    registry.register_renames({
        "resolution": "resolution",
        "slice_closing_radius": "slice_closing_radius",
        "slicing_mode": "slicing_mode",
        "xy_size_compensation": "xy_contour_compensation",
        "xy_inner_size_compensation": "xy_hole_compensation",
        "elefant_foot_compensation": "elefant_foot_compensation",
        "first_layer_size_compensation": "elefant_foot_compensation",
        "hole_to_polyhole": "hole_to_polyhole",
        "hole_to_polyhole_threshold": "hole_to_polyhole_threshold",
        "hole_to_polyhole_twisted": "hole_to_polyhole_twisted",
        "arc_fitting": "enable_arc_fitting",
        "z_offset": "z_offset",
    })

    # Fuzzy skin settings
    registry.register_simple("fuzzy_skin", "fuzzy_skin")
    registry.register_simple("fuzzy_skin_point_dist", "fuzzy_skin_point_distance", percent_of_nozzle)
    registry.register_simple("fuzzy_skin_thickness", "fuzzy_skin_thickness", percent_of_nozzle)

    # Output settings
    registry.register_renames({
        "gcode_comments": "gcode_comments",
        "gcode_label_objects": "gcode_label_objects",
    })
    registry.register_simple("output_filename_format", "filename_format", convert_filename_format)
    registry.register_simple("post_process", "post_process", convert_gcode_block)
    registry.register_simple("notes", "notes", convert_gcode_block)
    # SuperSlicer/PrusaSlicer have this as a boolean, OrcaSlicer as a dropdown
    registry.register_simple("complete_objects", "print_sequence",
                             lambda value, ctx: "by object" if is_truthy(value) else "by layer")

    # Compatibility and inheritance
    registry.register_simple("inherits", "inherits")
    registry.register_simple("compatible_printers", "compatible_printers",
                             lambda value, ctx: split_quoted_list(value))
    registry.register_simple("compatible_printers_condition", "compatible_printers_condition",
                             compatible_condition("compatible_printers_condition"))

    return registry


def create_filament_registry():
    """Create registry for filament profile settings."""
    registry = ConverterRegistry('filament')

    # Basic filament info
    registry.register_simple("filament_type", "filament_type",
                             lambda value, ctx: FILAMENT_TYPES.get(value, value))
    registry.register_renames({
        "filament_vendor": "filament_vendor",
        "filament_colour": "default_filament_colour",
        "filament_cost": "filament_cost",
        "filament_density": "filament_density",
        "filament_diameter": "filament_diameter",
        "filament_soluble": "filament_soluble",
        "filament_shrink": "filament_shrink",
        "extrusion_multiplier": "filament_flow_ratio",
        "filament_minimal_purge_on_wipe_tower": "filament_minimal_purge_on_wipe_tower",
    })
    registry.register_simple("filament_max_volumetric_speed", "filament_max_volumetric_speed",
                             convert_max_volumetric_speed)
    registry.register_simple("filament_notes", "filament_notes", convert_gcode_block)

    # Temperature settings
    registry.register_simple("temperature", "nozzle_temperature", track_max_temperature)
    registry.register_simple("first_layer_temperature", "nozzle_temperature_initial_layer",
                             track_max_temperature)
    registry.register_simple("chamber_temperature", "chamber_temperature")
    # OrcaSlicer has one bed temperature per plate type
    registry.register_split("bed_temperature", [
        "hot_plate_temp",
        "cool_plate_temp",
        "eng_plate_temp",
        "textured_plate_temp",
    ])
    registry.register_split("first_layer_bed_temperature", [
        "hot_plate_temp_initial_layer",
        "cool_plate_temp_initial_layer",
        "eng_plate_temp_initial_layer",
        "textured_plate_temp_initial_layer",
    ])

    # Cooling settings
    registry.register_renames({
        "bridge_fan_speed": "overhang_fan_speed",
        "disable_fan_first_layers": "close_fan_the_first_x_layers",
        "fan_always_on": "reduce_fan_stop_start_freq",
        "fan_below_layer_time": "fan_cooling_layer_time",
        "fan_speedup_time": "fan_speedup_time",
        "fan_speedup_overhangs": "fan_speedup_overhangs",
        "fan_kickstart": "fan_kickstart",
        "full_fan_speed_layer": "full_fan_speed_layer",
        "max_fan_speed": "fan_max_speed",
        "min_fan_speed": "fan_min_speed",
        "min_print_speed": "slow_down_min_speed",
        "slowdown_below_layer_time": "slow_down_layer_time",
        "support_material_interface_fan_speed": "support_material_interface_fan_speed",
    })
    # The closest OrcaSlicer equivalent is a percentage threshold
    registry.register_simple("external_perimeter_fan_speed", "overhang_fan_threshold",
                             convert_fan_speed_threshold)

    # Retraction settings
    registry.register_renames({
        "filament_deretract_speed": "filament_deretraction_speed",
        "filament_retract_before_travel": "filament_retraction_minimum_travel",
        "filament_retract_before_wipe": "filament_retract_before_wipe",
        "filament_retract_layer_change": "filament_retract_when_changing_layer",
        "filament_retract_length": "filament_retraction_length",
        "filament_retract_lift": "filament_z_hop",
        "filament_retract_lift_above": "filament_retract_lift_above",
        "filament_retract_lift_below": "filament_retract_lift_below",
        "filament_retract_restart_extra": "filament_retract_restart_extra",
        "filament_retract_speed": "filament_retraction_speed",
        "filament_wipe": "filament_wipe",
    })

    # G-code
    registry.register_simple("start_filament_gcode", "filament_start_gcode", convert_gcode_block)
    registry.register_simple("end_filament_gcode", "filament_end_gcode", convert_gcode_block)

    # Compatibility and inheritance
    registry.register_simple("inherits", "inherits")
    registry.register_simple("compatible_printers", "compatible_printers",
                             lambda value, ctx: split_quoted_list(value))
    registry.register_simple("compatible_prints", "compatible_prints",
                             lambda value, ctx: split_quoted_list(value))
    registry.register_simple("compatible_printers_condition", "compatible_printers_condition",
                             compatible_condition("compatible_printers_condition"))
    registry.register_simple("compatible_prints_condition", "compatible_prints_condition",
                             compatible_condition("compatible_prints_condition"))

    return registry


def create_printer_registry():
    """Create registry for printer profile settings."""
    registry = ConverterRegistry('printer')

    # Per-extruder values: OrcaSlicer wants either the full list or the first entry
    registry.register_multivalue(
        'array',
        "machine_max_acceleration_e", "machine_max_acceleration_extruding",
        "machine_max_acceleration_retracting", "machine_max_acceleration_travel",
        "machine_max_acceleration_x", "machine_max_acceleration_y", "machine_max_acceleration_z",
        "machine_max_feedrate_e", "machine_max_feedrate_x", "machine_max_feedrate_y",
        "machine_max_feedrate_z",
        "machine_max_jerk_e", "machine_max_jerk_x", "machine_max_jerk_y", "machine_max_jerk_z",
        "machine_min_extruding_rate", "machine_min_travel_rate",
        "bed_shape", "thumbnails",
    )
    registry.register_multivalue(
        'single',
        "max_layer_height", "min_layer_height", "deretract_speed", "default_filament_profile",
        "nozzle_diameter", "retract_before_wipe", "retract_length_toolchange",
        "retract_restart_extra_toolchange", "retract_restart_extra", "retract_layer_change",
        "retract_length", "retract_lift", "retract_lift_top", "retract_before_travel",
        "retract_speed", "wipe",
    )

    # Basic printer info
    registry.register_renames({
        "printer_technology": "printer_technology",
        "printer_variant": "printer_variant",
        "nozzle_diameter": "nozzle_diameter",
        "bed_shape": "printable_area",
        "max_print_height": "printable_height",
        "bed_custom_model": "bed_custom_model",
        "bed_custom_texture": "bed_custom_texture",
        "default_print_profile": "default_print_profile",
        "print_host": "print_host",
        "silent_mode": "silent_mode",
        "single_extruder_multi_material": "single_extruder_multi_material",
        "thumbnails": "thumbnails",
        "use_firmware_retraction": "use_firmware_retraction",
        "use_relative_e_distances": "use_relative_e_distances",
    })
    registry.register_simple("printer_notes", "printer_notes", convert_gcode_block)
    registry.register_simple("gcode_flavor", "gcode_flavor", lookup(GCODE_FLAVORS, "gcode_flavor"))
    registry.register_simple("thumbnails_format", "thumbnails_format",
                             lookup(THUMBNAIL_FORMATS, "thumbnails_format"))
    registry.register_simple("default_filament_profile", "default_filament_profile",
                             lambda value, ctx: unescape_gcode(unquote(value)))
    registry.register_simple("inherits", "inherits")

    # Layer height limits may be a percentage of the nozzle diameter
    registry.register_simple("max_layer_height", "max_layer_height", percent_of_nozzle)
    registry.register_simple("min_layer_height", "min_layer_height", percent_of_nozzle)

    # Machine limits
    registry.register_renames({
        "machine_max_acceleration_e": "machine_max_acceleration_e",
        "machine_max_acceleration_extruding": "machine_max_acceleration_extruding",
        "machine_max_acceleration_retracting": "machine_max_acceleration_retracting",
        "machine_max_acceleration_travel": "machine_max_acceleration_travel",
        "machine_max_acceleration_x": "machine_max_acceleration_x",
        "machine_max_acceleration_y": "machine_max_acceleration_y",
        "machine_max_acceleration_z": "machine_max_acceleration_z",
        "machine_max_feedrate_e": "machine_max_speed_e",
        "machine_max_feedrate_x": "machine_max_speed_x",
        "machine_max_feedrate_y": "machine_max_speed_y",
        "machine_max_feedrate_z": "machine_max_speed_z",
        "machine_max_jerk_e": "machine_max_jerk_e",
        "machine_max_jerk_x": "machine_max_jerk_x",
        "machine_max_jerk_y": "machine_max_jerk_y",
        "machine_max_jerk_z": "machine_max_jerk_z",
        "machine_min_extruding_rate": "machine_min_extruding_rate",
        "machine_min_travel_rate": "machine_min_travel_rate",
    })

    # Retraction settings
    registry.register_renames({
        "deretract_speed": "deretraction_speed",
        "retract_before_wipe": "retract_before_wipe",
        "retract_length_toolchange": "retract_length_toolchange",
        "retract_restart_extra_toolchange": "retract_restart_extra_toolchange",
        "retract_restart_extra": "retract_restart_extra",
        "retract_layer_change": "retract_when_changing_layer",
        "retract_length": "retraction_length",
        "retract_lift": "z_hop",
        "retract_before_travel": "retraction_minimum_travel",
        "retract_speed": "retraction_speed",
        "wipe": "wipe",
    })
    registry.register_simple("retract_lift_top", "retract_lift_enforce",
                             lambda value, ctx: ZHOP_ENFORCEMENT.get(unquote(value)))

    # G-code settings
    registry.register_simple("start_gcode", "machine_start_gcode", convert_gcode_block)
    registry.register_simple("end_gcode", "machine_end_gcode", convert_gcode_block)
    registry.register_simple("before_layer_gcode", "before_layer_change_gcode", convert_gcode_block)
    registry.register_simple("layer_gcode", "layer_change_gcode", convert_gcode_block)
    registry.register_simple("toolchange_gcode", "change_filament_gcode", convert_gcode_block)
    registry.register_simple("feature_gcode", "change_extrusion_role_gcode", convert_gcode_block)
    registry.register_simple("pause_print_gcode", "machine_pause_gcode", convert_gcode_block)
    registry.register_simple("template_custom_gcode", "template_custom_gcode", convert_gcode_block)

    return registry


def create_physical_printer_registry():
    """Create registry for the network settings of a "physical printer" profile."""
    registry = ConverterRegistry('physical_printer')

    registry.register_simple("host_type", "host_type", lookup(HOST_TYPES, "host_type"))
    for key in ("print_host", "printer_technology", "printhost_apikey",
                "printhost_authorization_type", "printhost_cafile", "printhost_password",
                "printhost_port", "printhost_ssl_ignore_revoke", "printhost_user"):
        registry.register_simple(key, key)

    return registry


# Helper functions for value transformations

def lookup(table, setting_name):
    """Build a transform translating values through a table, dropping unknown ones."""
    def transform(value, context):
        translated = table.get(value)
        if translated is None:
            logger.warning(f"{context.profile_name}: unrecognized {setting_name} value "
                           f"'{value}', leaving it to OrcaSlicer's default")
        return translated
    return transform


def percent_of_nozzle(value, context):
    """Resolve a percentage of the nozzle diameter to millimeters."""
    return percent_to_mm(context.nozzle_size, value)


def convert_gcode_block(value, context):
    """Custom g-code and notes are quoted and backslash-escaped in INI files."""
    return [unescape_gcode(unquote(value))]


def convert_filename_format(value, context):
    """OrcaSlicer uses curly brackets instead of square ones for placeholders."""
    return value.replace('[', '{').replace(']', '}')


def convert_draft_shield(value, context):
    if value == 'disabled':
        return "0"
    if value == 'enabled':
        return "1"
    return value


def convert_fan_speed_threshold(value, context):
    if to_number(value) < 0:
        return "0%"
    return f"{value}%"


def convert_max_volumetric_speed(value, context):
    """Max volumetric speed can't be zero in OrcaSlicer, so use a default per filament type."""
    if to_number(value) > 0:
        return value
    filament_type = context.source.get('filament_type')
    default = DEFAULT_MAX_VOLUMETRIC_SPEEDS.get(filament_type)
    if default is None:
        logger.warning(f"{context.profile_name}: no default max volumetric speed "
                       f"for filament type '{filament_type}'")
    return default


def track_max_temperature(value, context):
    """Pass a nozzle temperature through, remembering the highest one seen."""
    temperature = to_number(value)
    if temperature > context.max_temperature:
        context.max_temperature = temperature
    return value


def convert_bottom_contact_distance(value, context):
    """A bottom contact distance of 0 means "same as top"."""
    if value == '0':
        return context.source.get('support_material_contact_distance')
    return value


def convert_support_xy_spacing(value, context):
    """
    Resolve a percentage XY support spacing, preferably against the external
    perimeter width and otherwise against the nozzle diameter.
    """
    width = context.source.get('external_perimeter_extrusion_width')
    spacing = None
    if to_number(width) > 0:
        spacing = percent_to_mm(width, value)
    if spacing is None:
        spacing = percent_to_mm(context.nozzle_size, value)
    return spacing


def convert_support_style(value, context):
    """Split support_material_style into OrcaSlicer's support_type and support_style."""
    result = ConversionResult()
    if value not in SUPPORT_STYLES:
        logger.warning(f"{context.profile_name}: unrecognized support_material_style '{value}'")
        return result
    support_type, support_style = SUPPORT_STYLES[value]
    generation = 'auto' if is_truthy(context.source.get('support_material_auto')) else 'manual'
    result.add_setting('support_type', f"{support_type}({generation})")
    result.add_setting('support_style', support_style)
    return result


def compatible_condition(setting_name):
    """
    Build a transform for compatibility condition strings.

    A kept condition hides the profile in OrcaSlicer unless the selected
    printer/print satisfies it, so the context decides whether to keep it.
    """
    def transform(value, context):
        if value == '':
            return value
        if context.keep_condition(setting_name, value):
            return value
        return ''
    return transform


def create_registries():
    """Create the registries used for profile type detection, keyed by type."""
    return {
        'print': create_print_registry(),
        'filament': create_filament_registry(),
        'printer': create_printer_registry(),
    }
