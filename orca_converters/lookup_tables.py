"""
Static translation tables between SuperSlicer/PrusaSlicer values and OrcaSlicer values.
"""

# Filament types OrcaSlicer names differently
FILAMENT_TYPES = {
    "PET": "PETG",
    "FLEX": "TPU",
    "NYLON": "PA",
}

# Max volumetric speed can't be zero in OrcaSlicer, so fall back to these
DEFAULT_MAX_VOLUMETRIC_SPEEDS = {
    "PLA": "15",
    "PET": "10",
    "ABS": "12",
    "ASA": "12",
    "FLEX": "3.2",
    "NYLON": "12",
    "PVA": "12",
    "PC": "12",
    "PSU": "8",
    "HIPS": "8",
    "EDGE": "8",
    "NGEN": "8",
    "PP": "8",
    "PEI": "8",
    "PEEK": "8",
    "PEKK": "8",
    "POM": "8",
    "PVDF": "8",
    "SCAFF": "8",
}

SEAM_POSITIONS = {
    "cost": "nearest",
    "random": "random",
    "allrandom": "random",
    "aligned": "aligned",
    "contiguous": "aligned",
    "rear": "back",
    "nearest": "nearest",
}

INFILL_PATTERNS = {
    "3dhoneycomb": "3dhoneycomb",
    "adaptivecubic": "adaptivecubic",
    "alignedrectilinear": "alignedrectilinear",
    "archimedeanchords": "archimedeanchords",
    "concentric": "concentric",
    "concentricgapfill": "concentric",
    "cubic": "cubic",
    "grid": "grid",
    "gyroid": "gyroid",
    "hilbertcurve": "hilbertcurve",
    "honeycomb": "honeycomb",
    "lightning": "lightning",
    "line": "line",
    "monotonic": "monotonic",
    "monotonicgapfill": "monotonic",
    "monotoniclines": "monotonicline",
    "octagramspiral": "octagramspiral",
    "rectilinear": "zig-zag",
    "rectilineargapfill": "zig-zag",
    "rectiwithperimeter": "zig-zag",
    "sawtooth": "zig-zag",
    "scatteredrectilinear": "zig-zag",
    "smooth": "monotonic",
    "smoothhilbert": "hilbertcurve",
    "smoothtriple": "triangles",
    "stars": "tri-hexagon",
    "supportcubic": "supportcubic",
    "triangles": "triangles",
}

# support_material_style -> (support_type prefix, support_style)
SUPPORT_STYLES = {
    "grid": ("normal", "grid"),
    "snug": ("normal", "snug"),
    "tree": ("tree", "default"),
    "organic": ("tree", "organic"),
}

SUPPORT_PATTERNS = {
    "rectilinear",
    "rectilinear-grid",
    "honeycomb",
    "lightning",
    "default",
    "hollow",
}
DEFAULT_SUPPORT_PATTERN = "default"

INTERFACE_PATTERNS = {
    "auto",
    "rectilinear",
    "concentric",
    "rectilinear_interlaced",
    "grid",
}
DEFAULT_INTERFACE_PATTERN = "auto"

GCODE_FLAVORS = {
    "klipper": "klipper",
    "mach3": "reprapfirmware",
    "machinekit": "reprapfirmware",
    "makerware": "reprapfirmware",
    "marlin": "marlin",
    "marlin2": "marlin2",
    "no-extrusion": "reprapfirmware",
    "repetier": "reprapfirmware",
    "reprap": "reprapfirmware",
    "reprapfirmware": "reprapfirmware",
    "sailfish": "reprapfirmware",
    "smoothie": "reprapfirmware",
    "teacup": "reprapfirmware",
    "sprinter": "reprapfirmware",
}

HOST_TYPES = {
    "repetier": "repetier",
    "prusalink": "prusalink",
    "prusaconnect": "prusaconnect",
    "octoprint": "octoprint",
    "moonraker": "octoprint",
    "mks": "mks",
    "klipper": "octoprint",
    "flashair": "flashair",
    "duet": "duet",
    "astrobox": "astrobox",
}

ZHOP_ENFORCEMENT = {
    "All surfaces": "All Surfaces",
    "Not on top": "Bottom Only",
    "Only on top": "Top Only",
}

THUMBNAIL_FORMATS = {
    "PNG": "PNG",
    "JPG": "JPG",
    "QOI": "QOI",
    "BIQU": "BTT_TFT",
}

# Print speeds in the order they are resolved. A speed may be a percentage of
# one listed before it, so this order must not change.
SPEED_SEQUENCE = [
    "perimeter_speed",
    "external_perimeter_speed",
    "solid_infill_speed",
    "infill_speed",
    "small_perimeter_speed",
    "top_solid_infill_speed",
    "gap_fill_speed",
    "support_material_speed",
    "support_material_interface_speed",
    "bridge_speed",
    "first_layer_speed",
    "first_layer_infill_speed",
]

SPEED_PARAMS = {
    "perimeter_speed": "inner_wall_speed",
    "external_perimeter_speed": "outer_wall_speed",
    "small_perimeter_speed": "small_perimeter_speed",
    "solid_infill_speed": "internal_solid_infill_speed",
    "infill_speed": "sparse_infill_speed",
    "top_solid_infill_speed": "top_surface_speed",
    "gap_fill_speed": "gap_infill_speed",
    "support_material_speed": "support_speed",
    "support_material_interface_speed": "support_interface_speed",
    "bridge_speed": "bridge_speed",
    "first_layer_speed": "initial_layer_speed",
    "first_layer_infill_speed": "initial_layer_infill_speed",
}

# Which setting a percentage speed is relative to. SuperSlicer has a
# "default_speed" that most of its percentages are based on; PrusaSlicer does
# not, and only a few of its speeds may be percentages at all.
SPEED_REFERENCES = {
    "SuperSlicer": {
        "perimeter_speed": "default_speed",
        "external_perimeter_speed": "perimeter_speed",
        "solid_infill_speed": "default_speed",
        "infill_speed": "solid_infill_speed",
        "small_perimeter_speed": "infill_speed",
        "top_solid_infill_speed": "solid_infill_speed",
        "gap_fill_speed": "infill_speed",
        "support_material_speed": "default_speed",
        "support_material_interface_speed": "support_material_speed",
        "bridge_speed": "default_speed",
        "first_layer_speed": "perimeter_speed",
        "first_layer_infill_speed": "infill_speed",
    },
    "PrusaSlicer": {
        "external_perimeter_speed": "perimeter_speed",
        "solid_infill_speed": "infill_speed",
        "top_solid_infill_speed": "solid_infill_speed",
        "support_material_interface_speed": "support_material_speed",
        "first_layer_speed": "perimeter_speed",
        "first_layer_infill_speed": "infill_speed",
    },
}

# PrusaSlicer's first layer infill follows the first layer speed
SPEED_VALUE_SOURCES = {
    "PrusaSlicer": {
        "first_layer_infill_speed": "first_layer_speed",
    },
}

# Indexed by position in dynamic_overhang_speeds, which lists the
# thresholds in the reverse order of OrcaSlicer's quarters
OVERHANG_SPEED_KEYS = [
    "overhang_4_4_speed",
    "overhang_3_4_speed",
    "overhang_2_4_speed",
    "overhang_1_4_speed",
]
