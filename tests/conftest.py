import io
import sys
import textwrap

import pytest

from orca_converters.prompts import Prompter

SUPERSLICER_HEADER = "# generated by SuperSlicer 2.5.59.2 on 2023-11-02 at 18:21:07 UTC\n"
PRUSASLICER_HEADER = "# generated by PrusaSlicer 2.6.1+linux-x64-GTK3 on 2023-09-12 at 10:00:00 UTC\n"

FILAMENT_SETTINGS = textwrap.dedent("""\
    bed_temperature = 60
    bridge_fan_speed = 100
    compatible_printers =
    compatible_printers_condition = nozzle_diameter[0]==0.4
    disable_fan_first_layers = 3
    external_perimeter_fan_speed = -1
    extrusion_multiplier = 0.95
    fan_always_on = 1
    filament_colour = #FF8000
    filament_cost = 20
    filament_density = 1.24
    filament_diameter = 1.75
    filament_max_volumetric_speed = 0
    filament_type = PLA
    first_layer_bed_temperature = 65
    first_layer_temperature = 215
    max_fan_speed = 100
    min_fan_speed = 35
    slowdown_below_layer_time = 5
    start_filament_gcode = "; Filament gcode\\nM900 K0.05"
    temperature = 210
    filament_unknown_setting = 42
""")

PRINT_SETTINGS = textwrap.dedent("""\
    bottom_solid_layers = 4
    bridge_speed = 25
    complete_objects = 0
    dynamic_overhang_speeds = 15,20,25,30
    enable_dynamic_overhang_speeds = 1
    external_perimeter_speed = 50%
    external_perimeters_first = 0
    extrusion_width = 0.45
    fill_density = 15%
    fill_pattern = gyroid
    first_layer_infill_speed = 30
    first_layer_speed = 20
    fuzzy_skin_point_dist = 50%
    infill_every_layers = 1
    infill_first = 1
    infill_speed = 80
    ironing = 0
    ironing_type = top
    layer_height = 0.2
    perimeter_speed = 40
    perimeters = 2
    seam_position = aligned
    solid_infill_speed = 60%
    support_material_auto = 1
    support_material_style = snug
    top_solid_infill_speed = 50%
    top_solid_layers = 5
    travel_speed = 150
""")

PRINTER_SETTINGS = textwrap.dedent("""\
    bed_shape = 0x0,250x0,250x210,0x210
    default_filament_profile = "Generic PLA"
    gcode_flavor = klipper
    host_type = klipper
    machine_max_acceleration_x = 9000,1000
    machine_max_feedrate_x = 500,200
    max_layer_height = 75%
    max_print_height = 220
    min_layer_height = 0.07
    nozzle_diameter = 0.4
    print_host = 192.168.1.50
    printer_notes = "Printer notes\\nline 2"
    retract_length = 0.8
    retract_lift = 0.2
    retract_lift_top = "Not on top"
    retract_speed = 35
    start_gcode = "G28\\nG1 Z5"
    thumbnails = 32x32,400x300
    thumbnails_format = PNG
    use_relative_e_distances = 1
""")

PHYSICAL_PRINTER_SETTINGS = textwrap.dedent("""\
    host_type = moonraker
    print_host = voron.local
    printhost_apikey =
    printhost_port =
    preset_name = My Printer
""")


def parse_settings(text):
    """Key/value pairs of a block of sample INI settings."""
    settings = {}
    for line in text.splitlines():
        key, value = line.split('=', 1)
        settings[key.strip()] = value.strip()
    return settings


@pytest.fixture
def filament_settings():
    return parse_settings(FILAMENT_SETTINGS)


@pytest.fixture
def print_settings():
    return parse_settings(PRINT_SETTINGS)


@pytest.fixture
def printer_settings():
    return parse_settings(PRINTER_SETTINGS)


@pytest.fixture
def write_ini(tmp_path):
    """Write an INI file below tmp_path and return its path."""
    def _write(relative_path, settings, header=SUPERSLICER_HEADER):
        path = tmp_path / relative_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text((header or '') + settings, encoding='utf-8')
        return path
    return _write


@pytest.fixture
def orca_dir(tmp_path):
    """An OrcaSlicer settings directory with its user preset folders."""
    root = tmp_path / "OrcaSlicer"
    for subdir in ("filament", "process", "machine"):
        (root / "user" / "default" / subdir).mkdir(parents=True)
    return root


@pytest.fixture(autouse=True)
def no_terminal(monkeypatch):
    """Run without an interactive terminal so no question is ever asked."""
    monkeypatch.setattr(sys, "stdin", io.StringIO())


def scripted(*answers):
    """A Prompter answering from a fixed list."""
    replies = iter(answers)
    return Prompter(interactive=True, input_func=lambda prompt: next(replies))
