import json

import pytest

from orca_converters.errors import QuitRequested
from orca_converters.prompts import SessionChoices
from orca_converters.summary import CONVERTED, MERGED
from superslicer_to_orca import KEEP, SuperSlicerToOrcaConverter, choose_input_files

from conftest import (
    FILAMENT_SETTINGS,
    PHYSICAL_PRINTER_SETTINGS,
    PRINT_SETTINGS,
    PRINTER_SETTINGS,
    scripted,
)


def load(path):
    with open(path, encoding='utf-8') as f:
        return json.load(f)


def make_converter(orca_dir, *answers, **presets):
    """A converter whose questions are answered from a fixed list."""
    prompter = scripted(*answers)
    choices = SessionChoices(prompter, **presets)
    return SuperSlicerToOrcaConverter(orca_dir, choices=choices, prompter=prompter)


@pytest.fixture
def system_printers(orca_dir):
    system_dir = orca_dir / "system"
    system_dir.mkdir()
    (system_dir / "Voron.json").write_text(json.dumps({
        "machine_list": [{"name": "fdm_voron_common"}, {"name": "Voron 2.4 350 0.4 nozzle"}]
    }), encoding='utf-8')


@pytest.mark.parametrize("answer, expected_name, expected_status", [
    ("2", "My PLA", CONVERTED),
    ("3", "stale", MERGED),
])
def test_on_existing_menu(write_ini, orca_dir, answer, expected_name, expected_status):
    source = write_ini("SuperSlicer/filament/My PLA.ini", FILAMENT_SETTINGS)
    output = orca_dir / "user" / "default" / "filament" / "My PLA.json"
    output.write_text('{"name": "stale"}\n', encoding='utf-8')

    # 1) LEAVE IT ALONE 2) OVERWRITE 3) MERGE NEW PARAMETERS
    converter = make_converter(orca_dir, answer, compatible_printers_condition=KEEP)
    converter.convert_files([source])

    profile = load(output)
    assert profile["name"] == expected_name
    assert profile["filament_type"] == "PLA"
    assert converter.records[0].status == expected_status


def test_discard_condition_when_asked(write_ini, orca_dir):
    source = write_ini("SuperSlicer/filament/My PLA.ini", FILAMENT_SETTINGS)

    # 1) KEEP 2) DISCARD
    converter = make_converter(orca_dir, "2")
    converter.convert_files([source])

    profile = load(orca_dir / "user" / "default" / "filament" / "My PLA.json")
    assert profile["compatible_printers_condition"] == ""


def test_answer_applied_to_all_remaining_profiles(write_ini, orca_dir):
    first = write_ini("SuperSlicer/filament/A PLA.ini", FILAMENT_SETTINGS)
    second = write_ini("SuperSlicer/filament/B PLA.ini", FILAMENT_SETTINGS)

    # DISCARD, then ALL REMAINING PROFILES; B PLA is not asked again
    converter = make_converter(orca_dir, "2", "1")
    converter.convert_files([first, second])

    filament_dir = orca_dir / "user" / "default" / "filament"
    assert load(filament_dir / "A PLA.json")["compatible_printers_condition"] == ""
    assert load(filament_dir / "B PLA.json")["compatible_printers_condition"] == ""


def test_answer_applied_to_current_profile_only(write_ini, orca_dir):
    first = write_ini("SuperSlicer/filament/A PLA.ini", FILAMENT_SETTINGS)
    second = write_ini("SuperSlicer/filament/B PLA.ini", FILAMENT_SETTINGS)

    # DISCARD, then JUST A PLA; B PLA is asked again and kept
    converter = make_converter(orca_dir, "2", "2", "1")
    converter.convert_files([first, second])

    filament_dir = orca_dir / "user" / "default" / "filament"
    assert load(filament_dir / "A PLA.json")["compatible_printers_condition"] == ""
    assert load(filament_dir / "B PLA.json")["compatible_printers_condition"] == "nozzle_diameter[0]==0.4"


def test_system_printer_and_physical_printer_menus(write_ini, orca_dir, system_printers):
    source = write_ini("SuperSlicer/printer/Voron.ini", PRINTER_SETTINGS)
    write_ini("SuperSlicer/physical_printer/Voron Klipper.ini", PHYSICAL_PRINTER_SETTINGS)

    # System printer 1, then physical printer 1
    converter = make_converter(orca_dir, "1", "1")
    converter.convert_files([source])

    profile = load(orca_dir / "user" / "default" / "machine" / "Voron.json")
    assert profile["inherits"] == "Voron 2.4 350 0.4 nozzle"
    assert profile["print_host"] == "voron.local"
    assert profile["host_type"] == "octoprint"
    assert converter.records[0].physical_printer == "Voron Klipper"


def test_no_system_printer_and_no_physical_printer(write_ini, orca_dir, system_printers):
    source = write_ini("SuperSlicer/printer/Voron.ini", PRINTER_SETTINGS)
    write_ini("SuperSlicer/physical_printer/Voron Klipper.ini", PHYSICAL_PRINTER_SETTINGS)

    # <NONE> in both menus
    converter = make_converter(orca_dir, "2", "2")
    converter.convert_files([source])

    profile = load(orca_dir / "user" / "default" / "machine" / "Voron.json")
    assert profile["inherits"] == ""
    assert profile["print_host"] == "192.168.1.50"
    assert converter.records[0].physical_printer is None


def test_quit_from_menu(write_ini, orca_dir, system_printers):
    source = write_ini("SuperSlicer/printer/Voron.ini", PRINTER_SETTINGS)

    # 1) Voron 2.4 350 0.4 nozzle 2) <NONE> 3) <QUIT>
    converter = make_converter(orca_dir, "3")
    with pytest.raises(QuitRequested):
        converter.convert_files([source])
    assert not (orca_dir / "user" / "default" / "machine" / "Voron.json").exists()


@pytest.mark.parametrize("answer, point_distance", [
    ("0.6", "0.3"),
    # Empty answer falls back to twice the layer height
    ("", "0.2"),
])
def test_nozzle_size_question(write_ini, orca_dir, answer, point_distance):
    source = write_ini("SuperSlicer/print/0.20mm.ini", PRINT_SETTINGS)

    converter = make_converter(orca_dir, answer)
    converter.convert_files([source])

    profile = load(orca_dir / "user" / "default" / "process" / "0.20mm.json")
    assert profile["fuzzy_skin_point_distance"] == point_distance


def test_choose_input_files(write_ini, tmp_path):
    write_ini("data/SuperSlicer/filament/A PLA.ini", FILAMENT_SETTINGS)
    second = write_ini("data/SuperSlicer/filament/B PLA.ini", FILAMENT_SETTINGS)
    write_ini("data/SuperSlicer/print/0.20mm.ini", PRINT_SETTINGS)
    (tmp_path / "data" / "Cura").mkdir()

    # Slicer 1) SuperSlicer, type 1) Filament, profiles 1) <ALL> 2) A PLA 3) B PLA
    files, profile_type = choose_input_files(scripted("1", "1", "3"), tmp_path / "data")

    assert files == [second]
    assert profile_type == "filament"


def test_choose_input_files_without_slicer_directories(tmp_path):
    (tmp_path / "Cura").mkdir()
    with pytest.raises(FileNotFoundError):
        choose_input_files(scripted(), tmp_path)
