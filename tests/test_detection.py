from orca_converters.base import ConverterRegistry
from orca_converters.profile_converters import MIN_MATCHING_KEYS, detect_profile_type


def registry_for(keys):
    registry = ConverterRegistry()
    for key in keys:
        registry.register_simple(key, key)
    return registry


def test_detects_filament(filament_settings):
    assert detect_profile_type(filament_settings) == 'filament'


def test_detects_print(print_settings):
    assert detect_profile_type(print_settings) == 'print'


def test_detects_printer(printer_settings):
    assert detect_profile_type(printer_settings) == 'printer'


def test_too_few_known_keys_is_unsupported():
    settings = {"perimeters": "2", "layer_height": "0.2", "some_other_thing": "1"}
    assert detect_profile_type(settings) is None
    assert detect_profile_type({}) is None


def test_threshold_is_inclusive():
    keys = [f"key_{index}" for index in range(MIN_MATCHING_KEYS)]
    registries = {
        'print': registry_for([]),
        'filament': registry_for(keys),
        'printer': registry_for(keys[:-1]),
    }
    settings = {key: "1" for key in keys}
    assert detect_profile_type(settings, registries) == 'filament'

    del settings[keys[0]]
    assert detect_profile_type(settings, registries) is None


def test_ties_go_to_priority_order():
    """print beats filament beats printer when the counts are equal."""
    keys = [f"key_{index}" for index in range(12)]
    settings = {key: "1" for key in keys}

    registries = {name: registry_for(keys) for name in ('print', 'filament', 'printer')}
    assert detect_profile_type(settings, registries) == 'print'

    registries['print'] = registry_for([])
    assert detect_profile_type(settings, registries) == 'filament'
