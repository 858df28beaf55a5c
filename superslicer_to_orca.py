#!/usr/bin/env python3
"""
Convert SuperSlicer and PrusaSlicer INI profiles to OrcaSlicer JSON profiles.

Usage:
    python superslicer_to_orca.py --input <pattern> [<pattern>...] [--outdir <dir>] [options]

Example:
    python superslicer_to_orca.py --input ~/.config/SuperSlicer/filament/*.ini --on-existing merge
"""
import argparse
import glob
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Tuple

import yaml

from profile_parser import PHYSICAL_PRINTER_SECTION, ProfileParser, SourceProfile
from orca_converters.base import ConversionContext
from orca_converters.errors import ConversionError, OutputDirectoryError, QuitRequested
from orca_converters.orca_defaults import (
    SOURCE_SLICERS,
    check_output_directory,
    get_data_directory,
    get_default_output_directory,
    get_output_directory,
)
from orca_converters.profile_converters import (
    PROFILE_CONVERTERS,
    detect_profile_type,
    list_system_printers,
    merge_existing_profile,
    nozzle_size_from_layer_height,
    nozzle_size_from_settings,
    save_json_profile,
)
from orca_converters.prompts import NONE, Prompter, SessionChoices
from orca_converters.summary import (
    CONVERTED,
    MERGED,
    NOT_CONVERTED,
    ConversionRecord,
    render_summary,
)
from orca_converters.values import is_decimal

DEFAULT_CONFIG_FILE = "superslicer_to_orca.yml"

SKIP = 'skip'
OVERWRITE = 'overwrite'
MERGE = 'merge'

# Menu labels for what to do with an existing output file, in menu order
ON_EXISTING_OPTIONS = {
    SKIP: 'LEAVE IT ALONE',
    OVERWRITE: 'OVERWRITE',
    MERGE: 'MERGE NEW PARAMETERS',
}

KEEP = 'KEEP'
DISCARD = 'DISCARD'
CONDITION_SETTINGS = ('compatible_printers_condition', 'compatible_prints_condition')


def expand_input_patterns(patterns: List[str]) -> List[Path]:
    """
    Turn input patterns into the list of .ini files to convert.

    Directories contribute their direct children, anything else is expanded
    as a glob pattern. "~" is expanded in both.
    """
    files = []
    for pattern in patterns:
        pattern = os.path.expanduser(pattern)
        if os.path.isdir(pattern):
            candidates = sorted(Path(pattern).iterdir())
        else:
            candidates = [Path(match) for match in sorted(glob.glob(pattern))]

        for path in candidates:
            if path.is_file() and path.suffix == '.ini':
                files.append(path)
    return files


def read_physical_printer(filepath: Path) -> SourceProfile:
    """Read a physical printer .ini file."""
    parser = ProfileParser(filepath)
    settings = parser.parse()
    return SourceProfile(Path(filepath).stem, settings, parser.slicer_flavor, filepath,
                         profile_type=PHYSICAL_PRINTER_SECTION)


def choose_input_files(prompter: Prompter, data_dir: Path) -> Tuple[List[Path], str]:
    """
    Ask which installed slicer, profile type and profiles to convert.

    Returns:
        (files to convert, chosen profile type)

    Raises:
        FileNotFoundError: if no PrusaSlicer or SuperSlicer data directory exists
    """
    slicers = []
    if data_dir.is_dir():
        slicers = sorted(path.name for path in data_dir.iterdir()
                         if path.is_dir() and any(name in path.name for name in SOURCE_SLICERS))
    if not slicers:
        raise FileNotFoundError(
            f"No PrusaSlicer or SuperSlicer directories detected in {data_dir}. Please verify "
            "the location of the files you wish to convert and specify them with the "
            "--input option if necessary."
        )

    slicer_dir = data_dir / prompter.choose("Which slicer do you want to import from?", slicers)

    profile_types = [profile_type.capitalize() for profile_type in ('filament', 'print', 'printer')
                     if (slicer_dir / profile_type).is_dir()]
    profile_type = prompter.choose("What kind of profile would you like to import?",
                                   profile_types).lower()

    profile_dir = slicer_dir / profile_type
    names = [path.stem for path in sorted(profile_dir.glob('*.ini'))]
    chosen = prompter.choose_many("Which profile(s) would you like to import?", names)
    return [profile_dir / f"{name}.ini" for name in chosen], profile_type


class SuperSlicerToOrcaConverter:
    """Main converter orchestrator."""

    def __init__(self, output_root: Path, force_output: bool = False,
                 choices: SessionChoices = None, prompter: Prompter = None):
        """
        Args:
            output_root: Root OrcaSlicer settings directory (or any directory with force_output)
            force_output: Write all files directly into output_root
            choices: Answers preset on the command line, shared across profiles
            prompter: Used to ask the questions that have no preset answer
        """
        self.output_root = Path(output_root)
        self.force_output = force_output
        self.prompter = prompter or Prompter()
        self.choices = choices or SessionChoices(self.prompter)
        self.logger = logging.getLogger(__name__)

        self.records: List[ConversionRecord] = []
        self.needs_conversion: Set[str] = set()

        self.converters = {profile_type: converter_class()
                           for profile_type, converter_class in PROFILE_CONVERTERS.items()}
        self.registries = {profile_type: converter.registry
                           for profile_type, converter in self.converters.items()}

    def convert_files(self, input_files: List[Path], profile_type: str = None):
        """
        Convert every profile in the given files.

        Args:
            input_files: Plain profile files and config bundles
            profile_type: Known type of the profiles, skips detection
        """
        profiles = []
        for input_file in input_files:
            try:
                file_profiles = ProfileParser(input_file).read_profiles()
            except (OSError, UnicodeDecodeError) as e:
                self.logger.error(f"Cannot read {input_file}: {e}")
                self.records.append(ConversionRecord(
                    profile_type, input_file.stem, input_file, None, NOT_CONVERTED,
                    error="Read error"))
                continue

            for profile in file_profiles:
                if profile.profile_type is None:
                    profile.profile_type = profile_type
            profiles.extend(file_profiles)

        self.convert_profiles(profiles)

    def convert_profiles(self, profiles: List[SourceProfile]):
        for index, profile in enumerate(profiles):
            self.choices.remaining = len(profiles) - index - 1
            self.records.append(self.convert_profile(profile))
            self.choices.reset_profile()

        for converter in self.converters.values():
            self.needs_conversion.update(converter.needs_conversion)
        if self.needs_conversion:
            self.logger.debug(f"{len(self.needs_conversion)} source settings have no "
                              "OrcaSlicer equivalent and were left out")

    def convert_profile(self, profile: SourceProfile) -> ConversionRecord:
        """
        Convert one profile and write it to the output directory.

        Per-profile failures end up in the returned record. Output directory
        problems are raised, since no other profile could be written either.
        """
        self.logger.info(f"Converting {profile.name} ({profile.path})")
        record = ConversionRecord(profile.profile_type, profile.name, profile.path,
                                  profile.slicer_flavor, NOT_CONVERTED)
        try:
            self._convert(profile, record)
        except ConversionError as e:
            record.status = NOT_CONVERTED
            record.error = e.reason
            self.logger.error(f"{profile.name}: {e.reason}")
        return record

    def _convert(self, profile: SourceProfile, record: ConversionRecord):
        if not profile.slicer_flavor:
            raise ConversionError("Unsupported slicer")

        profile_type = profile.profile_type or detect_profile_type(profile.settings, self.registries)
        if profile_type not in PROFILE_CONVERTERS:
            record.profile_type = None
            raise ConversionError("Unsupported file")
        record.profile_type = profile_type

        output_dir = get_output_directory(self.output_root, profile_type, self.force_output)
        check_output_directory(output_dir, self.force_output)
        output_path = output_dir / f"{profile.name}.json"
        record.output_path = output_path

        context = ConversionContext(
            source=profile.settings,
            slicer_flavor=profile.slicer_flavor,
            nozzle_size=self.resolve_nozzle_size(profile, profile_type),
            profile_name=profile.name,
            keep_condition=self.condition_chooser(profile, profile_type),
        )

        converter = self.converters[profile_type]
        if profile_type == 'printer':
            inherits = self.choose_system_printer(profile)
            physical_printer = self.choose_physical_printer(profile)
            record.physical_printer = physical_printer.name if physical_printer else None
            converted = converter.convert(
                profile.name, context,
                physical_printer=physical_printer.settings if physical_printer else None,
                inherits=inherits,
            )
        else:
            converted = converter.convert(profile.name, context)

        status = CONVERTED
        if output_path.exists():
            policy = self.on_existing_policy(output_path, profile.name)
            if policy == SKIP:
                raise ConversionError("Target file exists")
            if policy == MERGE:
                try:
                    converted = merge_existing_profile(converted, output_path)
                except (OSError, ValueError) as e:
                    raise ConversionError(f"Cannot merge into {output_path.name}: {e}")
                status = MERGED

        try:
            save_json_profile(converted, str(output_dir), output_path.name)
        except OSError as e:
            raise ConversionError(f"Cannot write {output_path.name}: {e.strerror}")

        record.status = status
        self.logger.info(f"    Created: {output_path}")

    def resolve_nozzle_size(self, profile: SourceProfile, profile_type: str) -> Optional[str]:
        """
        Nozzle diameter used for nozzle-relative values.

        Taken from the profile itself when it has one, otherwise from the
        session, the user, or as a last resort twice the layer height.
        """
        nozzle_size = nozzle_size_from_settings(profile.settings)
        if nozzle_size is not None:
            return nozzle_size
        if 'nozzle_size' in self.choices:
            return self.choices.get('nozzle_size')
        if profile_type != 'print':
            return None

        if self.prompter.interactive:
            answer = re.sub(r'[^\d.]', '', self.prompter.ask(
                f"Enter the nozzle size (in mm) of the nozzle intended to be used with the "
                f"{profile.name} profile (e.g. 0.4). Press <ENTER> to derive it from the "
                "layer height."
            ))
            if answer:
                self.choices.remember('nozzle_size', answer, profile.name)
                return answer

        nozzle_size = nozzle_size_from_layer_height(profile.settings)
        if nozzle_size is None:
            raise ConversionError("Invalid layer height")
        self.logger.warning(f"{profile.name}: no nozzle size given, assuming {nozzle_size} mm "
                            "(twice the layer height)")
        return nozzle_size

    def condition_chooser(self, profile: SourceProfile, profile_type: str):
        """Build the function deciding whether a compatibility condition is kept."""
        def keep_condition(setting_name: str, value: str) -> bool:
            choice = self.choices.get(setting_name)
            if choice is None:
                if not self.prompter.interactive:
                    return True
                affected = 'printer' if setting_name.startswith('compatible_printers') else 'print'
                choice = self.prompter.choose(
                    f"The {profile.name} {profile_type} profile has the following "
                    f"{setting_name} value:\n\n\t{value}\n\n"
                    f"If you keep this value, this {profile_type} profile will not be visible "
                    f"in OrcaSlicer unless you have selected a {affected} that satisfies all "
                    f"the conditions specified above. If you discard this value, this "
                    f"{profile_type} profile will be visible regardless of which {affected} "
                    f"you have selected.\n\nDo you want to KEEP this value or DISCARD it?",
                    [KEEP, DISCARD],
                )
                self.choices.remember(setting_name, choice, profile.name)
            return choice == KEEP
        return keep_condition

    def choose_system_printer(self, profile: SourceProfile) -> str:
        """OrcaSlicer system printer a machine profile inherits from ("" for none)."""
        if 'inherits' in self.choices:
            return self.choices.get('inherits')
        if not self.prompter.interactive:
            return ''

        names = list_system_printers(self.output_root)
        choice = self.prompter.choose(
            'In OrcaSlicer, a "machine" profile must be associated with a printer selected '
            'and configured from the available system presets. Below is a list of the '
            'configured printers that have been detected in your OrcaSlicer installation.\n\n'
            'If you do not see the printer you wish to associate with this profile, choose '
            '<QUIT> to exit, then configure your desired printer in OrcaSlicer and run this '
            'converter again. Alternatively, you may select <NONE> to proceed without '
            'associating this "machine" profile with a configured printer, but network '
            'configuration and g-code upload will not be available.\n\n'
            f'Please choose an OrcaSlicer printer to associate with {profile.name}:',
            names + [NONE],
        )
        inherits = '' if choice == NONE else choice
        self.choices.remember('inherits', inherits, profile.name, shown_value=choice)
        return inherits

    def physical_printer_candidates(self, profile: SourceProfile) -> List[SourceProfile]:
        """Physical printers in the same bundle or in the slicer's physical_printer directory."""
        if profile.physical_printers:
            return profile.physical_printers

        printer_dir = profile.path.parent.parent / PHYSICAL_PRINTER_SECTION
        if not printer_dir.is_dir():
            return []

        candidates = []
        for path in sorted(printer_dir.glob('*.ini')):
            try:
                candidates.append(read_physical_printer(path))
            except (OSError, UnicodeDecodeError) as e:
                self.logger.warning(f"Skipping unreadable physical printer {path}: {e}")
        return candidates

    def choose_physical_printer(self, profile: SourceProfile) -> Optional[SourceProfile]:
        """
        Physical printer whose network settings are merged into a printer profile.

        Without any physical printer candidates the printer profile itself is
        used, as some PrusaSlicer versions keep the network settings there.
        """
        if 'physical_printer' in self.choices:
            chosen = self.choices.get('physical_printer')
            return None if chosen == NONE else chosen

        candidates = self.physical_printer_candidates(profile)
        if not candidates:
            return profile
        if not self.prompter.interactive:
            self.logger.info(f"{profile.name}: not importing physical printer data "
                             "(use --physical-printer to pick one)")
            return None

        choice = self.prompter.choose(
            'In SuperSlicer and some versions of PrusaSlicer, most network-configuration '
            'settings are stored in a separate "physical printer" .ini file. Choose one of '
            'the detected physical printers below if you want to include its network '
            f'settings in {profile.name}',
            [candidate.name for candidate in candidates] + [NONE],
        )
        chosen = next((candidate for candidate in candidates if candidate.name == choice), NONE)
        self.choices.remember('physical_printer', chosen, profile.name, shown_value=choice)
        return None if chosen == NONE else chosen

    def on_existing_policy(self, output_path: Path, profile_name: str) -> str:
        """What to do with an output file that already exists."""
        policy = self.choices.get('on_existing')
        if policy is not None:
            return policy
        if not self.prompter.interactive:
            self.logger.warning(f"{output_path} already exists, leaving it alone "
                                "(use --on-existing to overwrite or merge)")
            return SKIP

        label = self.prompter.choose(
            f"Output file '{output_path}' already exists!\n\n"
            f"If you {ON_EXISTING_OPTIONS[SKIP]}, the existing file will not be modified and "
            "this profile will not be converted.\n\n"
            f"If you {ON_EXISTING_OPTIONS[OVERWRITE]} it, {output_path.name} will be replaced "
            "with the contents of this converted profile.\n\n"
            f"If you {ON_EXISTING_OPTIONS[MERGE]}, {output_path.name} will be amended to add "
            "any new key/value pairs from the source .ini that are not already present. "
            f"Pre-existing key/value pairs in {output_path.name} will not be altered.\n\n"
            "What would you like to do?",
            list(ON_EXISTING_OPTIONS.values()),
        )
        policy = next(key for key, option in ON_EXISTING_OPTIONS.items() if option == label)
        self.choices.remember('on_existing', policy, profile_name, shown_value=label)
        return policy

    def print_summary(self):
        summary = render_summary(self.records)
        if summary:
            print()
            print(summary)


class ArgumentParser(argparse.ArgumentParser):
    """Argument parser exiting with status 1 on bad arguments."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


class HelpAction(argparse.Action):
    """Print the help text and exit with status 1."""

    def __init__(self, option_strings, dest=argparse.SUPPRESS, default=argparse.SUPPRESS, help=None):
        super().__init__(option_strings=option_strings, dest=dest, default=default,
                         nargs=0, help=help)

    def __call__(self, parser, namespace, values, option_string=None):
        parser.print_help()
        parser.exit(1)


def nozzle_size_type(value: str) -> str:
    if not is_decimal(value):
        raise argparse.ArgumentTypeError(f"invalid nozzle size: '{value}' (expected e.g. 0.4)")
    return value


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(
        description='Convert SuperSlicer and PrusaSlicer INI profiles to OrcaSlicer JSON profiles',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
        epilog=f"""
Without --input, the profiles to convert are chosen from the PrusaSlicer and
SuperSlicer data directories in interactive menus.

Settings may also be given in a YAML config file (default: ./{DEFAULT_CONFIG_FILE})
under a "defaults" mapping, e.g.:

  defaults:
    outdir: ~/.config/OrcaSlicer
    on_existing: merge

Examples:
  # Convert all SuperSlicer filament profiles
  python superslicer_to_orca.py --input ~/.config/SuperSlicer/filament/*.ini

  # Convert a config bundle, updating profiles converted before
  python superslicer_to_orca.py --input PrusaSlicer_config_bundle.ini --on-existing merge

  # Write into a directory of your choice instead of the OrcaSlicer settings folder
  python superslicer_to_orca.py --input my_printer.ini --outdir converted --force-output
        """
    )

    parser.add_argument('--input', nargs='+', metavar='PATTERN',
                        help='PrusaSlicer or SuperSlicer .ini file(s), directories or glob '
                             'patterns to convert. Config bundles are split automatically.')
    parser.add_argument('--outdir', metavar='DIRECTORY',
                        help='ROOT OrcaSlicer settings directory (default: the OrcaSlicer '
                             f'data directory, {get_default_output_directory()})')
    parser.add_argument('--nozzle-size', type=nozzle_size_type, metavar='DECIMAL',
                        help='Nozzle diameter in mm for print profiles, used to resolve '
                             'settings given as a percentage of the nozzle diameter')
    parser.add_argument('--physical-printer', metavar='FILE',
                        help='Physical printer .ini file whose network settings are added '
                             'to converted printer profiles')
    parser.add_argument('--on-existing', choices=list(ON_EXISTING_OPTIONS),
                        help='What to do when an output file already exists: skip it, '
                             'overwrite it, or merge new settings into it')
    parser.add_argument('--overwrite', action='store_true', default=None,
                        help='Deprecated, same as --on-existing overwrite')
    parser.add_argument('--force-output', action='store_true', default=None,
                        help='Write the JSON files directly into --outdir instead of the '
                             'OrcaSlicer user preset folders')
    parser.add_argument('--compatible-conditions', choices=['keep', 'discard'],
                        help='Keep or discard compatible_printers_condition and '
                             'compatible_prints_condition values')
    parser.add_argument('--inherits', metavar='NAME',
                        help='OrcaSlicer system printer that converted printer profiles '
                             'inherit from ("" for none)')
    parser.add_argument('--config', metavar='FILE',
                        help=f'Path to YAML config file (default: {DEFAULT_CONFIG_FILE})')
    parser.add_argument('--debug', action='store_true', default=None,
                        help='Enable debug logging')
    parser.add_argument('-h', '--help', action=HelpAction,
                        help='Display this usage information')
    return parser


def setup_logging(debug: bool) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def load_config(config_path: Optional[Path]) -> Dict[str, Any]:
    """
    Load configuration from YAML file.

    A missing default config file is not an error; an empty dict is returned.
    """
    logger = logging.getLogger(__name__)

    if config_path is None:
        config_path = Path(DEFAULT_CONFIG_FILE)
        if not config_path.exists():
            return {}

    with open(config_path, "r", encoding="utf-8") as f:
        config = yaml.safe_load(f)
    logger.info(f"Loaded configuration from: {config_path}")
    return config or {}


def get_config_default(config: Dict[str, Any], key: str, fallback: Any) -> Any:
    """Get default value from config or use fallback."""
    defaults = config.get("defaults") or {}
    return defaults.get(key, fallback)


def main(argv: List[str] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = Path(os.path.expanduser(args.config)) if args.config else None
    if config_path is not None and not config_path.is_file():
        parser.error(f"config file not found: {config_path}")
    try:
        config = load_config(config_path)
    except yaml.YAMLError as e:
        parser.error(f"invalid config file: {e}")
    if not isinstance(config, dict):
        parser.error("invalid config file: expected a mapping")

    # Merge CLI args with config defaults
    debug = args.debug if args.debug is not None else get_config_default(config, "debug", False)
    setup_logging(debug)
    logger = logging.getLogger(__name__)

    outdir = args.outdir or get_config_default(config, "outdir", None)
    output_root = Path(os.path.expanduser(str(outdir))) if outdir else get_default_output_directory()
    force_output = (args.force_output if args.force_output is not None
                    else get_config_default(config, "force_output", False))

    on_existing = args.on_existing or get_config_default(config, "on_existing", None)
    if args.overwrite:
        logger.warning("--overwrite is deprecated, use --on-existing overwrite")
        on_existing = OVERWRITE
    if on_existing is not None and on_existing not in ON_EXISTING_OPTIONS:
        parser.error(f"invalid on_existing value: '{on_existing}' "
                     f"(choose from {', '.join(ON_EXISTING_OPTIONS)})")

    conditions = args.compatible_conditions or get_config_default(config, "compatible_conditions", None)
    if conditions is not None and str(conditions).upper() not in (KEEP, DISCARD):
        parser.error(f"invalid compatible_conditions value: '{conditions}' (choose from keep, discard)")
    condition_choice = str(conditions).upper() if conditions is not None else None

    nozzle_size = args.nozzle_size or get_config_default(config, "nozzle_size", None)
    if nozzle_size is not None:
        nozzle_size = str(nozzle_size)
        if not is_decimal(nozzle_size):
            parser.error(f"invalid nozzle size: '{nozzle_size}'")

    inherits = args.inherits if args.inherits is not None else get_config_default(config, "inherits", None)

    physical_printer = None
    physical_printer_path = args.physical_printer or get_config_default(config, "physical_printer", None)
    if physical_printer_path:
        physical_printer_path = Path(os.path.expanduser(str(physical_printer_path)))
        if not physical_printer_path.is_file():
            parser.error(f"physical printer file not found: {physical_printer_path}")
        try:
            physical_printer = read_physical_printer(physical_printer_path)
        except (OSError, UnicodeDecodeError) as e:
            parser.error(f"cannot read physical printer file {physical_printer_path}: {e}")

    prompter = Prompter()
    if not args.input and not prompter.interactive:
        parser.error("--input is required when not running in an interactive terminal")

    presets = {
        'on_existing': on_existing,
        'nozzle_size': nozzle_size,
        'inherits': inherits,
        'physical_printer': physical_printer,
    }
    for setting_name in CONDITION_SETTINGS:
        presets[setting_name] = condition_choice
    choices = SessionChoices(prompter, **presets)

    converter = SuperSlicerToOrcaConverter(output_root, force_output, choices, prompter)

    try:
        if args.input:
            input_files = expand_input_patterns(args.input)
            profile_type = None
        else:
            input_files, profile_type = choose_input_files(prompter, get_data_directory())

        if not input_files:
            logger.warning("No .ini files found to convert")
            return 0

        converter.convert_files(input_files, profile_type)
    except QuitRequested:
        logger.info("Conversion cancelled by user")
    except OutputDirectoryError as e:
        logger.error(str(e))
        converter.print_summary()
        return 1
    except FileNotFoundError as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130

    converter.print_summary()
    return 0


if __name__ == '__main__':
    sys.exit(main())
