"""
Readers for SuperSlicer/PrusaSlicer INI profiles and config bundles.
"""
import re
from pathlib import Path
from typing import Dict, List, Optional

GENERATED_BY_PATTERN = re.compile(r'^#\s*generated\s+by\s+(\S+)', re.IGNORECASE)
SECTION_PATTERN = re.compile(r'^\[([\w\s+\-]+):([^\]]+)\]$')
BUNDLE_PATTERN = re.compile(r'^\[\w+:[^\]]+\]', re.MULTILINE)

PHYSICAL_PRINTER_SECTION = 'physical_printer'


class SourceProfile:
    """One INI profile ready for conversion."""

    def __init__(self, name: str, settings: Dict[str, str], slicer_flavor: Optional[str],
                 path: Path, profile_type: str = None,
                 physical_printers: List['SourceProfile'] = None):
        """
        Args:
            name: Profile name, used for the output file name
            settings: Key/value pairs of the profile
            slicer_flavor: Application named in the "# generated by" header, if any
            path: File the profile was read from (the bundle for bundle sections)
            profile_type: Known profile type ('print', 'filament', 'printer'), if any
            physical_printers: Physical printer profiles found next to this one
        """
        self.name = name
        self.settings = settings
        self.slicer_flavor = slicer_flavor
        self.path = Path(path)
        self.profile_type = profile_type
        self.physical_printers = physical_printers or []

    def __repr__(self):
        return f"SourceProfile({self.name!r}, type={self.profile_type!r}, flavor={self.slicer_flavor!r})"


class ProfileParser:
    def __init__(self, filepath):
        self.filepath = Path(filepath)
        self.slicer_flavor: Optional[str] = None

    def _read_lines(self) -> List[str]:
        with open(self.filepath, 'r', encoding='utf-8') as file:
            return file.read().splitlines()

    def _parse_line(self, line: str, block: Dict[str, str]):
        """Store a key/value line in the block, noting the "generated by" header."""
        match = GENERATED_BY_PATTERN.match(line)
        if match:
            self.slicer_flavor = match.group(1)
            return

        line = line.strip()
        if line.startswith(';') or line.startswith('#') or line == '':
            return

        if '=' in line:
            key, value = line.split('=', 1)
            block[key.strip()] = value.strip()

    def is_bundle(self) -> bool:
        """Config bundles hold several profiles in [type:name] sections."""
        with open(self.filepath, 'r', encoding='utf-8') as file:
            return bool(BUNDLE_PATTERN.search(file.read()))

    def parse(self) -> Dict[str, str]:
        """Parse a single-profile INI file into a flat key/value dict."""
        output = {}
        for line in self._read_lines():
            self._parse_line(line, output)
        return output

    def parse_bundle(self) -> Dict[str, List[Dict[str, str]]]:
        """
        Parse a config bundle.

        Returns:
            Dict of section type -> list of settings dicts, each with its 'name'
        """
        output = {}
        current_block = {}
        block_type = None

        for line in self._read_lines():
            section = SECTION_PATTERN.match(line.strip())
            if line.strip().startswith('['):
                if block_type is not None:
                    output.setdefault(block_type, []).append(current_block)
                current_block = {}
                # Sections without a name ([presets]) are not profiles
                block_type = section.group(1).strip() if section else None
                if section:
                    current_block['name'] = section.group(2).strip()
            elif block_type is not None:
                self._parse_line(line, current_block)
            else:
                # Header comments before the first section
                self._parse_line(line, {})

        # Don't forget to save the last block
        if block_type is not None:
            output.setdefault(block_type, []).append(current_block)

        return output

    def read_profiles(self) -> List[SourceProfile]:
        """
        Read every convertible profile in the file.

        A plain INI file yields one profile named after the file. A bundle
        yields one profile per section; abstract sections (names starting with
        '*') are skipped and physical printer sections are attached to the
        bundle's printer profiles.
        """
        if not self.is_bundle():
            settings = self.parse()
            return [SourceProfile(self.filepath.stem, settings, self.slicer_flavor, self.filepath)]

        sections = self.parse_bundle()
        physical_printers = [
            SourceProfile(block.pop('name'), block, self.slicer_flavor, self.filepath,
                          profile_type=PHYSICAL_PRINTER_SECTION)
            for block in sections.pop(PHYSICAL_PRINTER_SECTION, [])
        ]

        profiles = []
        for block_type, blocks in sections.items():
            for block in blocks:
                name = block.pop('name')
                if name.startswith('*'):
                    continue
                profiles.append(SourceProfile(
                    name, block, self.slicer_flavor, self.filepath,
                    profile_type=block_type,
                    physical_printers=physical_printers if block_type == 'printer' else None,
                ))
        return profiles
