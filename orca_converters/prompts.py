"""
Interactive menus and the answers remembered across a conversion session.
"""
import sys
from typing import Any, Callable, Dict, List, Optional, Set

from orca_converters.errors import QuitRequested


QUIT = '<QUIT>'
NONE = '<NONE>'
ALL = '<ALL>'
APPLY_TO_ALL = 'ALL REMAINING PROFILES'


class Prompter:
    """Numbered menus read from standard input."""

    def __init__(self, interactive: bool = None, input_func: Callable[[str], str] = input):
        """
        Args:
            interactive: Whether questions can be asked. Defaults to whether
                         stdin is a terminal.
            input_func: Function used to read an answer (input() by default)
        """
        self.interactive = sys.stdin.isatty() if interactive is None else interactive
        self.input_func = input_func

    def _show_menu(self, prompt: str, options: List[str]):
        print()
        print(prompt.rstrip())
        print()
        for index, option in enumerate(options, 1):
            print(f"  {index:>3}) {option}")

    def _read_number(self, answer: str, options: List[str]) -> Optional[str]:
        try:
            index = int(answer)
        except ValueError:
            return None
        if 1 <= index <= len(options):
            return options[index - 1]
        return None

    def choose(self, prompt: str, options: List[str]) -> str:
        """
        Let the user pick one option.

        Raises:
            QuitRequested: if the user picks <QUIT>
        """
        options = list(options) + [QUIT]
        self._show_menu(prompt, options)
        while True:
            choice = self._read_number(self.input_func("Choice: ").strip(), options)
            if choice == QUIT:
                raise QuitRequested()
            if choice is not None:
                return choice
            print(f"Please enter a number between 1 and {len(options)}.")

    def choose_many(self, prompt: str, options: List[str]) -> List[str]:
        """
        Let the user pick one or more options, separated by spaces or commas.

        Picking <ALL> selects every option.

        Raises:
            QuitRequested: if <QUIT> is among the picks
        """
        menu = [ALL] + list(options) + [QUIT]
        self._show_menu(prompt, menu)
        while True:
            answer = self.input_func("Choices (e.g. 2 3 5): ").replace(',', ' ').split()
            choices = [self._read_number(item, menu) for item in answer]
            if choices and None not in choices:
                break
            print(f"Please enter one or more numbers between 1 and {len(menu)}.")

        if QUIT in choices:
            raise QuitRequested()
        if ALL in choices:
            return list(options)
        # Keep menu order and drop repeats
        return [option for option in options if option in choices]

    def ask(self, prompt: str, default: str = '') -> str:
        """Ask a free-form question. An empty answer gives the default."""
        print()
        print(prompt.rstrip())
        answer = self.input_func("> ").strip()
        return answer or default


class SessionChoices:
    """
    Answers to the questions asked for each profile.

    An answer given interactively can be applied to every remaining profile
    of the session or to the current profile only. Preset answers (from the
    command line or the config file) always apply to every profile.
    """

    def __init__(self, prompter: Prompter, **presets: Any):
        self.prompter = prompter
        self.values: Dict[str, Any] = {key: value for key, value in presets.items()
                                       if value is not None}
        self._current_profile_only: Set[str] = set()
        self.remaining = 0

    def get(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def __contains__(self, name: str) -> bool:
        return name in self.values

    def remember(self, name: str, value: Any, profile_name: str, shown_value: str = None):
        """
        Store an answer, asking whether it applies to all remaining profiles.

        Args:
            name: Question the answer belongs to
            value: The answer
            profile_name: Profile the question was asked for
            shown_value: How to show the answer to the user (defaults to str(value))
        """
        self.values[name] = value
        if self.remaining <= 0:
            return

        shown_value = shown_value if shown_value is not None else str(value)
        choice = self.prompter.choose(
            f"You have chosen {shown_value}. Would you like to apply this choice to ALL "
            f"remaining profiles you are importing in this session? Or just to {profile_name}?",
            [APPLY_TO_ALL, f"JUST {profile_name}"],
        )
        if choice != APPLY_TO_ALL:
            self._current_profile_only.add(name)

    def reset_profile(self):
        """Forget the answers that only applied to the profile just converted."""
        for name in self._current_profile_only:
            self.values.pop(name, None)
        self._current_profile_only.clear()
