"""Key bindings and shell integration scripts."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Callable, Mapping


class KeybindingError(ValueError):
    """A key binding is malformed or not allowed."""


_BLOCKED_CTRL = {
    "c": "SIGINT (interrupt process)",
    "d": "EOF (close shell)",
    "z": "SIGTSTP (suspend process)",
    "s": "XOFF (freeze terminal output)",
    "q": "XON (resume terminal output)",
}


@dataclass(frozen=True)
class Keybinding:
    """A shell key combination such as ctrl+g."""

    modifier: str
    letter: str

    def validate(self) -> Keybinding:
        """Return the binding, or raise if it collides with a terminal function."""
        if self.modifier == "ctrl" and self.letter in _BLOCKED_CTRL:
            raise KeybindingError(
                f'key "{self._raw()}" conflicts with essential terminal function: '
                f"{_BLOCKED_CTRL[self.letter]}"
            )
        return self

    def __str__(self) -> str:
        prefix = "Alt" if self.modifier == "alt" else "Ctrl"
        return f"{prefix}+{self.letter.upper()}"

    def for_zsh(self) -> str:
        """Key notation for zsh ``bindkey``."""
        return self._escaped(ctrl_prefix="\\C-")

    def for_bash(self) -> str:
        """Key notation for bash ``bind``."""
        return self._escaped(ctrl_prefix="\\C-")

    def for_fish(self) -> str:
        """Key notation for fish ``bind``."""
        return self._escaped(ctrl_prefix="\\c")

    def for_powershell(self) -> str:
        """Chord notation for PSReadLine."""
        return str(self)

    def _escaped(self, ctrl_prefix: str) -> str:
        prefix = "\\e" if self.modifier == "alt" else ctrl_prefix
        return prefix + self.letter

    def _raw(self) -> str:
        return f"{self.modifier}+{self.letter}"


DEFAULT_KEY = Keybinding(modifier="ctrl", letter="g")
WARP_DEFAULT_KEY = Keybinding(modifier="ctrl", letter="o")


def parse_key(text: str) -> Keybinding:
    """Parse values like ``ctrl+g`` or ``alt+f``, ignoring case."""
    parts = text.strip().lower().split("+")
    if len(parts) != 2:
        raise KeybindingError(
            f"invalid key format {text!r}: expected modifier+letter, e.g. ctrl+g"
        )
    modifier, letter = (part.strip() for part in parts)
    if modifier not in ("ctrl", "alt"):
        raise KeybindingError(f"unsupported modifier {modifier!r}: use ctrl or alt")
    if len(letter) != 1 or not "a" <= letter <= "z":
        raise KeybindingError(f"invalid key {letter!r}: expected a single letter a-z")
    return Keybinding(modifier=modifier, letter=letter)


def detect_warp(environ: Mapping[str, str] | None = None) -> bool:
    """Tell whether the terminal is Warp, which reserves some keys."""
    env = os.environ if environ is None else environ
    return env.get("TERM_PROGRAM") == "WarpTerminal"


_PICKER = "_wf_picker"
_DATA_DIR = "${XDG_DATA_HOME:-$HOME/.local/share}/wf"
_LAST_CMD = '"$_wf_dir/last_cmd"'
_ENSURE_DIR = '[[ -d "$_wf_dir" ]] || mkdir -p "$_wf_dir"'


def _ind(level: int, line: str, width: int = 2) -> str:
    return " " * (width * level) + line


def _header(title: str, usages: tuple[str, ...], comment: str) -> list[str]:
    lines = [f"# wf shell integration for {title}"]
    lines.extend(f"# {usage}" for usage in usages)
    lines.extend([comment, ""])
    return lines


def _bash_body(key: str) -> list[str]:
    lines = [
        f"{_PICKER}() {{",
        _ind(1, "local output"),
        _ind(1, "output=$(wf pick)"),
        _ind(1, 'if [[ -n "$output" ]]; then'),
        _ind(2, 'READLINE_LINE="$output"'),
        _ind(2, "READLINE_POINT=${#READLINE_LINE}"),
        _ind(1, "fi"),
        "}",
    ]
    lines.extend(
        f"bind -m {mode} -x '\"{key}\": {_PICKER}'"
        for mode in ("emacs-standard", "vi-insert")
    )
    lines.extend(
        [
            "",
            "_wf_precmd() {",
            _ind(1, f'local _wf_dir="{_DATA_DIR}"'),
            _ind(1, _ENSURE_DIR),
            _ind(1, "local _last"),
            _ind(1, "_last=$(HISTTIMEFORMAT='' history 1 | sed 's/^[ ]*[0-9]*[ ]*//')"),
            _ind(1, f"[[ -n \"$_last\" ]] && printf '%s' \"$_last\" > {_LAST_CMD}"),
            "}",
            'PROMPT_COMMAND="_wf_precmd${PROMPT_COMMAND:+;$PROMPT_COMMAND}"',
        ]
    )
    return lines


def _zsh_body(key: str) -> list[str]:
    lines = [
        f"{_PICKER}() {{",
        _ind(1, "local output"),
        _ind(1, "output=$(wf pick)"),
        _ind(1, "local ret=$?"),
        _ind(1, 'if [[ -n "$output" ]]; then'),
        _ind(2, 'LBUFFER="$output"'),
        _ind(2, 'RBUFFER=""'),
        _ind(1, "fi"),
        _ind(1, "zle reset-prompt"),
        _ind(1, "return $ret"),
        "}",
        f"zle -N {_PICKER}",
    ]
    lines.extend(
        f"bindkey -M {keymap} '{key}' {_PICKER}" for keymap in ("emacs", "viins", "vicmd")
    )
    lines.extend(
        [
            "",
            "_wf_precmd() {",
            _ind(1, f'local _wf_dir="{_DATA_DIR}"'),
            _ind(1, _ENSURE_DIR),
            _ind(1, f'print -r -- "$history[1]" > {_LAST_CMD}'),
            "}",
            "autoload -Uz add-zsh-hook",
            "add-zsh-hook precmd _wf_precmd",
        ]
    )
    return lines


def _fish_body(key: str) -> list[str]:
    data_dir = (
        '(test -n "$XDG_DATA_HOME" && echo "$XDG_DATA_HOME" '
        '|| echo "$HOME/.local/share")"/wf"'
    )
    return [
        f"function {_PICKER}",
        _ind(1, "set -l output (wf pick | string collect)"),
        _ind(1, 'if test -n "$output"'),
        _ind(2, "commandline -r $output"),
        _ind(1, "end"),
        _ind(1, "commandline -f repaint"),
        "end",
        f"bind {key} {_PICKER}",
        f"bind -M insert {key} {_PICKER}",
        "",
        "function _wf_postexec --on-event fish_postexec",
        _ind(1, f"set -l _wf_dir {data_dir}"),
        _ind(1, 'mkdir -p "$_wf_dir"'),
        _ind(1, f"printf '%s' $argv[1] > {_LAST_CMD}"),
        "end",
    ]


def _powershell_body(key: str) -> list[str]:
    readline = "[Microsoft.PowerShell.PSConsoleReadLine]"
    return [
        f"Set-PSReadLineKeyHandler -Chord '{key}' -ScriptBlock {{",
        _ind(1, f"{readline}::RevertLine()", width=4),
        _ind(1, "$output = wf pick 2>$null", width=4),
        _ind(1, "if ($output) {", width=4),
        _ind(2, f"{readline}::Insert($output)", width=4),
        _ind(1, "}", width=4),
        "}",
    ]


@dataclass(frozen=True)
class _ShellScript:
    title: str
    usages: tuple[str, ...]
    notation: Callable[[Keybinding], str]
    body: Callable[[str], list[str]]


_SCRIPTS: dict[str, _ShellScript] = {
    "bash": _ShellScript(
        "bash",
        ('Usage: eval "$(wf init bash)"',),
        Keybinding.for_bash,
        _bash_body,
    ),
    "zsh": _ShellScript(
        "zsh",
        ('Usage: eval "$(wf init zsh)"  or  source <(wf init zsh)',),
        Keybinding.for_zsh,
        _zsh_body,
    ),
    "fish": _ShellScript(
        "fish",
        ("Usage: wf init fish | source",),
        Keybinding.for_fish,
        _fish_body,
    ),
    "powershell": _ShellScript(
        "PowerShell 7+",
        (
            "Usage: wf init powershell | Invoke-Expression",
            "Or add to $PROFILE: wf init powershell | Invoke-Expression",
        ),
        Keybinding.for_powershell,
        _powershell_body,
    ),
}


def render_script(shell: str, key: Keybinding | str = DEFAULT_KEY, comment: str = "") -> str:
    """Return the integration script for ``shell`` bound to ``key``."""
    try:
        spec = _SCRIPTS[shell.lower()]
    except KeyError:
        supported = ", ".join(_SCRIPTS)
        raise ValueError(f"unsupported shell {shell!r}: use one of {supported}") from None
    binding = parse_key(key) if isinstance(key, str) else key
    lines = _header(spec.title, spec.usages, comment) + spec.body(spec.notation(binding))
    return "\n".join(lines) + "\n"