"""
Blocked Keyboard Shortcuts

Deny-list of key combinations for developer tools, view-source, save,
print, refresh and fullscreen toggle.
"""

from dataclasses import dataclass
from typing import Optional, Tuple

from .events import BrowserEvent


@dataclass(frozen=True)
class KeyCombo:
    """
    A key plus the modifiers that must be held.

    Modifiers are required, not exclusive: extra modifiers still match,
    so Ctrl+Shift+Alt+I is caught by Ctrl+Shift+I and Shift+F12 by F12.
    `ctrl` is satisfied by Ctrl or Cmd (meta); `meta` requires Cmd.
    """
    key: str
    ctrl: bool = False
    shift: bool = False
    alt: bool = False
    meta: bool = False

    def matches(self, event: BrowserEvent) -> bool:
        if event.key is None:
            return False
        if event.key.lower() != self.key.lower():
            return False
        if self.ctrl and not (event.ctrl or event.meta):
            return False
        if self.meta and not event.meta:
            return False
        if self.shift and not event.shift:
            return False
        if self.alt and not event.alt:
            return False
        return True


# Most specific first so the reported label names the chord actually used
BLOCKED_SHORTCUTS: Tuple[KeyCombo, ...] = (
    # Developer tools
    KeyCombo("F12"),
    KeyCombo("I", ctrl=True, shift=True),
    KeyCombo("J", ctrl=True, shift=True),
    KeyCombo("C", ctrl=True, shift=True),
    # Developer tools and view source on macOS (Cmd+Option)
    KeyCombo("I", alt=True, meta=True),
    KeyCombo("J", alt=True, meta=True),
    KeyCombo("C", alt=True, meta=True),
    KeyCombo("U", alt=True, meta=True),
    # View source, save, print
    KeyCombo("U", ctrl=True),
    KeyCombo("S", ctrl=True),
    KeyCombo("P", ctrl=True),
    # Refresh
    KeyCombo("F5"),
    KeyCombo("R", ctrl=True, shift=True),
    KeyCombo("R", ctrl=True),
    # Fullscreen toggle
    KeyCombo("F11"),
)


def match_blocked_shortcut(event: BrowserEvent) -> Optional[KeyCombo]:
    """Return the deny-list entry matching a keydown event, if any."""
    for combo in BLOCKED_SHORTCUTS:
        if combo.matches(event):
            return combo
    return None


def describe(combo: KeyCombo) -> str:
    """Human readable label, e.g. 'Ctrl+Shift+I'."""
    parts = []
    if combo.ctrl:
        parts.append("Ctrl")
    if combo.meta:
        parts.append("Cmd")
    if combo.alt:
        parts.append("Alt")
    if combo.shift:
        parts.append("Shift")
    parts.append(combo.key.upper() if len(combo.key) == 1 else combo.key)
    return "+".join(parts)
