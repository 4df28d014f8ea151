"""
Parser for the MythicMobs skill line grammar.

A skill line looks like::

    - damage{amount=10;element=fire} @onAttack ~hasAura{aura=burn} ?target{range=10} chance=0.5

The line is split into brace-aware words by a small scanner; parameter
blocks are parsed recursively, so values containing `{}`, `@`, `~` or `?`
(quoted or nested) do not cut a field short. Field semantics:

- mechanic: leading word, optional `{key=value;flag}` block
- trigger: `@name` or `@name:arg` (e.g. the `@onTimer:40` interval),
  optionally followed by a bare threshold number
- conditions: every `~name{...}` / `~!name{...}`, left to right
- targeter: the first `?name{...}`
- chance / cooldown: first `chance=N` / `cooldown:N`, spaces around the
  separator allowed (mechanic parameters are scanned before the top-level
  words)
- health modifier: a standalone `=N%` or `=N%-M%` word, kept as text

Parsing is best-effort and never raises.
"""

import logging
import re
from typing import List, Optional, Tuple

from .models import ParsedCondition, ParsedDrop, ParsedSkill, ParsedTargeter, SkillParam
from .textutil import parse_float

_KEYWORD_PATTERN = re.compile(
    r"^(chance|cooldown)[=:]([+-]?\d+(?:\.\d+)?)$", re.IGNORECASE
)
_KEYWORD_START_PATTERN = re.compile(r"^(chance|cooldown)[=:]?$", re.IGNORECASE)
_HEALTH_MODIFIER_PATTERN = re.compile(
    r"^=(\d+(?:\.\d+)?%(?:-\d+(?:\.\d+)?%)?)$"
)

_QUOTES = ("'", '"')
# A quote only opens a quoted run right after one of these (or at the start)
_QUOTE_OPENERS = ("=", "{", ";", ",", ":")


class _Scanner:
    """Cursor over a skill line with brace and quote awareness."""

    def __init__(self, text: str):
        self.text = text
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.text)

    def peek(self, offset: int = 0) -> str:
        index = self.pos + offset
        return self.text[index] if index < len(self.text) else ""

    def advance(self, count: int = 1) -> None:
        self.pos = min(self.pos + count, len(self.text))

    def skip_whitespace(self) -> None:
        while not self.at_end() and self.text[self.pos].isspace():
            self.pos += 1

    def rest(self) -> str:
        return self.text[self.pos:]

    def read_name(self) -> str:
        """Read up to whitespace or an opening brace."""
        start = self.pos
        while not self.at_end():
            ch = self.text[self.pos]
            if ch.isspace() or ch == "{":
                break
            self.pos += 1
        return self.text[start:self.pos]

    def read_block(self) -> Tuple[str, bool]:
        """Read a `{...}` block starting at the cursor.

        Returns:
            Tuple of (inner text, closed). An unterminated block runs to the
            end of the line and is reported as not closed.
        """
        start = self.pos
        depth = 0
        quote: Optional[str] = None
        index = self.pos
        while index < len(self.text):
            ch = self.text[index]
            if quote:
                if ch == quote:
                    quote = None
            elif ch in _QUOTES and _opens_quote(self.text, index):
                quote = ch
            elif ch == "{":
                depth += 1
            elif ch == "}":
                depth -= 1
                if depth == 0:
                    self.pos = index + 1
                    return self.text[start + 1:index], True
            index += 1
        self.pos = len(self.text)
        return self.text[start + 1:], False

    def read_word(self) -> str:
        """Read a whitespace-delimited word, keeping `{...}` blocks whole."""
        start = self.pos
        while not self.at_end():
            ch = self.text[self.pos]
            if ch.isspace():
                break
            if ch == "{":
                self.read_block()
                continue
            self.pos += 1
        return self.text[start:self.pos]


def _opens_quote(text: str, index: int) -> bool:
    """Check whether the quote at index starts a quoted value."""
    back = index - 1
    while back >= 0 and text[back] == " ":
        back -= 1
    return back < 0 or text[back] in _QUOTE_OPENERS


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] and value[0] in _QUOTES:
        return value[1:-1]
    return value


def split_top_level(text: str, separators: str = ";,") -> List[str]:
    """Split text on separators that are outside nested braces and quotes."""
    parts: List[str] = []
    depth = 0
    quote: Optional[str] = None
    current_start = 0
    for index, ch in enumerate(text):
        if quote:
            if ch == quote:
                quote = None
        elif ch in _QUOTES and _opens_quote(text, index):
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
        elif ch in separators and depth == 0:
            parts.append(text[current_start:index])
            current_start = index + 1
    parts.append(text[current_start:])
    return parts


def split_words(text: str) -> List[str]:
    """Split a line into brace-aware whitespace-separated words."""
    scanner = _Scanner(text)
    words: List[str] = []
    while True:
        scanner.skip_whitespace()
        if scanner.at_end():
            break
        words.append(scanner.read_word())
    return words


def _strip_list_marker(text: str) -> str:
    stripped = text.strip()
    if stripped.startswith("-"):
        return stripped[1:].lstrip()
    return stripped


class SkillStringParser:
    """Parses skill, condition, targeter and drop strings."""

    def __init__(self):
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    # === PARAMETERS ===

    def parse_params(self, block: str) -> List[SkillParam]:
        """Parse the inside of a `{...}` block into ordered key/value pairs.

        Bare flags get the value "true". Nested blocks are kept verbatim in
        the value; one layer of matching quotes is removed.
        """
        params: List[SkillParam] = []
        for part in split_top_level(block):
            part = part.strip()
            if not part:
                continue
            key, value = self._split_assignment(part)
            if value is None:
                params.append((key, "true"))
            else:
                params.append((key, _unquote(value)))
        return params

    @staticmethod
    def _split_assignment(part: str) -> Tuple[str, Optional[str]]:
        """Split `key=value` at the first '=' outside braces."""
        depth = 0
        for index, ch in enumerate(part):
            if ch == "{":
                depth += 1
            elif ch == "}":
                depth = max(depth - 1, 0)
            elif ch == "=" and depth == 0:
                return part[:index].strip(), part[index + 1:].strip()
        return part, None

    def _read_named_block(self, scanner: _Scanner) -> Tuple[str, List[SkillParam]]:
        """Read `name{params}` at the cursor (sigils already consumed)."""
        name = scanner.read_name()
        params: List[SkillParam] = []
        if scanner.peek() == "{":
            inner, closed = scanner.read_block()
            if not closed:
                self.logger.debug(f"Unterminated parameter block after '{name}'")
            params = self.parse_params(inner)
        return name, params

    # === SKILLS ===

    def parse_skill(self, raw: object) -> ParsedSkill:
        """Parse one skill line.

        Args:
            raw: Skill entry from a Skills list (stringified if not a str)

        Returns:
            ParsedSkill with every recognised field filled in
        """
        raw_text = str(raw)
        skill = ParsedSkill(raw=raw_text)
        scanner = _Scanner(_strip_list_marker(raw_text))

        scanner.skip_whitespace()
        if not scanner.at_end() and scanner.peek() not in "@~?":
            self._parse_mechanic(scanner, skill)

        after_trigger = False
        while True:
            scanner.skip_whitespace()
            if scanner.at_end():
                break

            ch = scanner.peek()
            if ch == "@":
                scanner.advance()
                full_name, _params = self._read_named_block(scanner)
                name, _, argument = full_name.partition(":")
                if skill.trigger is None and name:
                    skill.trigger = name
                    skill.trigger_argument = argument or None
                    after_trigger = True
                    continue
                skill.unparsed.append(f"@{full_name}")
            elif ch == "~":
                skill.conditions.append(self.parse_condition(scanner.read_word()))
            elif ch == "?":
                word = scanner.read_word()
                if skill.targeter is None:
                    skill.targeter = self.parse_targeter(word)
                else:
                    skill.unparsed.append(word)
            else:
                self._parse_loose_word(self._read_loose_word(scanner), skill, after_trigger)
            after_trigger = False

        return skill

    def _parse_mechanic(self, scanner: _Scanner, skill: ParsedSkill) -> None:
        name, params = self._read_named_block(scanner)
        if ":" in name:
            name, argument = name.split(":", 1)
            if argument:
                params.insert(0, ("arg", argument))
        skill.mechanic = name or None
        skill.params = params

        # Mechanic parameters come first in the line, so they win
        for key, value in params:
            lowered = key.lower()
            if lowered == "chance" and skill.chance is None:
                skill.chance = parse_float(value)
            elif lowered == "cooldown" and skill.cooldown is None:
                skill.cooldown = parse_float(value)

    @staticmethod
    def _read_loose_word(scanner: _Scanner) -> str:
        """Read one word, joining `chance = 0.5` style keywords into one."""
        word = scanner.read_word()
        if not _KEYWORD_START_PATTERN.match(word):
            return word

        start = scanner.pos
        joined = word
        for _ in range(2):
            if _KEYWORD_PATTERN.match(joined):
                return joined
            scanner.skip_whitespace()
            if scanner.at_end():
                break
            joined += scanner.read_word()
        if _KEYWORD_PATTERN.match(joined):
            return joined
        scanner.pos = start
        return word

    def _parse_loose_word(self, word: str, skill: ParsedSkill, after_trigger: bool) -> None:
        if after_trigger and skill.trigger_threshold is None:
            threshold = parse_float(word)
            if threshold is not None:
                skill.trigger_threshold = threshold
                return

        keyword_match = _KEYWORD_PATTERN.match(word)
        if keyword_match:
            keyword = keyword_match.group(1).lower()
            value = float(keyword_match.group(2))
            if keyword == "chance" and skill.chance is None:
                skill.chance = value
            elif keyword == "cooldown" and skill.cooldown is None:
                skill.cooldown = value
            return

        modifier_match = _HEALTH_MODIFIER_PATTERN.match(word)
        if modifier_match:
            if skill.health_modifier is None:
                skill.health_modifier = modifier_match.group(1)
            return

        skill.unparsed.append(word)

    # === CONDITIONS / TARGETERS ===

    def parse_condition(self, raw: object) -> ParsedCondition:
        """Parse `~name{...}`, `~!name{...}` or a Conditions list entry.

        Conditions list entries may carry a trailing action, e.g.
        `health{h=<50%} true`, which is kept in `action`.
        """
        raw_text = str(raw)
        scanner = _Scanner(_strip_list_marker(raw_text))
        if scanner.peek() == "~":
            scanner.advance()
        negated = False
        if scanner.peek() == "!":
            negated = True
            scanner.advance()

        name, params = self._read_named_block(scanner)
        action = scanner.rest().strip() or None
        return ParsedCondition(
            raw=raw_text, type=name, params=params, negated=negated, action=action
        )

    def parse_targeter(self, raw: object) -> ParsedTargeter:
        """Parse `?name{...}` (an `@` prefix is accepted as well)."""
        raw_text = str(raw)
        scanner = _Scanner(_strip_list_marker(raw_text))
        if scanner.peek() in ("?", "@"):
            scanner.advance()
        name, params = self._read_named_block(scanner)
        return ParsedTargeter(raw=raw_text, type=name, params=params)

    # === DROPS ===

    def parse_drop(self, raw: object) -> ParsedDrop:
        """Parse a drop line: `item [amount] [chance]`.

        The item word may carry a parameter block containing spaces,
        e.g. `mythicitem{item=Blade of Dawn} 1 0.5`.
        """
        raw_text = str(raw)
        drop = ParsedDrop(raw=raw_text)
        words = split_words(_strip_list_marker(raw_text))
        if len(words) >= 1:
            drop.item = words[0]
        if len(words) >= 2:
            drop.amount = words[1]
        if len(words) >= 3:
            drop.chance = parse_float(words[2])
        return drop

    def parse_reference(self, text: str) -> Tuple[str, List[SkillParam]]:
        """Split `name{params}` (e.g. a drop item word) into name and params."""
        return self._read_named_block(_Scanner(text.strip()))
