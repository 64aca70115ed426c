# puyopu64.py
# Puyopu64 — Password Translator Core Library
# Converts playfield passwords between Puyo Puyo Puzzle Pop and Puyo Puyo 7 / Puyo Puyo!! (20th)
#
# Both games use the same bit-level format: a sequence of 6-bit values ("sextets") whose
# last element is a format discriminator:
#     PLAIN (0) => every other sextet packs two 3-bit playfield cells
#     RLE   (2) => every other sextet pair is (value, run_length - 1), one unit = 2 cells
# Only the 64-character alphabet differs, plus the spelling variants each game tolerates.
#
# Decoding policy: cosmetic spelling variants are folded into canonical characters,
# anything else that is not part of the alphabet (whitespace, line breaks) is skipped.

from __future__ import annotations

import logging
import re
from types import MappingProxyType
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# ============================================================
# Errors
# ============================================================

class Puyopu64Error(ValueError):
    """Base class for malformed or unrecognized password input."""


class UnrecognizedPasswordError(Puyopu64Error):
    pass


class InvalidFormatError(Puyopu64Error):
    pass


class UnrecognizedRuleError(Puyopu64Error):
    pass


MSG_UNRECOGNIZED_PASSWORD = "パスワードが まちがっているようです。"
MSG_INVALID_FORMAT = "Invalid format"
MSG_UNRECOGNIZED_RULE = "Cannot recognize the original rule."


# ============================================================
# Formats, cells and rules
# ============================================================

class Format(IntEnum):
    PLAIN = 0
    RLE = 2


class Puyo(IntEnum):
    BLANK = 0
    RED = 1
    GREEN = 2
    BLUE = 3
    YELLOW = 4
    PURPLE = 5
    GARBAGE = 6
    SUN = 7


class Rule(Enum):
    NORMAL = "ノーマル"
    SUN = "ぷよぷよSUN"
    MEGA = "でかぷよ"
    TINY = "ちびぷよ"

    @property
    def title(self) -> str:
        return self.value


# Total cell count (rounded up to even) => rule
RULE_BY_CELL_COUNT: Dict[int, Rule] = {
    22: Rule.MEGA,
    78: Rule.NORMAL,
    84: Rule.SUN,
    190: Rule.TINY,
}

CELL_BITS = 3
CELL_MASK = (1 << CELL_BITS) - 1
CELLS_PER_SEXTET = 2

RLE_MAX_RUN = 64
# One more (value, run) pair plus the discriminator are still to come after a flush
RLE_MARGIN = 5


# ============================================================
# Alphabets (exactly 64 distinct chars, index = sextet value)
# ============================================================

CHAR_PPPP = "ABCDEFGHJKLMNPQRSTUVWXYZadefghijmnrty0123456789!#$%&*+-/=<>?@\\^~"

CHAR_PP7 = (
    "あいうえおかきくけこさしすせそたちつてとなにのはひふへほまみむも"
    "やゆよらりるろをＡＢＣＤＥＦＧＨＩＪＫＬＭＮＰＲＳＴＵＶＷＸＹＺ"
)


def _build_inverse(alphabet: str) -> Mapping[str, int]:
    if len(alphabet) != 64 or len(set(alphabet)) != 64:
        raise RuntimeError(f"Password alphabet must be 64 distinct chars (got {len(alphabet)})")
    return MappingProxyType({ch: i for i, ch in enumerate(alphabet)})


# ============================================================
# Spelling normalizers
# ============================================================

FULLWIDTH_OFFSET = 0xFEE0
FULLWIDTH_CASE_OFFSET = 0x20
WAVE_DASH = "〜"

# Ｏ and Ｑ are not part of the PP7 alphabet, so o/q are left alone
_PP7_HALFWIDTH_LETTER = re.compile(r"[A-NPR-Za-npr-z]")
_PP7_FULLWIDTH_LOWER = re.compile(r"[ａ-ｎｐｒ-ｚ]")

_PPPP_FULLWIDTH = re.compile(r"[！＃-＆＊＋－／-９＜-ＨＪ-ＮＰ-Ｚ＼＾ａｄ-ｊｍｎｒｔｙ～]")


def normalize_pp7(password: str) -> str:
    """Folds half-width letters and full-width lowercase into full-width uppercase."""
    s = _PP7_HALFWIDTH_LETTER.sub(lambda m: chr(ord(m.group()) + FULLWIDTH_OFFSET), password)
    return _PP7_FULLWIDTH_LOWER.sub(lambda m: chr(ord(m.group()) - FULLWIDTH_CASE_OFFSET), s)


def normalize_pppp(password: str) -> str:
    """
    Folds full-width alphanumerics and punctuation down to half-width.
    Some input methods type Shift+^ as a wave dash instead of a tilde, so that is folded too.
    """
    s = _PPPP_FULLWIDTH.sub(lambda m: chr(ord(m.group()) - FULLWIDTH_OFFSET), password)
    return s.replace(WAVE_DASH, "~")


# ============================================================
# Variants
# ============================================================

class Game(Enum):
    PUYO7 = "puyo7"
    PPPP = "pppp"


@dataclass(frozen=True, eq=False)
class Variant:
    game: Game
    title: str
    alphabet: str
    inverse: Mapping[str, int]
    normalize: Callable[[str], str]
    canonical_rle: bool
    spaced: bool

    def __repr__(self) -> str:
        return f"Variant({self.game.name})"


TITLE_PUYO7 = "ぷよぷよ７、ぷよぷよ！！"
TITLE_PUYO20TH = "ぷよぷよ！！"
TITLE_PPPP = "ぷよぷよパズルポップ"

# Puyo Puyo 7 must reproduce its own password on re-encode, so it always re-derives RLE.
PUYO7 = Variant(
    game=Game.PUYO7,
    title=TITLE_PUYO7,
    alphabet=CHAR_PP7,
    inverse=_build_inverse(CHAR_PP7),
    normalize=normalize_pp7,
    canonical_rle=True,
    spaced=True,
)

PPPP = Variant(
    game=Game.PPPP,
    title=TITLE_PPPP,
    alphabet=CHAR_PPPP,
    inverse=_build_inverse(CHAR_PPPP),
    normalize=normalize_pppp,
    canonical_rle=False,
    spaced=False,
)

VARIANTS: Dict[Game, Variant] = {
    Game.PUYO7: PUYO7,
    Game.PPPP: PPPP,
}

# Order matters for detection: a char recognized by both is tried as PP7 first
DETECTION_ORDER = (PUYO7, PPPP)


def other_variant(variant: Variant) -> Variant:
    return PPPP if variant.game is Game.PUYO7 else PUYO7


# ============================================================
# Sextet codec
# ============================================================

GROUP_SIZE = 4
LINE_SIZE = 14

_GROUP = re.compile(r".{%d}" % GROUP_SIZE)
_LINE = re.compile(r"(.{%d}) " % LINE_SIZE)


def add_spacing(password: str) -> str:
    """Space after every 4 chars; every third group ends the line instead."""
    s = _GROUP.sub(lambda m: m.group() + " ", password)
    return _LINE.sub(lambda m: m.group(1) + "\n", s)


def decode(variant: Variant, password: str) -> List[int]:
    """Decodes password text into sextets. Unknown chars are skipped, so the result may be empty."""
    out: List[int] = []
    for ch in variant.normalize(password):
        v = variant.inverse.get(ch)
        if v is None:
            continue
        out.append(v)
    return out


def encode(variant: Variant, sextets: Sequence[int]) -> str:
    seq = normalize_sextet_sequence(sextets) if variant.canonical_rle else list(sextets)

    chars: List[str] = []
    for v in seq:
        if not 0 <= v < 64:
            raise ValueError(f"Sextet out of range: {v!r}")
        chars.append(variant.alphabet[v])

    s = "".join(chars)
    return add_spacing(s) if variant.spaced else s


# ============================================================
# Format engine
# ============================================================

def get_format(sextets: Sequence[int]) -> Format:
    if not sextets:
        raise InvalidFormatError(MSG_INVALID_FORMAT)
    try:
        return Format(sextets[-1])
    except ValueError:
        raise InvalidFormatError(MSG_INVALID_FORMAT) from None


def _rle_pairs(sextets: Sequence[int]) -> Iterator[Tuple[int, int]]:
    # A dangling value without its run length is ignored
    for i in range(0, len(sextets) - 2, 2):
        yield sextets[i], sextets[i + 1]


def get_cell_count(sextets: Sequence[int]) -> int:
    """How many playfield cells the sequence holds (odd field sizes are rounded up to even)."""
    fmt = get_format(sextets)
    if fmt is Format.PLAIN:
        return (len(sextets) - 1) * CELLS_PER_SEXTET
    # A dangling value before the discriminator is not counted, nor is the discriminator itself
    return sum(run + 1 for _value, run in _rle_pairs(sextets)) * CELLS_PER_SEXTET


def expand_rle(sextets: Sequence[int]) -> List[int]:
    plain: List[int] = []
    for value, run in _rle_pairs(sextets):
        plain.extend([value] * (run + 1))
    plain.append(Format.PLAIN)
    return plain


def to_plain(sextets: Sequence[int]) -> List[int]:
    if get_format(sextets) is Format.PLAIN:
        return list(sextets)
    return expand_rle(sextets)


def normalize_sextet_sequence(sextets: Sequence[int]) -> List[int]:
    """
    Re-derives the canonical representation of a sequence.

    Puzzle Pop sometimes emits PLAIN even when RLE would be shorter, while Puyo Puyo 7 must
    get its own password back on re-encode. Rather than patching up the input format,
    expand to PLAIN and greedily run-length encode it again, bailing out to PLAIN as soon
    as RLE cannot end up shorter.

    Unknown formats are returned unchanged.
    """
    try:
        plain = to_plain(sextets)
    except InvalidFormatError:
        return list(sextets)

    data = plain[:-1]
    if not data:
        return plain

    rle: List[int] = []
    previous = data[0]
    count = 0
    for sextet in data:
        if sextet == previous and count < RLE_MAX_RUN:
            count += 1
            continue
        if len(rle) + RLE_MARGIN > len(plain):
            logger.debug("RLE gains nothing after %d sextets, keeping PLAIN", len(rle))
            return plain
        rle.extend((previous, count - 1))
        previous = sextet
        count = 1

    rle.extend((previous, count - 1, Format.RLE))

    # Only reachable with a single run, which never passes through the check above
    if len(rle) > len(plain):
        return plain
    return rle


def get_cells(sextets: Sequence[int]) -> List[Puyo]:
    """Unpacks the playfield cells, high 3 bits of each sextet first."""
    cells: List[Puyo] = []
    for v in to_plain(sextets)[:-1]:
        cells.append(Puyo((v >> CELL_BITS) & CELL_MASK))
        cells.append(Puyo(v & CELL_MASK))
    return cells


# ============================================================
# Rule inference
# ============================================================

def get_rule_from_cell_count(sextets: Sequence[int]) -> Rule:
    rule = RULE_BY_CELL_COUNT.get(get_cell_count(sextets))
    if rule is None:
        raise UnrecognizedRuleError(MSG_UNRECOGNIZED_RULE)
    return rule


# ============================================================
# Variant detection
# ============================================================

def detect_variant(password: str) -> Optional[Variant]:
    """
    Scans backward for the discriminator, since trailing whitespace may follow it.

    The rightmost char a variant recognizes must be 0 or 2 for a valid password of that
    variant; anything else rules the variant out. Chars a variant does not recognize at
    all are skipped.
    """
    ruled_out = {v.game: False for v in DETECTION_ORDER}

    for ch in reversed(password):
        for variant in DETECTION_ORDER:
            if ruled_out[variant.game]:
                continue
            found = decode(variant, ch)
            if not found:
                continue
            if found[0] in (Format.PLAIN, Format.RLE):
                logger.debug("Detected %s password", variant.game.name)
                return variant
            ruled_out[variant.game] = True

        if all(ruled_out.values()):
            return None

    return None


# ============================================================
# Translation
# ============================================================

@dataclass(frozen=True)
class Preview:
    source: str
    target: str
    rule: Rule


def detect_and_decode(password: str) -> Tuple[Variant, List[int]]:
    variant = detect_variant(password)
    if variant is None:
        raise UnrecognizedPasswordError(MSG_UNRECOGNIZED_PASSWORD)
    return variant, decode(variant, password)


def translate(password: str) -> str:
    """Translates a password to the other game's alphabet."""
    variant, sextets = detect_and_decode(password)
    target = other_variant(variant)
    logger.debug("Translating %d sextets %s -> %s", len(sextets), variant.game.name, target.game.name)
    return encode(target, sextets)


def _title_for(variant: Variant, rule: Rule) -> str:
    # Puyo Puyo 7 has no SUN rule, only Puyo Puyo!! does
    if variant.game is Game.PUYO7 and rule is Rule.SUN:
        return TITLE_PUYO20TH
    return variant.title


def describe(password: str) -> Preview:
    """Names the source and target games plus the rule, for the live preview."""
    variant, sextets = detect_and_decode(password)
    rule = get_rule_from_cell_count(sextets)
    return Preview(
        source=_title_for(variant, rule),
        target=_title_for(other_variant(variant), rule),
        rule=rule,
    )


def translate_or_message(password: str) -> str:
    try:
        return translate(password)
    except Puyopu64Error as e:
        logger.info("Translation failed: %s", e)
        return "エラー:\n" + str(e)
