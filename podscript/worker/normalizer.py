import logging
import re

from podscript.models import SpeakerId, Utterance

logger = logging.getLogger(__name__)

SECTION_LABEL = re.compile(
    r"^(?:introduction|intro|conclusion|outro|(?:subtopic|section|segment)\s*\d*)\s*:\s*",
    re.IGNORECASE,
)
# Tags may be wrapped in markdown emphasis, e.g. **Speaker 1:** text
SPEAKER_LINE = re.compile(
    r"^[*_]*<?\s*speaker\s*([a-z0-9]+)\s*>?[*_]*\s*:\s*[*_]*\s*(.*)$", re.IGNORECASE
)
DIRECTIONS = re.compile(r"<[^>]*>|\[[^\]]*\]")
CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f\u2028\u2029]")
WHITESPACE = re.compile(r"\s+")

SPEAKER_WORDS = {"one": 1, "two": 2}


def parse_speaker(token: str) -> SpeakerId | None:
    token = token.lower()
    speaker = int(token) if token.isdigit() else SPEAKER_WORDS.get(token)
    if speaker in (1, 2):
        return speaker
    return None


def clean_text(text: str) -> str:
    text = DIRECTIONS.sub(" ", text)
    text = CONTROL_CHARS.sub(" ", text)
    return WHITESPACE.sub(" ", text).strip()


def normalize_script(text: str) -> list[Utterance]:
    """
    Parses a concatenated dialogue script into ordered speaker utterances.

    Only lines tagged `<Speaker N>: ...` survive. Section labels, bracketed directions and
    control characters are stripped, and lines left without spoken text are dropped. Any
    input, however malformed, yields a (possibly empty) list.
    """
    utterances: list[Utterance] = []

    # Only "\n" separates turns, other line breaks are cleaned as control characters
    for raw_line in (text or "").split("\n"):
        line = SECTION_LABEL.sub("", raw_line.strip())
        if not line:
            continue

        match = SPEAKER_LINE.match(line)
        if not match:
            continue

        spoken = clean_text(match.group(2))
        if not spoken:
            continue

        speaker = parse_speaker(match.group(1))
        if speaker is None:
            # Alternate speakers when the tag can't be read
            speaker = len(utterances) % 2 + 1
            logger.debug("Unreadable speaker tag %r, using speaker %d", match.group(1), speaker)

        utterances.append(Utterance(speaker_id=speaker, text=spoken))

    return utterances
