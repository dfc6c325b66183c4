"""Regex-based structured field parsing for cleaned OCR transcripts.

Splits a transcript into addresses, phone numbers, emails, URLs and the
remaining free text. Whole lines identified as an address, email or URL
are kept out of the free text, and inline phone numbers, emails and URLs
are stripped from the lines that remain.
"""

import re
from dataclasses import asdict, dataclass

from signscan.utils.config import ParsingConfig
from signscan.utils.logger import get_logger

logger = get_logger(__name__)

# Tamil block, ASCII letters and digits, and a small punctuation allow-list.
_DISALLOWED_CHARS = re.compile(r"[^\u0B80-\u0BFFa-zA-Z0-9 \n.,\-:/()%₹$@#&!]")
_MULTI_SPACE = re.compile(r" {2,}")
_MULTI_NEWLINE = re.compile(r"\n{3,}")

# Indian mobile numbers, or a generic area code + subscriber number.
PHONE_PATTERN = re.compile(
    r"(\+?91[\s\-]?)?[6-9]\d{9}"
    r"|(\+?\d{1,3}[\s\-]?)?(\(?\d{2,4}\)?[\s\-.]?)(\d{3,5}[\s\-.]?\d{3,5})",
    re.ASCII,
)
EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")
URL_PATTERN = re.compile(r"(https?://\S+)|(www\.[a-zA-Z0-9\-]+\.[a-zA-Z]{2,}\S*)")

_NON_DIGIT = re.compile(r"\D", re.ASCII)
_HAS_DIGIT = re.compile(r"\d", re.ASCII)
_WHITESPACE_RUN = re.compile(r"\s+")
_WORD_CHAR = r"[\w\u0B80-\u0BFF]"


@dataclass
class ParsedFields:
    """Structured fields parsed from a transcript; empty fields are ``None``."""

    full_text: str | None = None
    address: str | None = None
    phone: str | None = None
    email: str | None = None
    url: str | None = None
    other_text: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)


def sanitize(text: str) -> str:
    """Produce the canonical text used for all matching.

    Tabs become spaces, characters outside the allowed scripts and
    punctuation are dropped, runs of spaces collapse to one and runs of
    three or more newlines collapse to two.
    """
    cleaned = text.replace("\t", " ")
    cleaned = _DISALLOWED_CHARS.sub("", cleaned)
    cleaned = _MULTI_SPACE.sub(" ", cleaned)
    cleaned = _MULTI_NEWLINE.sub("\n\n", cleaned)
    return cleaned.strip()


def split_lines(text: str) -> list[str]:
    """Split on newlines, trim each line and drop empty ones."""
    return [line.strip() for line in text.split("\n") if line.strip()]


def count_digits(value: str) -> int:
    return len(_NON_DIGIT.sub("", value))


def _unique(values: list[str]) -> list[str]:
    return list(dict.fromkeys(values))


class FieldParser:
    """Classifies transcript text into mutually exclusive fields.

    Args:
        config: Parsing configuration with the address keywords, the
            separators used to join multi-valued fields and the accepted
            phone digit range.
    """

    def __init__(self, config: ParsingConfig | None = None) -> None:
        self.config = config or ParsingConfig()
        keywords = "|".join(re.escape(k) for k in self.config.address_keywords)
        # Word boundaries cover Tamil letters and vowel signs as well as ASCII.
        self.address_pattern = re.compile(
            rf"(?<!{_WORD_CHAR})(?:{keywords})(?!{_WORD_CHAR})",
            re.IGNORECASE | re.ASCII,
        )

    def find_phones(self, text: str) -> list[str]:
        """Return phone candidates whose digit count is within range, deduplicated."""
        phones = []
        for match in PHONE_PATTERN.finditer(text):
            candidate = _WHITESPACE_RUN.sub(" ", match.group(0).strip())
            digits = count_digits(candidate)
            if self.config.phone_min_digits <= digits <= self.config.phone_max_digits:
                phones.append(candidate)
        return _unique(phones)

    def find_emails(self, text: str) -> list[str]:
        return _unique([m.group(0) for m in EMAIL_PATTERN.finditer(text)])

    def find_urls(self, text: str) -> list[str]:
        return _unique([m.group(0) for m in URL_PATTERN.finditer(text)])

    def is_address_line(self, line: str) -> bool:
        """An address line has a digit and an address keyword."""
        return bool(_HAS_DIGIT.search(line)) and bool(self.address_pattern.search(line))

    @staticmethod
    def strip_inline(line: str) -> str:
        """Remove phone, email and URL substrings from a line."""
        stripped = PHONE_PATTERN.sub("", line)
        stripped = EMAIL_PATTERN.sub("", stripped)
        stripped = URL_PATTERN.sub("", stripped)
        return _MULTI_SPACE.sub(" ", stripped).strip()

    def parse(self, text: str | None) -> ParsedFields:
        """Parse a cleaned transcript into structured fields.

        Args:
            text: Cleaned transcript; may be empty or ``None``.

        Returns:
            ParsedFields with every unmatched field set to ``None``.
        """
        if not text:
            return ParsedFields()

        lines = split_lines(sanitize(text))
        if not lines:
            return ParsedFields()

        full_text = "\n".join(lines)
        phones = self.find_phones(full_text)
        emails = self.find_emails(full_text)
        urls = self.find_urls(full_text)
        address_lines = [line for line in lines if self.is_address_line(line)]

        claimed = set(address_lines) | set(emails) | set(urls)
        other_lines = []
        for line in lines:
            if line in claimed:
                continue
            remainder = self.strip_inline(line)
            if len(remainder) > 1 and remainder not in claimed:
                other_lines.append(remainder)

        logger.info(
            "Parsed %d lines: %d address, %d phone, %d email, %d url, %d other",
            len(lines),
            len(address_lines),
            len(phones),
            len(emails),
            len(urls),
            len(other_lines),
        )

        sep = self.config.list_separator
        return ParsedFields(
            full_text=full_text,
            address=self.config.address_separator.join(address_lines) or None,
            phone=sep.join(phones) or None,
            email=sep.join(emails) or None,
            url=sep.join(urls) or None,
            other_text="\n".join(other_lines) or None,
        )
