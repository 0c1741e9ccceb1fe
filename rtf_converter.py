# Conference Dossier Generator - Dossier Text to RTF
"""
Builds the downloadable RTF version of the networking briefs.

Steps:
1. Split the webhook response into report blocks
2. Strip markdown syntax from each block
3. Re-join the blocks and compose the RTF document line by line
"""

import logging
import re

from response_parser import join_blocks, parse_response_payload

logger = logging.getLogger(__name__)

RTF_HEADER = (
    "{\\rtf1\\ansi\\deff0"
    "{\\colortbl;\\red0\\green0\\blue0;\\red0\\green0\\blue255;\\red132\\green204\\blue22;}"
    "{\\fonttbl {\\f0 Calibri;}}"
    "\\f0\\fs22\\cf1 "
)

TITLE_LINE = "Create a networking dossier for each attendee:"
THICK_SEPARATOR = "=" * 50

# Lines searched after an attendee name for their LinkedIn URL
LINKEDIN_LOOKAHEAD = 10

SECTION_NAMES = (
    "COMPANY INTELLIGENCE",
    "INDIVIDUAL PROFILE",
    "STRATEGIC NETWORKING INSIGHTS",
    "RELATIONSHIP NOTES",
)

SUBSECTION_NAMES = (
    "Executive Summary",
    "Organization Profile",
    "Technology Infrastructure",
    "Recent Company Developments",
    "Professional Background",
    "Recent Personal Updates",
    "Digital Presence & Engagement",
    "KEY HIGHLIGHTS",
    "CONVERSATION STARTERS & CONNECTION STRATEGY",
)

BOLD_PREFIXES = ("Contact:", "Current Role:", "Location:", "Industry:", "Company Size:")

ATTENDEE_RE = re.compile(r"^\[Attendee Name:## (.+)\]$")
LINKEDIN_RE = re.compile(r"\[LinkedIn\]\((https?://[^)]+)\)")
NUMBERED_RE = re.compile(r"^[0-9]+\.\s")

# Markdown stripping, in order. Emphasis goes before link collapsing so
# "**[text](url)**" is not interpreted twice.
CLEANUP_RULES = (
    (re.compile(r"__(.*?)__"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"_(.*?)_"), r"\1"),
    (re.compile(r"#{1,6}\s"), ""),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
    (re.compile(r"<img[^>]*>"), "[Profile Photo]"),
    (re.compile(r"\n\n+"), "\n\n"),
)


def _clean_once(text):
    for pattern, replacement in CLEANUP_RULES:
        text = pattern.sub(replacement, text)
    return text.strip()


def clean_markdown_for_rtf(text):
    """Strip markdown formatting so the text reads cleanly as plain paragraphs."""
    # One pass can uncover new syntax, e.g. "[[a](b)](c)", so run to a fixed point
    cleaned = _clean_once(text)
    while True:
        again = _clean_once(cleaned)
        if again == cleaned:
            return cleaned
        cleaned = again


def escape_rtf(line):
    """Escape the characters RTF treats as syntax."""
    return line.replace("\\", "\\\\").replace("{", "\\{").replace("}", "\\}")


def encode_unicode(rtf):
    """Write every non-ASCII character as an RTF \\uN? escape."""
    parts = []
    for char in rtf:
        code = ord(char)
        if code < 128:
            parts.append(char)
            continue
        encoded = char.encode("utf-16-le")
        for i in range(0, len(encoded), 2):
            unit = int.from_bytes(encoded[i:i + 2], "little", signed=True)
            parts.append(f"\\u{unit}?")
    return "".join(parts)


def _heading(text, size):
    return f"\\b\\fs{size}\\cf3 {text}\\cf1\\fs22\\b0\\par\\par"


def _find_linkedin_url(lines, index):
    for offset in range(1, LINKEDIN_LOOKAHEAD + 1):
        if index + offset >= len(lines):
            break
        match = LINKEDIN_RE.search(lines[index + offset])
        if match:
            return match.group(1)
    return None


def _linkedin_line(url):
    if url:
        return (
            f'\\cf2 {{\\field{{\\*\\fldinst HYPERLINK "{url}"}}'
            f"{{\\fldrslt LinkedIn Profile}}}}\\cf1\\par\\par"
        )
    return "\\cf2 LinkedIn Profile\\cf1\\par\\par"


def convert_line(lines, index):
    """
    Convert one escaped line to RTF markup.

    Args:
        lines: Every line of the document, already escaped
        index: Position of the line to convert

    Returns:
        str: RTF markup for the line
    """
    line = lines[index]
    stripped = line.strip()

    if stripped == TITLE_LINE:
        return _heading(line, 32)

    attendee = ATTENDEE_RE.match(line)
    if attendee:
        url = _find_linkedin_url(lines, index)
        if not url:
            logger.debug("No LinkedIn URL within %d lines of %s", LINKEDIN_LOOKAHEAD, attendee.group(1))
        return f"\\b\\fs28\\cf3 {attendee.group(1)}\\cf1\\fs22\\b0\\par" + _linkedin_line(url)

    if line in SECTION_NAMES:
        return _heading(line, 24)

    if line in SUBSECTION_NAMES:
        return _heading(line, 20)

    if line.startswith("• ") or line.startswith("- "):
        return f"\\li720\\bullet\\tab {line[2:]}\\par\\li0"

    if NUMBERED_RE.match(line):
        return f"\\li720\\tab {line}\\par\\li0"

    if line.startswith(BOLD_PREFIXES):
        return f"\\b {line}\\b0\\par"

    if stripped == "---":
        return "\\brdrb\\brdrs\\brdrw20\\brsp80 \\par\\brdrnone\\par"

    if stripped == "":
        return "\\par"

    if stripped == THICK_SEPARATOR:
        return "\\brdrb\\brdrs\\brdrw40\\brsp80 \\par\\brdrnone\\par\\par"

    return line + "\\par"


def create_rtf_document(content):
    """
    Compose an RTF document from cleaned dossier text.

    Args:
        content: Plain text, one paragraph per line

    Returns:
        str: The RTF document, 7-bit clean
    """
    lines = [escape_rtf(line) for line in content.split("\n")]
    # Newlines are ignored by RTF readers but end the trailing control word,
    # otherwise "\par" would run into the next line's text
    body = "\n".join(convert_line(lines, index) for index in range(len(lines)))
    return encode_unicode(RTF_HEADER + body + "}")


def build_rtf_download(raw_response):
    """Turn a raw webhook response into the RTF download."""
    blocks = parse_response_payload(raw_response)
    cleaned = join_blocks([clean_markdown_for_rtf(block) for block in blocks])
    logger.info("Building RTF from %d report block(s)", len(blocks))
    return create_rtf_document(cleaned)
