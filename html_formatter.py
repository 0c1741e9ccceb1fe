# Conference Dossier Generator - Dossier Text to HTML
"""
Turns the markdown-like dossier text produced by the workflow into styled HTML.

The conversion is a fixed, ordered list of pattern substitutions. Later rules
rely on earlier ones having already consumed the ``**...**`` spans that carry
a known meaning (titles, attendee names, section headings, field labels), so
whatever bold text is left when the generic bold rule runs is treated as a
company name or emphasis.
"""

import logging
import re

from markdown_it.common.utils import escapeHtml

logger = logging.getLogger(__name__)

MAJOR_SECTIONS = (
    "COMPANY INTELLIGENCE",
    "INDIVIDUAL PROFILE",
    "STRATEGIC NETWORKING INSIGHTS",
)

SUBSECTIONS = (
    "Organization Profile",
    "Technology Infrastructure",
    "Recent Company Developments",
    "Professional Background",
    "Recent Personal Updates",
    "KEY HIGHLIGHTS",
    "CONVERSATION STARTERS & CONNECTION STRATEGY",
)

FIELD_LABELS = (
    "Primary Approach",
    "Key Talking Points",
    "Follow-up Strategy",
    "Value Proposition",
    "LinkedIn Engagement",
    "Tech Stack",
    "Industry Focus",
    "Company Description",
    "Employee Count",
)

# Tried in order, the first one that matches wins. The last capture group of
# the match is the candidate URL.
PHOTO_URL_STRATEGIES = (
    ("image", re.compile(r"!\[([^\]]+)\]\(([^)]+)\)")),
    ("link", re.compile(r"\[([^\]]+)\]\(([^)]+)\)")),
    ("bare_url", re.compile(r"(https?://[^\s]+)")),
    ("parenthesized", re.compile(r"\(([^)]+)\)")),
)

PHOTO_HTML = (
    '<div class="profile-photo-container">'
    '<img src="{url}" alt="Profile Photo" class="profile-photo" '
    "onerror=\"this.style.display='none'; "
    "this.nextElementSibling.style.display='inline-block';\" />"
    '<span class="profile-photo-fallback" style="display:none;">\U0001F4F7 '
    '<a href="{url}" target="_blank" class="profile-photo-link">View Profile Photo</a>'
    "</span></div>"
)

PHOTO_MISSING_HTML = (
    '<div class="profile-photo-container">'
    '<span class="profile-photo-link">\U0001F4F7 Profile Photo Not Available</span>'
    "</div>"
)


def _alternation(names):
    return "|".join(re.escape(name) for name in names)


def extract_photo_url(content):
    """
    Pull a profile photo URL out of whatever follows ``**Profile Photo:**``.

    Returns:
        str or None: The candidate URL, or None if no strategy matched
    """
    for name, pattern in PHOTO_URL_STRATEGIES:
        match = pattern.search(content)
        if match:
            candidate = match.group(pattern.groups)
            logger.debug("Photo URL matched by %s strategy: %s", name, candidate)
            return candidate
    return None


def render_profile_photo(match):
    content = match.group(1)
    logger.debug("Profile Photo content: %s", content)

    url = extract_photo_url(content)
    if url and url.startswith("http"):
        return PHOTO_HTML.format(url=escapeHtml(url.strip()))

    logger.debug("No usable photo URL, using placeholder")
    return PHOTO_MISSING_HTML


def render_bold_span(match):
    # Long or structured spans (company names, "A | B") become a span,
    # short emphasis stays strong.
    content = match.group(1)
    if "|" in content or "&" in content or len(content) > 10:
        return f'<span class="company-name">{content}</span>'
    return f'<strong class="company-name">{content}</strong>'


def render_linkedin(match):
    return f'<a href="{escapeHtml(match.group(1))}" target="_blank" class="contact-info">LinkedIn</a>'


# (name, pattern, replacement) applied top to bottom. Each rule may assume
# the ones above it have already run.
HTML_RULES = (
    # Clean up excessive line breaks
    ("collapse_blank_lines", re.compile(r"\n\n\n+"), "\n\n"),
    # Drop markdown heading prefixes so the title rules see bare lines
    ("strip_heading_markers", re.compile(r"^#+\s*", re.M), ""),

    ("main_title", re.compile(r"^Networking Briefs$", re.M),
     '<h1 class="main-title">Networking Briefs</h1>'),
    ("dossier_request_title", re.compile(r"^Create a networking dossier for each attendee:$", re.M),
     '<h1 class="main-title">Networking Briefs</h1>'),
    ("executive_summary", re.compile(r"\*\*Executive Summary\*\*"),
     '<h2 class="major-title">Executive Summary</h2>'),
    ("attendee_name", re.compile(r"\*\*Attendee Name:([^*]+)\*\*"),
     r'<div class="attendee-name">\1 Networking Dossier</div>'),

    # Must run before the generic bold and link rules eat the photo markup
    ("profile_photo", re.compile(r"\*\*Profile Photo:\*\* (.+)"), render_profile_photo),

    ("major_section_bold", re.compile(rf"^\*\*({_alternation(MAJOR_SECTIONS)})\*\*$", re.M),
     r'<h2 class="major-title">\1</h2>'),
    ("major_section_line", re.compile(rf"^({_alternation(MAJOR_SECTIONS)})$", re.M),
     r'<h2 class="major-title">\1</h2>'),
    ("subsection_bold", re.compile(rf"^\*\*({_alternation(SUBSECTIONS)})\*\*$", re.M),
     r'<h3 class="section-title">\1:</h3>'),
    ("subsection_line", re.compile(rf"^({_alternation(SUBSECTIONS)})$", re.M),
     r'<h3 class="section-title">\1:</h3>'),

    ("bullet_label", re.compile(r"^- \*\*([^*]+):\*\* (.+)$", re.M),
     r"<li><strong>\1:</strong> \2</li>"),
    ("numbered_label", re.compile(r"^(\d+)\. \*\*([^*]+):\*\* (.+)$", re.M),
     r"<li><strong>\2:</strong> \3</li>"),

    ("field_label", re.compile(rf"\*\*({_alternation(FIELD_LABELS)}):\*\*"),
     r'<div class="section-title">\1:</div>'),

    # Whatever bold is left over
    ("bold_span", re.compile(r"\*\*([^*]+)\*\*"), render_bold_span),

    ("linkedin_link", re.compile(r"\[LinkedIn\]\(([^)]+)\)"), render_linkedin),
    # Runs over markup already emitted above, so an address-like photo URL
    # (a@2x.png) gets an anchor inside its src. Reports match this output.
    ("email", re.compile(r"([a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,})"),
     r'<a href="mailto:\1" class="contact-info">\1</a>'),
    ("icp_indicator", re.compile(r"(An ICP: True)"), r'<span class="icp-indicator">\1</span>'),

    ("dash_separator", re.compile(r"^---$", re.M), '<hr class="separator">'),
    ("equals_separator", re.compile(r"^={50}$", re.M), '<hr class="separator">'),

    ("line_breaks", re.compile(r"\n"), "<br>"),
    ("collapse_breaks", re.compile(r"<br><br><br>"), "<br><br>"),
)


def escape_source(text):
    """Neutralize markup in untrusted text. '&' is kept so the rules still match."""
    return text.replace("<", "&lt;").replace(">", "&gt;").replace('"', "&quot;")


def format_dossier_text(text, escape_input=False):
    """
    Format one dossier block as HTML.

    Args:
        text: Markdown-like report text for a single attendee
        escape_input: Escape raw markup in ``text`` first. Only needed when the
            text does not come from the trusted workflow.

    Returns:
        str: HTML fragment
    """
    if escape_input:
        text = escape_source(text)

    debug = logger.isEnabledFor(logging.DEBUG)
    if debug:
        for line_number, line in enumerate(text.split("\n")):
            if "Profile Photo" in line:
                logger.debug("Line %d: %r", line_number, line)

    formatted = text
    for _name, pattern, replacement in HTML_RULES:
        formatted = pattern.sub(replacement, formatted)

    if debug:
        logger.debug("Formatted dossier with %d profile image(s)", formatted.count("<img "))
    return formatted


def format_blocks(blocks, escape_input=False):
    """Format every report block on its own and stack them with separators."""
    sections = [
        f'<div class="dossier">{format_dossier_text(block, escape_input)}</div>'
        for block in blocks
    ]
    return '<hr class="separator">'.join(sections)


HTML_DOCUMENT_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Networking Briefs - {date_stamp}</title>
    <style>
        body {{
            font-family: 'Inter', -apple-system, BlinkMacSystemFont, 'Segoe UI', 'Roboto', sans-serif;
            line-height: 1.7;
            color: #374151;
            max-width: 800px;
            margin: 0 auto;
            padding: 40px;
            background-color: white;
        }}

        h1 {{
            text-align: center;
            color: #166534;
            font-weight: 700;
            font-size: 28px;
            margin-top: 0;
            margin-bottom: 40px;
        }}

        h2 {{
            color: #166534;
            font-weight: 700;
            font-size: 20px;
            margin-top: 35px;
            margin-bottom: 20px;
            text-transform: uppercase;
            letter-spacing: 1px;
        }}

        h3, .section-title {{
            color: #166534;
            font-weight: 700;
            font-size: 16px;
            margin-top: 25px;
            margin-bottom: 15px;
        }}

        .attendee-name {{
            color: #166534;
            font-weight: 700;
            font-size: 16px;
        }}

        strong, b {{
            color: #374151;
            font-weight: 600;
        }}

        li {{
            margin: 8px 0;
            color: #374151;
            line-height: 1.5;
        }}

        hr, .separator {{
            border: none;
            border-top: 2px solid #e5e7eb;
            margin: 25px 0;
            height: 1px;
        }}

        .company-name {{
            color: #166534;
            font-weight: 700;
            font-size: 15px;
            text-decoration: underline;
        }}

        .contact-info {{
            color: #166534;
            font-weight: 700;
            font-size: 14px;
            text-decoration: underline;
        }}

        .icp-indicator {{
            color: #059669;
            font-weight: 600;
        }}

        .content {{
            background: white;
            padding: 20px;
        }}

        .dossier {{
            margin-bottom: 30px;
            padding: 20px 0;
        }}

        .profile-photo {{
            width: 100px;
            height: 100px;
            border-radius: 50%;
            object-fit: cover;
            margin: 10px 0;
            border: 3px solid #22c55e;
        }}
    </style>
</head>
<body>
    <h1>Networking Briefs</h1>
    <div class="content">
        {content}
    </div>
</body>
</html>"""


def build_html_document(content_html, date_stamp):
    """Wrap formatted dossier HTML in a standalone, styled document."""
    return HTML_DOCUMENT_TEMPLATE.format(content=content_html, date_stamp=date_stamp)
