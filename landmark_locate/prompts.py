PROMPT_VERSION = "v1"

SYSTEM_PROMPT = (
    "You are a concise travel guide. You write short, factual descriptions of landmarks for a "
    "mobile travel assistant. Plain prose only: no markdown, no bullet points, no headings. "
    "If you are unsure about a fact, leave it out rather than guessing."
)

FORMAT_PROMPT_TEMPLATE = """
Format this landmark information clearly and concisely (max 150 words).

Landmark: <<NAME>>

Information: <<RAW_TEXT>>

Formatted:
"""

GENERATE_PROMPT_TEMPLATE = """
Provide a brief description of this landmark (max 120 words).

Landmark: <<NAME>>

Include: location, historical significance, key features.

Description:
"""


def format_prompt(name: str, raw_text: str) -> str:
    return FORMAT_PROMPT_TEMPLATE.replace("<<NAME>>", name).replace("<<RAW_TEXT>>", raw_text).strip()


def generate_prompt(name: str) -> str:
    return GENERATE_PROMPT_TEMPLATE.replace("<<NAME>>", name).strip()
