# slackchat/ui_ptk/text_sanitize.py
import re

ANSI_ESCAPE_PATTERN = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')
# tab and newline survive; newlines are folded by the caller
CONTROL_CHARS_PATTERN = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')

def sanitize_text(text: str) -> str:
    if not isinstance(text, str):
        return ""
    sanitized = ANSI_ESCAPE_PATTERN.sub('', text)
    sanitized = CONTROL_CHARS_PATTERN.sub('', sanitized)
    return sanitized.replace('\r', '')
