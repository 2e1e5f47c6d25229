import re
import unicodedata


def normalize_whitespace(text: str) -> str:
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = re.sub(r"[ \t  ]+", " ", text)
    text = re.sub(r"\n{2,}", "\n", text)
    return text.strip()


def normalize_punctuation(text: str) -> str:
    # dashes and typographic quotes show up in pasted requests
    text = re.sub(r"[‐-―]", "-", text)
    text = re.sub(r"[‘’]", "'", text)
    text = re.sub(r"[“”«»]", '"', text)
    return text


def clean_request(raw_text: str) -> str:
    text = unicodedata.normalize("NFC", raw_text or "")
    text = normalize_punctuation(text)
    text = normalize_whitespace(text)
    return text
