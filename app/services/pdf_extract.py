import hashlib, logging, re
from typing import Iterator

from ..models.extract_models import BASIC_TEXT_EXTRACTION, ExtractionResult, ExtractMeta
from .errors import NoExtractableText

log = logging.getLogger("pdftext")

# ECMAScript whitespace and line terminators. Python's str \s also covers
# \x1c-\x1f and \x85, and its `.` only stops at \n, so both are spelled out.
_LINE_TERMINATORS = "\n\r\u2028\u2029"
_SPACE_CHARS = (
    " \t\v\f\u00a0\u1680\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007"
    "\u2008\u2009\u200a\u202f\u205f\u3000\ufeff" + _LINE_TERMINATORS
)
_SPACE_CLASS = "[" + re.escape(_SPACE_CHARS) + "]"

# Text objects: shortest BT ... ET span, may cross lines.
_TEXT_OBJECT = re.compile(r"BT(.*?)ET", re.DOTALL)
# String operands: shortest (...) on one line. Escaped parens are not
# recognised here, so "(a\)b)" splits early; unescaping happens afterwards.
_STRING_LITERAL = re.compile(r"\(([^" + re.escape(_LINE_TERMINATORS) + r"]*?)\)")
# "/Type /Page" but not "/Type /Pages"
_PAGE_MARKER = re.compile(r"/Type" + _SPACE_CLASS + r"*/Page[^s]")
_WHITESPACE = re.compile(_SPACE_CLASS + "+")

_ESCAPES = (
    ("\\n", "\n"),
    ("\\r", "\r"),
    ("\\t", "\t"),
    ("\\\\", "\\"),
    ("\\(", "("),
    ("\\)", ")"),
)


def _sha256(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()

def describe_upload(filename: str, data: bytes) -> ExtractMeta:
    return ExtractMeta(filename=filename, size_bytes=len(data), sha256=_sha256(data))


def decode_pdf_bytes(data: bytes) -> str:
    """Lossy UTF-8 decode; invalid sequences become U+FFFD instead of raising."""
    return data.decode("utf-8", errors="replace")

def iter_text_objects(pdf_text: str) -> Iterator[str]:
    for m in _TEXT_OBJECT.finditer(pdf_text):
        yield m.group(0)

def iter_string_literals(text_object: str) -> Iterator[str]:
    """Yield the raw contents of each parenthesized literal, parentheses stripped."""
    for m in _STRING_LITERAL.finditer(text_object):
        yield m.group(1)

def unescape_literal(raw: str) -> str:
    for seq, repl in _ESCAPES:
        raw = raw.replace(seq, repl)
    return raw

def normalize_whitespace(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip(_SPACE_CHARS)

def estimate_page_count(pdf_text: str) -> int:
    # every document has at least one page, even with no markers
    return len(_PAGE_MARKER.findall(pdf_text)) or 1


def extract_from_pdf_bytes(data: bytes) -> ExtractionResult:
    """
    Best-effort text extraction straight from the PDF bytes.

    Walks the BT/ET text objects, collects every literal string operand in
    document order and joins them with single spaces. No fonts, encodings or
    compressed streams are handled, so image-based, encrypted or
    Flate-compressed documents typically raise NoExtractableText.
    """
    pdf_text = decode_pdf_bytes(data)

    parts = []
    for obj in iter_text_objects(pdf_text):
        for raw in iter_string_literals(obj):
            parts.append(unescape_literal(raw))
            parts.append(" ")

    text = normalize_whitespace("".join(parts))
    page_count = estimate_page_count(pdf_text)
    log.debug(f"[extract] chars={len(text)} pages~{page_count}")

    if not text:
        raise NoExtractableText()
    return ExtractionResult(success=True, text=text, page_count=page_count, method=BASIC_TEXT_EXTRACTION)
