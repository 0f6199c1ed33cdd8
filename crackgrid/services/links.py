"""
Document link helpers.

Interview documents are Google Docs shared by students. The viewer embeds a
preview variant of the link; anything that is not a recognizable Docs link
is passed through untouched.
"""

import re
from typing import Optional

from crackgrid import config

# Document id token in ".../d/<id>/edit" style links
DOC_ID_PATTERN = re.compile(r"/d/([A-Za-z0-9_-]+)")


def extract_doc_id(doc_url: str) -> Optional[str]:
    """Return the document id in `doc_url`, or None."""
    if not doc_url:
        return None
    match = DOC_ID_PATTERN.search(doc_url)
    return match.group(1) if match else None


def embed_url(doc_url: str) -> str:
    """
    Convert a shareable document link into its preview-embeddable form.

    Examples:
        https://docs.google.com/document/d/abc123/edit?usp=sharing
            -> https://docs.google.com/document/d/abc123/preview
        https://example.com/questions.pdf
            -> https://example.com/questions.pdf
    """
    if not doc_url:
        return ""

    doc_id = extract_doc_id(doc_url)
    if doc_id:
        return config.PREVIEW_URL_TEMPLATE.format(doc_id=doc_id)
    return doc_url
