"""Extract clean law XML from an e-Gov ``law_data`` response."""

from __future__ import annotations

import base64
import binascii
import logging

from epub_converter.errors import (
    ContentMissingError,
    DecodeError,
    FormatMismatchError,
)
from epub_converter.schemas import LawDataResponse

logger = logging.getLogger(__name__)

TMP_ROOT_OPEN = b"<TmpRootTag>"
TMP_ROOT_CLOSE = b"</TmpRootTag>"


def strip_tmp_root(xml: bytes) -> bytes:
    """Remove the ``<TmpRootTag>`` wrapper the API puts around the law XML.

    This is a literal prefix/suffix trim; input without the opening tag is
    returned unchanged.
    """
    if not xml.startswith(TMP_ROOT_OPEN):
        return xml
    return xml.removeprefix(TMP_ROOT_OPEN).removesuffix(TMP_ROOT_CLOSE)


def decode_full_text(encoded: str) -> bytes:
    """Decode standard base64, ignoring line breaks.

    Raises
    ------
    DecodeError
        If the payload contains characters outside the base64 alphabet or is
        badly padded.
    """
    compact = encoded.replace("\r", "").replace("\n", "")
    try:
        return base64.b64decode(compact, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise DecodeError(f"error decoding XML content: {exc}") from exc


def extract_xml_content(response: LawDataResponse, document_id: str = "") -> bytes:
    """Return the law XML carried by ``response`` ready for transformation.

    Parameters
    ----------
    response : LawDataResponse
        Parsed ``law_data`` response requested with XML full text.
    document_id : str, default=""
        Identifier used for log context only.

    Returns
    -------
    bytes
        Decoded XML with the temporary root wrapper removed.

    Raises
    ------
    ContentMissingError
        If the response has no full text.
    FormatMismatchError
        If the full text is not a base64 string.
    DecodeError
        If the base64 payload is malformed.
    """
    full_text = response.law_full_text
    if full_text is None:
        raise ContentMissingError("no law content in response")
    if not isinstance(full_text, str):
        raise FormatMismatchError("invalid XML format in response")

    xml = strip_tmp_root(decode_full_text(full_text))
    logger.debug(
        "Decoded XML content length for law ID %s: %d bytes", document_id, len(xml)
    )
    return xml
