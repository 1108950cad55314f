"""Law XML to EPUB transformer implementing the transformer port."""

from __future__ import annotations

import io
import logging
import re
import zipfile
from dataclasses import dataclass, field
from datetime import date, datetime
from types import ModuleType
from typing import Any

from epub_converter.application.options import TransformOptions
from epub_converter.errors import DependencyError, TransformError
from epub_converter.schemas import LawRevision

logger = logging.getLogger(__name__)

BOOK_LANGUAGE = "ja"

# Structural containers of a law body and the child holding their heading.
_DIVISION_TITLES: dict[str, tuple[str, str]] = {
    "Part": ("PartTitle", "h2"),
    "Chapter": ("ChapterTitle", "h2"),
    "Section": ("SectionTitle", "h3"),
    "Subsection": ("SubsectionTitle", "h4"),
    "Division": ("DivisionTitle", "h5"),
}
_CHAPTER_TAGS = ("Part", "Chapter")
_CONTAINER_TAGS = frozenset({"MainProvision", "SupplProvision", "Preamble"})
_LAYOUT_WHITESPACE = re.compile(r"\s*\n\s*")
# Zip timestamps cannot predate 1980.
_ARCHIVE_DATE_TIME = (1980, 1, 1, 0, 0, 0)
_DEFAULT_MODIFIED = datetime(*_ARCHIVE_DATE_TIME)


def _load_backends() -> tuple[ModuleType, ModuleType]:
    """Import lxml and ebooklib on first use."""
    try:
        from lxml import etree
    except ModuleNotFoundError as exc:
        raise DependencyError(
            "lxml is required for EPUB generation. Install extra: .[epub]"
        ) from exc
    try:
        from ebooklib import epub
    except ModuleNotFoundError as exc:
        raise DependencyError(
            "ebooklib is required for EPUB generation. Install extra: .[epub]"
        ) from exc
    return etree, epub


def _is_element(node: Any) -> bool:
    return isinstance(node.tag, str)


def _text(node: Any | None) -> str:
    if node is None:
        return ""
    return _LAYOUT_WHITESPACE.sub("", "".join(node.itertext())).strip()


def _modified_time(revision: RevisionContext | None) -> datetime:
    """Return the ``dcterms:modified`` value, derived from content only."""
    if revision is not None and revision.revision.amendment_enforcement_date:
        try:
            enforced = date.fromisoformat(revision.revision.amendment_enforcement_date)
        except ValueError:
            return _DEFAULT_MODIFIED
        return datetime(enforced.year, enforced.month, enforced.day)
    return _DEFAULT_MODIFIED


def _normalize_archive(data: bytes) -> bytes:
    """Rewrite an EPUB container with fixed entry timestamps.

    ``mimetype`` stays first and uncompressed; entry order is preserved.
    """
    output = io.BytesIO()
    with (
        zipfile.ZipFile(io.BytesIO(data)) as source,
        zipfile.ZipFile(output, "w") as target,
    ):
        for name in source.namelist():
            info = zipfile.ZipInfo(name, date_time=_ARCHIVE_DATE_TIME)
            info.compress_type = (
                zipfile.ZIP_STORED if name == "mimetype" else zipfile.ZIP_DEFLATED
            )
            info.external_attr = 0o644 << 16
            target.writestr(info, source.read(name))
    return output.getvalue()


@dataclass
class LawDocument:
    """Law content split into EPUB-sized sections."""

    title: str
    law_num: str
    front_matter: list[Any] = field(default_factory=list)
    chapters: list[tuple[str, list[Any]]] = field(default_factory=list)


@dataclass(frozen=True)
class RevisionContext:
    """Revision metadata resolved from the law source."""

    revision_id: str
    revision: LawRevision


class _XhtmlRenderer:
    """Render law XML elements as XHTML fragments."""

    def __init__(self, etree: ModuleType) -> None:
        self.etree = etree

    def render(self, heading: str, nodes: list[Any]) -> str:
        root = self.etree.Element("div", {"class": "law"})
        # Divisions render their own title.
        if heading and not (nodes and nodes[0].tag in _DIVISION_TITLES):
            self.etree.SubElement(root, "h1").text = heading
        for node in nodes:
            self._block(node, root)
        return self.etree.tostring(root, encoding="unicode", method="xml")

    def _block(self, node: Any, parent: Any) -> None:
        if not _is_element(node):
            return
        tag = node.tag
        if tag in _DIVISION_TITLES:
            title_tag, heading = _DIVISION_TITLES[tag]
            title = _text(node.find(title_tag))
            if title:
                self.etree.SubElement(parent, heading).text = title
            for child in node:
                if _is_element(child) and child.tag != title_tag:
                    self._block(child, parent)
        elif tag in _CONTAINER_TAGS:
            for child in node:
                self._block(child, parent)
        elif tag == "Article":
            self._article(node, parent)
        elif tag == "Paragraph":
            self._paragraph(node, parent)
        elif tag in {"SupplProvisionLabel", "LawTitle", "LawNum", "TOC"}:
            return
        elif tag.endswith("Title"):
            text = _text(node)
            if text:
                self.etree.SubElement(parent, "h3").text = text
        else:
            text = _text(node)
            if text:
                self.etree.SubElement(parent, "p").text = text

    def _article(self, node: Any, parent: Any) -> None:
        section = self.etree.SubElement(parent, "div", {"class": "article"})
        caption = _text(node.find("ArticleCaption"))
        title = _text(node.find("ArticleTitle"))
        if caption:
            self.etree.SubElement(section, "p", {"class": "caption"}).text = caption
        heading = self.etree.SubElement(section, "h4")
        heading.text = title
        for child in node:
            if not _is_element(child) or child.tag in {"ArticleCaption", "ArticleTitle"}:
                continue
            self._block(child, section)

    def _paragraph(self, node: Any, parent: Any) -> None:
        number = _text(node.find("ParagraphNum"))
        sentence = _text(node.find("ParagraphSentence"))
        paragraph = self.etree.SubElement(parent, "p", {"class": "paragraph"})
        paragraph.text = f"{number}　{sentence}" if number else sentence
        items = [child for child in node if _is_element(child) and child.tag == "Item"]
        if items:
            self._items(items, parent)
        for child in node:
            if _is_element(child) and child.tag in {"TableStruct", "FigStruct", "List"}:
                self._block(child, parent)

    def _items(self, items: list[Any], parent: Any) -> None:
        listing = self.etree.SubElement(parent, "ul", {"class": "items"})
        for item in items:
            title = ""
            sentence = ""
            children: list[Any] = []
            for child in item:
                if not _is_element(child):
                    continue
                if child.tag.endswith("Title"):
                    title = _text(child)
                elif child.tag.endswith("Sentence"):
                    sentence = _text(child)
                elif child.tag.startswith("Subitem"):
                    children.append(child)
            entry = self.etree.SubElement(listing, "li")
            entry.text = f"{title}　{sentence}" if title else sentence
            if children:
                self._items(children, entry)


class LawXmlEpubTransformer:
    """Build an EPUB from e-Gov standard law XML.

    Packaging is delegated to ``ebooklib``; this adapter only maps the law
    structure (main provision parts/chapters and supplementary provisions)
    to XHTML chapters.
    """

    def transform(self, content: bytes, options: TransformOptions) -> bytes:
        """Return EPUB bytes for ``content``.

        Parameters
        ----------
        content : bytes
            Law XML without the temporary root wrapper.
        options : TransformOptions
            Optional revision context.

        Returns
        -------
        bytes
            Packaged EPUB container.

        Raises
        ------
        TransformError
            If the XML is malformed, has no ``<Law>`` element, or the
            requested revision cannot be resolved.
        DependencyError
            If lxml or ebooklib is missing.
        """
        etree, epub = _load_backends()
        document = self.parse(content, etree)
        revision = self.resolve_revision(options)
        book = self.build_book(document, revision, etree, epub)

        buffer = io.BytesIO()
        epub.write_epub(buffer, book, {"mtime": _modified_time(revision)})
        return _normalize_archive(buffer.getvalue())

    def parse(self, content: bytes, etree: ModuleType) -> LawDocument:
        """Split law XML into front matter and chapters."""
        parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)
        try:
            root = etree.fromstring(content, parser=parser)
        except etree.XMLSyntaxError as exc:
            raise TransformError(f"invalid law XML: {exc}") from exc
        etree.strip_elements(root, "Rt", with_tail=False)

        law = root if root.tag == "Law" else root.find(".//Law")
        if law is None:
            raise TransformError("law XML has no <Law> element")
        body = law.find("LawBody")
        if body is None:
            raise TransformError("law XML has no <LawBody> element")

        document = LawDocument(
            title=_text(body.find("LawTitle")) or _text(law.find("LawNum")),
            law_num=_text(law.find("LawNum")),
        )
        for child in body:
            if not _is_element(child):
                continue
            if child.tag in {"EnactStatement", "Preamble"}:
                document.front_matter.append(child)
            elif child.tag == "MainProvision":
                document.chapters.extend(self._main_provision_chapters(child))
            elif child.tag == "SupplProvision":
                document.chapters.append(self._suppl_provision_chapter(child))
            elif child.tag.startswith("Appdx"):
                label = _text(child.find(f"{child.tag}Title")) or "別表"
                document.chapters.append((label, [child]))
        return document

    def resolve_revision(self, options: TransformOptions) -> RevisionContext | None:
        """Look up the requested revision through the law source."""
        revision_id = options.revision_id
        source = options.source
        if revision_id is None or source is None:
            return None
        law_id = revision_id.split("_", 1)[0]
        try:
            revisions = source.get_law_revisions(law_id)
        except Exception as exc:
            raise TransformError(
                f"failed to resolve revision {revision_id}: {exc}"
            ) from exc
        for revision in revisions:
            if revision.law_revision_id == revision_id:
                return RevisionContext(revision_id=revision_id, revision=revision)
        raise TransformError(f"revision {revision_id} not found for law {law_id}")

    def build_book(
        self,
        document: LawDocument,
        revision: RevisionContext | None,
        etree: ModuleType,
        epub: ModuleType,
    ) -> Any:
        """Assemble the ``ebooklib`` book object."""
        renderer = _XhtmlRenderer(etree)
        title = document.title
        if revision is not None and revision.revision.law_title:
            title = revision.revision.law_title

        book = epub.EpubBook()
        book.set_identifier(
            revision.revision_id if revision else (document.law_num or title)
        )
        book.set_title(title)
        book.set_language(BOOK_LANGUAGE)
        description = self._description(document, revision)
        if description:
            book.add_metadata("DC", "description", description)
        if revision is not None and revision.revision.amendment_enforcement_date:
            book.add_metadata("DC", "date", revision.revision.amendment_enforcement_date)

        cover = epub.EpubHtml(title=title, file_name="title.xhtml", lang=BOOK_LANGUAGE)
        cover.content = self._title_page(renderer, document, description)
        pages = [cover]
        for index, (heading, nodes) in enumerate(document.chapters, start=1):
            page = epub.EpubHtml(
                title=heading, file_name=f"chap_{index:03d}.xhtml", lang=BOOK_LANGUAGE
            )
            page.content = renderer.render(heading, nodes)
            pages.append(page)

        for page in pages:
            book.add_item(page)
        book.toc = tuple(pages)
        book.add_item(epub.EpubNcx())
        book.add_item(epub.EpubNav())
        book.spine = ["nav", *pages]
        logger.debug("Built EPUB %r with %d chapters", title, len(pages) - 1)
        return book

    @staticmethod
    def _main_provision_chapters(node: Any) -> list[tuple[str, list[Any]]]:
        chapters = [
            child for child in node if _is_element(child) and child.tag in _CHAPTER_TAGS
        ]
        if not chapters:
            return [("本則", [node])]
        return [
            (_text(child.find(_DIVISION_TITLES[child.tag][0])) or child.tag, [child])
            for child in chapters
        ]

    @staticmethod
    def _suppl_provision_chapter(node: Any) -> tuple[str, list[Any]]:
        label = _text(node.find("SupplProvisionLabel")) or "附則"
        amend_law_num = node.get("AmendLawNum")
        if amend_law_num:
            label = f"{label}（{amend_law_num}）"
        return label, [node]

    @staticmethod
    def _description(document: LawDocument, revision: RevisionContext | None) -> str:
        parts = [document.law_num] if document.law_num else []
        if revision is not None:
            info = revision.revision
            if info.amendment_law_title:
                parts.append(f"改正: {info.amendment_law_title}")
            if info.amendment_enforcement_date:
                parts.append(f"施行日: {info.amendment_enforcement_date}")
        return " / ".join(parts)

    @staticmethod
    def _title_page(
        renderer: _XhtmlRenderer, document: LawDocument, description: str
    ) -> str:
        root = renderer.etree.Element("div", {"class": "title-page"})
        renderer.etree.SubElement(root, "h1").text = document.title
        if description:
            renderer.etree.SubElement(root, "p").text = description
        for node in document.front_matter:
            renderer.etree.SubElement(root, "p").text = _text(node)
        return renderer.etree.tostring(root, encoding="unicode", method="xml")
