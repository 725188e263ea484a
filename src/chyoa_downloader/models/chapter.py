"""Pydantic models for chapters as they move through the pipeline."""

import json
from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field


class Chapter(BaseModel):
    """One chapter page as read from the site.

    Produced by the fetcher from a single page load and never modified
    afterwards; later stages derive new values from it.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Canonical chapter URL")
    title: str = Field(..., description="Sanitized chapter title")
    body_html: str = Field(default="", description="Inner HTML of the chapter content container")
    image_urls: list[str] = Field(
        default_factory=list, description="Absolute URLs of story images in the body"
    )
    parent_url: str | None = Field(None, description="URL of the previous chapter, if any")


class LocalImage(BaseModel):
    """Outcome of localizing one image URL."""

    model_config = ConfigDict(frozen=True)

    url: str
    filename: str | None = None
    reference: str = Field(..., description="Relative file path or data URI used in the body")

    @property
    def embedded(self) -> bool:
        return self.reference.startswith("data:")


class LocalizedChapter(BaseModel):
    """A chapter whose image references point at local files or data URIs."""

    model_config = ConfigDict(frozen=True)

    source: Chapter
    body_html: str
    images: list[LocalImage] = Field(default_factory=list)

    @property
    def title(self) -> str:
        return self.source.title

    @property
    def url(self) -> str:
        return self.source.url


class RenderedChapter(BaseModel):
    """Rendered chapter linked to the chapter that follows it.

    The ancestor chain never branches, so the JSON export is modelled as a
    singly-linked list and only expressed as nested ``children`` arrays when
    serialized.
    """

    model_config = ConfigDict(frozen=True)

    title: str
    author: str | None = None
    content: str
    next: "RenderedChapter | None" = None

    @classmethod
    def link(cls, chapters: list["RenderedChapter"]) -> "RenderedChapter | None":
        """Chain ``chapters`` in order and return the head of the list."""
        head: RenderedChapter | None = None
        for chapter in reversed(chapters):
            head = chapter.model_copy(update={"next": head})
        return head

    def nodes(self) -> Iterator["RenderedChapter"]:
        """Yield this node and every node after it."""
        node: RenderedChapter | None = self
        while node is not None:
            yield node
            node = node.next

    def length(self) -> int:
        """Number of chapters from this node to the tail."""
        return sum(1 for _ in self.nodes())

    def to_json(self) -> str:
        """Serialize as nested ``{title, author?, content, children?}`` JSON.

        Written in one pass down the chain and closed in one go, so the
        depth of the nesting never touches the interpreter stack.
        """
        lines: list[str] = []
        open_nodes = 0
        for node in self.nodes():
            fields = {"title": node.title}
            if node.author:
                fields["author"] = node.author
            fields["content"] = node.content
            encoded = json.dumps(fields, ensure_ascii=False)
            if node.next is None:
                lines.append(encoded)
            else:
                lines.append(f'{encoded[:-1]}, "children": [')
                open_nodes += 1
        if open_nodes:
            lines.append("]}" * open_nodes)
        return "\n".join(lines)


# Enable forward references for the recursive RenderedChapter model
RenderedChapter.model_rebuild()
