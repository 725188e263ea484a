"""Image localization: download, convert, and rewrite image references."""

import base64
import logging
import re

from ..client.base import PageSource
from ..models import Chapter, ExportConfig, LocalImage, LocalizedChapter
from ..models.config import IMAGES_DIR
from ..utils.exceptions import ImageError
from ..utils.text import (
    filename_from_url,
    is_placeholder_image,
    mime_type_for,
    sanitize_filename,
    swap_extension,
)
from .transcode import extension_for, mime_type_for_format, transcode


logger = logging.getLogger(__name__)


def substitute_reference(body_html: str, url: str, reference: str) -> str:
    """Replace ``url`` where it is a whole quoted attribute value in ``body_html``.

    Serialized attributes escape ``&`` as ``&amp;``, so that spelling of
    the URL is replaced as well. A longer URL that merely starts with
    ``url`` is left alone.
    """
    spellings = {url, url.replace("&", "&amp;")}
    alternatives = "|".join(re.escape(spelling) for spelling in spellings)
    pattern = re.compile(f"([\"'])(?:{alternatives})\\1")
    return pattern.sub(lambda match: f"{match.group(1)}{reference}{match.group(1)}", body_html)


class ImageLocalizer:
    """Downloads a chapter's images and points the body at the local copies.

    Images are fetched one at a time through the run's page source. A
    failure on one image is logged and the rest continue.
    """

    def __init__(self, source: PageSource, config: ExportConfig):
        """Initialize the localizer.

        Args:
            source: Page source carrying the authenticated session
            config: Export configuration (image mode, conversion, output paths)
        """
        self.source = source
        self.config = config

    def _convert(self, data: bytes, filename: str) -> tuple[bytes, str, str]:
        """Apply format conversion if enabled.

        Returns:
            Tuple of (bytes, filename, mime_type); the original bytes and
            filename are kept when conversion is off or fails
        """
        if not self.config.convert_images:
            return data, filename, mime_type_for(filename)

        try:
            converted = transcode(data, self.config.image_format, self.config.image_quality)
        except ImageError as e:
            logger.warning("%s; keeping original %s", e, filename)
            return data, filename, mime_type_for(filename)

        target = swap_extension(filename, extension_for(self.config.image_format))
        return converted, target, mime_type_for_format(self.config.image_format)

    def _write(self, data: bytes, filename: str) -> None:
        images_dir = self.config.images_dir
        try:
            images_dir.mkdir(parents=True, exist_ok=True)
            (images_dir / filename).write_bytes(data)
        except OSError as e:
            raise ImageError(f"Failed to write image {filename}: {e}") from e

    async def _localize_one(self, url: str, filename: str) -> LocalImage:
        """Fetch, convert and store (or embed) a single image.

        Raises:
            ImageError: If any step fails
        """
        data = await self.source.get_bytes(url)
        data, filename, mime_type = self._convert(data, filename)

        if self.config.embed_images:
            encoded = base64.b64encode(data).decode("ascii")
            logger.info("Embedded image as base64 (%d bytes -> %d chars)", len(data), len(encoded))
            return LocalImage(url=url, reference=f"data:{mime_type};base64,{encoded}")

        self._write(data, filename)
        logger.info("Downloaded image: %s (%d bytes)", filename, len(data))
        return LocalImage(url=url, filename=filename, reference=f"{IMAGES_DIR}/{filename}")

    async def localize(self, chapter: Chapter) -> LocalizedChapter:
        """Localize every image of ``chapter``.

        Images are deduplicated by filename: a URL seen twice is fetched
        once and every occurrence gets the same reference. Placeholder
        images are never fetched and keep their original reference.

        Args:
            chapter: Chapter as fetched

        Returns:
            New LocalizedChapter; ``chapter`` itself is left untouched
        """
        body_html = chapter.body_html
        if not chapter.image_urls:
            return LocalizedChapter(source=chapter, body_html=body_html)

        logger.info("Processing %d images for %r", len(chapter.image_urls), chapter.title)

        fallback_stem = sanitize_filename(chapter.title) or "image"
        processed: dict[str, LocalImage | None] = {}
        images: list[LocalImage] = []

        for index, url in enumerate(chapter.image_urls):
            if is_placeholder_image(url):
                logger.warning("Protected image detected - skipping placeholder %s", url)
                continue

            filename = filename_from_url(url, f"{fallback_stem}_{index}.jpg")
            if filename in processed:
                previous = processed[filename]
                if previous is not None:
                    body_html = substitute_reference(body_html, url, previous.reference)
                continue

            try:
                local = await self._localize_one(url, filename)
            except ImageError as e:
                logger.warning("Failed to process image %s: %s", url, e)
                processed[filename] = None
                continue

            processed[filename] = local
            images.append(local)
            body_html = substitute_reference(body_html, url, local.reference)

        return LocalizedChapter(source=chapter, body_html=body_html, images=images)
