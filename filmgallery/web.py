"""
Gallery web app - Thin Bottle routes over GalleryReader.

Any failure to produce an album is a plain 404; no internal detail leaves
the server.
"""

import logging
from typing import Optional

from bottle import Bottle, HTTPResponse, abort, redirect

from .errors import GalleryError
from .keys import RENDITION_DIRS
from .reader import GalleryReader

RENDITION_BY_DIR = {directory: name for name, directory in RENDITION_DIRS.items()}


class GalleryRoutes:
    """
    Request handlers, kept separate from routing so they can be called directly.
    """

    def __init__(self, reader: GalleryReader, logger: Optional[logging.Logger] = None):
        self.reader = reader
        self.logger = logger or logging.getLogger(__name__)

    def manifest(self, album_id: str) -> dict:
        """GET /gallery/<album_id>/manifest.json"""
        try:
            return self.reader.load_album(album_id).to_dict()
        except GalleryError as e:
            self.logger.debug(f"Manifest request failed: {e}")
            abort(404, "Album not found")

    def image(self, album_id: str, directory: str, image_id: str) -> HTTPResponse:
        """GET /gallery/<album_id>/<thumbnails|previews|originals>/<image_id>.jpg"""
        rendition_class = RENDITION_BY_DIR.get(directory)
        if rendition_class is None:
            abort(404, "Not found")
        try:
            data = self.reader.fetch_rendition(album_id, rendition_class, image_id)
        except GalleryError as e:
            self.logger.debug(f"Image request failed: {e}")
            abort(404, "Not found")

        response = HTTPResponse(body=data)
        response.set_header('Content-Type', 'image/jpeg')
        response.set_header('Content-Length', str(len(data)))
        response.set_header('Cache-Control', 'private, max-age=31536000, immutable')
        return response

    def download(self, album_id: str, image_id: str) -> None:
        """GET /gallery/<album_id>/download/<image_id>: redirect to a signed URL."""
        try:
            url = self.reader.download_url(album_id, image_id)
        except GalleryError as e:
            self.logger.debug(f"Download request failed: {e}")
            abort(404, "Not found")
        redirect(url)


def create_app(reader: GalleryReader, logger: Optional[logging.Logger] = None) -> Bottle:
    """Build the Bottle application serving albums through reader."""
    routes = GalleryRoutes(reader, logger)
    app = Bottle()
    app.route('/gallery/<album_id>/manifest.json', 'GET', routes.manifest)
    app.route('/gallery/<album_id>/download/<image_id>', 'GET', routes.download)
    app.route('/gallery/<album_id>/<directory>/<image_id>.jpg', 'GET', routes.image)
    return app
