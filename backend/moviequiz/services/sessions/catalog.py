"""Media catalog adapter: theme -> movie -> frame listings.

The catalog lives in an external media service; this module only reads
it. Listings come back as plain lists so rooms can cache them.
"""
import logging
from typing import Dict, List, Optional, Tuple

import cloudinary
import cloudinary.api

from moviequiz.models import Movie

logger = logging.getLogger(__name__)


class CatalogError(Exception):
    """The media service failed or returned something unusable."""


class CloudinaryCatalog:
    """Reads folders from Cloudinary: <root>/<theme>/<movie>/<frames>."""

    def __init__(self, cloud_name: str, api_key: str, api_secret: str):
        cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    def list_themes(self, root: str) -> List[str]:
        result = cloudinary.api.subfolders(root)
        return [folder['name'] for folder in result['folders']]

    def list_movies(self, root: str, theme: str) -> List[str]:
        result = cloudinary.api.subfolders(f"{root}/{theme}")
        return [folder['name'] for folder in result['folders']]

    def list_frames(self, root: str, theme: str, movie: str) -> List[str]:
        result = cloudinary.api.resources_by_asset_folder(f"{root}/{theme}/{movie}")
        return [r.get('secure_url') or r['url'] for r in result['resources']]


class StaticCatalog:
    """In-memory catalog: ``{theme: {movie: [frame_url, ...]}}``."""

    def __init__(self, data: Optional[Dict[str, Dict[str, List[str]]]] = None):
        self.data = data or {}

    def list_themes(self, root: str) -> List[str]:
        return list(self.data)

    def list_movies(self, root: str, theme: str) -> List[str]:
        return list(self.data[theme])

    def list_frames(self, root: str, theme: str, movie: str) -> List[str]:
        return list(self.data[theme][movie])


class MediaCatalog:
    def __init__(self, backend=None, root: str = ''):
        self.backend = backend
        self.root = root

    def init_app(self, app) -> None:
        cfg = app.config
        self.root = cfg.get('MEDIA_CATALOG_ROOT', 'movie-quiz/themes')
        kind = cfg.get('MEDIA_CATALOG_BACKEND', 'cloudinary')
        if kind == 'static':
            self.backend = StaticCatalog(cfg.get('MEDIA_CATALOG_STATIC'))
        elif kind == 'cloudinary':
            self.backend = CloudinaryCatalog(
                cfg.get('CLOUDINARY_CLOUD_NAME', ''),
                cfg.get('CLOUDINARY_API_KEY', ''),
                cfg.get('CLOUDINARY_API_SECRET', ''),
            )
        else:
            raise ValueError(f"Unknown MEDIA_CATALOG_BACKEND: {kind}")
        app.extensions['moviequiz_catalog'] = self

    def _call(self, name: str, *args):
        if self.backend is None:
            raise CatalogError('media catalog is not configured')
        try:
            result = getattr(self.backend, name)(self.root, *args)
        except Exception as exc:
            raise CatalogError(f"{name}{args} failed: {exc}") from exc
        if not isinstance(result, list):
            raise CatalogError(f"{name}{args} returned {type(result).__name__}, expected list")
        return result

    def load_theme_map(self) -> Tuple[Dict[str, List[Movie]], bool]:
        """Fetch every theme and its movies.

        A failing theme keeps an empty movie list and marks the map as
        incomplete; a failure to list the themes themselves raises
        ``CatalogError``.
        """
        themes: Dict[str, List[Movie]] = {}
        complete = True
        for theme in self._call('list_themes'):
            try:
                names = self._call('list_movies', theme)
            except CatalogError as exc:
                logger.warning(f"[catalog-fail] theme={theme!r}: {exc}")
                themes[theme] = []
                complete = False
                continue
            themes[theme] = [Movie(name=name, index=i) for i, name in enumerate(names)]
        logger.info(f"[catalog-load] themes={len(themes)} complete={complete}")
        return themes, complete

    def fetch_frames(self, theme: str, movie: str) -> Optional[List[str]]:
        try:
            return self._call('list_frames', theme, movie)
        except CatalogError as exc:
            logger.warning(f"[catalog-fail] frames {theme!r}/{movie!r}: {exc}")
            return None
