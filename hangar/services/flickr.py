"""
Flickr image search for aircraft photos.

Best-effort enrichment: every failure (missing key, timeout, HTTP error,
provider error status) yields an empty list. Results, empty ones included,
are cached in an injected TTLCache so repeated lookups for the same airframe
do not burn API quota.
"""

import logging
from typing import Optional, List

import requests

from hangar.cache import TTLCache
from hangar.codes import aircraft_manufacturer
from hangar.config import config

logger = logging.getLogger(__name__)

PHOTO_URL_EXTRAS = 'url_m,url_l,url_o,owner_name,license'

# Flickr license ids -> short names
FLICKR_LICENSES = {
    '0': 'All Rights Reserved',
    '1': 'CC BY-NC-SA 2.0',
    '2': 'CC BY-NC 2.0',
    '3': 'CC BY-NC-ND 2.0',
    '4': 'CC BY 2.0',
    '5': 'CC BY-SA 2.0',
    '6': 'CC BY-ND 2.0',
    '7': 'No known copyright restrictions',
    '9': 'CC0 1.0',
    '10': 'Public Domain Mark',
}


class FlickrClient:
    """
    Searches Flickr for photos of an aircraft.

    Args:
        api_key: Flickr API key (defaults to FLICKR_API_KEY)
        cache: Cache with get/set/invalidate (defaults to a fresh TTLCache)
        session: Optional requests.Session (injected in tests)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        cache: Optional[TTLCache] = None,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key or config.flickr.api_key
        self.base_url = config.flickr.base_url
        self.cache = cache if cache is not None else TTLCache()
        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': config.http.user_agent})

        if not self.api_key:
            logger.warning('Flickr API key not configured. Aircraft images will not be available.')

    @staticmethod
    def get_cache_key(
        registration: Optional[str] = None,
        aircraft_type: Optional[str] = None,
        airline: Optional[str] = None,
    ) -> str:
        key = '|'.join(part for part in (registration, aircraft_type, airline) if part).lower()
        return f'flickr:{key}'

    def clear_cached_result(
        self,
        registration: Optional[str] = None,
        aircraft_type: Optional[str] = None,
        airline: Optional[str] = None,
    ) -> bool:
        """Drop one cached search so the next call hits the API."""
        cache_key = self.get_cache_key(registration, aircraft_type, airline)
        deleted = self.cache.invalidate(cache_key)
        if deleted:
            logger.info(f'Cleared cached result for key: {cache_key}')
        return deleted

    @staticmethod
    def build_query(
        registration: Optional[str] = None,
        aircraft_type: Optional[str] = None,
        airline: Optional[str] = None,
    ) -> str:
        terms = []
        if registration:
            terms.append(registration)
        if aircraft_type:
            terms.append(aircraft_type)
            manufacturer = aircraft_manufacturer(aircraft_type)
            if manufacturer and manufacturer.lower() not in aircraft_type.lower():
                terms.append(manufacturer)
        if airline:
            terms.append(airline)
        return ' '.join(terms)

    def search_aircraft_images(
        self,
        registration: Optional[str] = None,
        aircraft_type: Optional[str] = None,
        airline: Optional[str] = None,
    ) -> List[dict]:
        """
        Search for photos matching registration, type and airline.

        Returns up to max_results dicts with id, url, thumbnail, title,
        source, attribution and license. Never raises.
        """
        if not self.api_key:
            logger.warning('No Flickr API key available, returning empty results')
            return []

        cache_key = self.get_cache_key(registration, aircraft_type, airline)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.info(f'Cache hit for key: {cache_key}')
            return cached

        query = self.build_query(registration, aircraft_type, airline)
        if not query:
            return []

        logger.info(f'Searching Flickr for: "{query}"')
        params = {
            'method': 'flickr.photos.search',
            'api_key': self.api_key,
            'text': query,
            'format': 'json',
            'nojsoncallback': 1,
            'per_page': config.flickr.per_page,
            'page': 1,
            'extras': PHOTO_URL_EXTRAS,
            'safe_search': 1,
            'content_type': 1,
            'media': 'photos',
            'sort': 'relevance',
        }

        try:
            response = self.session.get(self.base_url, params=params, timeout=config.http.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except requests.Timeout:
            logger.error('Flickr API timeout')
            data = None
        except requests.RequestException as e:
            logger.error(f'Flickr API request failed: {e}')
            data = None
        except ValueError:
            logger.error('Flickr API returned invalid JSON')
            data = None

        if not isinstance(data, dict) or data.get('stat') != 'ok':
            if isinstance(data, dict):
                logger.warning(f'Flickr API returned error: {data.get("message", "unknown error")}')
            # Cache the miss so a failing provider is not hammered
            self.cache.set(cache_key, [])
            return []

        result = self._process_response(data, query)
        self.cache.set(cache_key, result)
        return result

    def _process_response(self, data: dict, query: str) -> List[dict]:
        photos = (data.get('photos') or {}).get('photo') or []
        if not photos:
            logger.info(f'No photos found for search query: {query}')
            return []

        logger.info(f'Found {len(photos)} photos for query: {query}')
        result = []
        for photo in photos:
            url = photo.get('url_o') or photo.get('url_l') or photo.get('url_m')
            if not url:
                continue
            owner = photo.get('ownername')
            result.append({
                'id': str(photo.get('id')),
                'title': photo.get('title'),
                'url': url,
                'thumbnail': photo.get('url_m') or self.construct_photo_url(photo),
                'source': 'flickr',
                'attribution': f'Photo by {owner}' if owner else None,
                'license': FLICKR_LICENSES.get(str(photo.get('license')), 'Unknown'),
            })
            if len(result) >= config.flickr.max_results:
                break
        return result

    @staticmethod
    def construct_photo_url(photo: dict, size: str = 'm') -> str:
        return (
            f'https://farm{photo.get("farm")}.staticflickr.com/'
            f'{photo.get("server")}/{photo.get("id")}_{photo.get("secret")}_{size}.jpg'
        )
