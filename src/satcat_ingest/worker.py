from __future__ import annotations

import logging
import queue

from .dedup import DedupOracle
from .extract import (
    CategoryRef,
    extract_category_page,
    extract_description_page,
    extract_main,
)
from .http_client import FetchError, HttpClient, NotFoundError
from .records import CategoryResult, ImageRecord, Message, SatelliteRecord
from .urls import (
    DEFAULT_THUMBNAIL_URL_TEMPLATE,
    category_page_url,
    detail_page_url,
    image_basename,
    thumbnail_url,
)

LOGGER = logging.getLogger(__name__)


class SatelliteWorker:
    """Fetch-and-extract sequence for one identifier.

    Steps run strictly in order and every failure is absorbed into an empty
    value for the affected sub-item. The satellite record is always the
    last message a call to :meth:`run` puts on the results queue.
    """

    def __init__(
        self,
        *,
        http: HttpClient,
        oracle: DedupOracle,
        results: queue.Queue[Message],
        thumbnail_url_template: str = DEFAULT_THUMBNAIL_URL_TEMPLATE,
    ) -> None:
        self.http = http
        self.oracle = oracle
        self.results = results
        self.thumbnail_url_template = thumbnail_url_template

    def run(self, norad_id: int) -> SatelliteRecord:
        satellite = SatelliteRecord(norad_id=norad_id)
        try:
            self._pull(satellite)
        finally:
            self.results.put(satellite)
        return satellite

    def _pull(self, satellite: SatelliteRecord) -> None:
        norad_id = satellite.norad_id
        url = detail_page_url(norad_id)
        try:
            res = self.http.get(url)
        except FetchError as e:
            LOGGER.warning("Detail page for %d unavailable: %s", norad_id, e)
            return

        main = extract_main(res.text, page_url=res.final_url or res.url)

        for ref in main.category_refs:
            self._pull_category(ref)
            satellite.category_ids.append(ref.category_id)

        if main.description_page_url is None:
            LOGGER.debug("No description link for %d", norad_id)
        elif self.oracle.satellite_description_exists(norad_id):
            LOGGER.debug("Description for %d already stored", norad_id)
        else:
            self._pull_description(satellite, main.description_page_url)

        self._pull_thumbnail(satellite)

    def _pull_category(self, ref: CategoryRef) -> None:
        if not self.oracle.claim_category(ref.category_id):
            return
        url = category_page_url(ref.url)
        try:
            res = self.http.get(url)
        except FetchError as e:
            LOGGER.warning("Category %d page unavailable: %s", ref.category_id, e)
            description = ""
        else:
            description = extract_category_page(res.text)
        self.results.put(CategoryResult({ref.category_id: description}))

    def _pull_description(self, satellite: SatelliteRecord, url: str) -> None:
        try:
            res = self.http.get(url)
        except FetchError as e:
            LOGGER.warning(
                "Description page for %d unavailable: %s", satellite.norad_id, e
            )
            return

        page = extract_description_page(res.text, page_url=res.final_url or res.url)
        satellite.description = page.description

        for image_url in page.image_urls:
            self._pull_image(satellite, image_url)

    def _pull_image(self, satellite: SatelliteRecord, url: str) -> bool:
        basename = image_basename(url)
        if not self.oracle.claim_image(satellite.norad_id, basename):
            return False
        try:
            res = self.http.get_ok(url)
        except NotFoundError:
            LOGGER.debug("No image at %s", url)
            return False
        except FetchError as e:
            LOGGER.warning("Image %s unavailable: %s", url, e)
            return False

        image = ImageRecord(
            owner_id=satellite.norad_id,
            basename=basename,
            payload=res.body,
            source_url=res.url,
        )
        satellite.images.append(image)
        self.results.put(image)
        return True

    def _pull_thumbnail(self, satellite: SatelliteRecord) -> bool:
        url = thumbnail_url(satellite.norad_id, self.thumbnail_url_template)
        return self._pull_image(satellite, url)
