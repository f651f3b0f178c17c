"""Fetch trait dictionaries from the Crop Ontology registry."""
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import ClassVar, Dict, Iterator

import requests
import requests_cache

from trait_ontology.formats.dictionary import parse_dictionary
from trait_ontology.model.records import CategoryCounter
from trait_ontology.wrappers.base_wrapper import BaseWrapper

logger = logging.getLogger(__name__)

DOWNLOAD_URL = "https://www.cropontology.org/report?ontology_id={root_id}"


@dataclass
class CropOntologyWrapper(BaseWrapper):
    """
    A wrapper over a Crop Ontology trait dictionary.

    The source locator is either the path to a trait dictionary file or
    a Crop Ontology root id (e.g. CO_360), in which case the dictionary is
    downloaded from cropontology.org.
    """

    name: ClassVar[str] = "cropontology"

    cache_name: ClassVar[str] = "cropontology_requests"

    session: requests.Session = field(default_factory=lambda: requests.Session())

    counter: CategoryCounter = field(default_factory=CategoryCounter)
    """Accumulates the highest scale category index of the parsed rows"""

    def set_cache(self, name: str = None) -> None:
        self.session = requests_cache.CachedSession(name or self.cache_name)

    def is_local(self) -> bool:
        path = Path(str(self.source_locator))
        return path.is_file() and path.stat().st_size > 0

    def fetch(self, root_id: str) -> str:
        """
        Download the trait dictionary of an ontology.

        :param root_id: Crop Ontology root id
        :return: dictionary text
        """
        url = DOWNLOAD_URL.format(root_id=root_id)
        logger.info(f"Downloading Trait Dictionary [{url}]...")
        response = self.session.get(url)
        response.raise_for_status()
        return response.text

    def dictionary_text(self) -> str:
        if self.is_local():
            return self.read_text()
        return self.fetch(str(self.source_locator))

    def objects(self, **kwargs) -> Iterator[Dict]:
        """
        Yield the parsed rows of the trait dictionary.

        :return:
        """
        yield from parse_dictionary(self.dictionary_text(), self.counter)
