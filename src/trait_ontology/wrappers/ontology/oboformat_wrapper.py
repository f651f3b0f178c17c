"""Read OBO format files."""
import logging
from collections import Counter
from dataclasses import dataclass
from typing import ClassVar, Dict, Iterator

from trait_ontology.formats.obo import parse_stanzas
from trait_ontology.wrappers.base_wrapper import BaseWrapper

logger = logging.getLogger(__name__)


@dataclass
class OBOFormatWrapper(BaseWrapper):
    """
    A wrapper over a file in OBO Format.

    Each stanza is yielded as a dict of tag -> list of values, e.g.

    ```json
    {"type": "Term", "id": ["CO_360:0000045"], "namespace": ["sugar_kelp_variable"], ...}
    ```
    """

    name: ClassVar[str] = "oboformat"

    def objects(self, **kwargs) -> Iterator[Dict]:
        """
        Yield all stanzas in the file.

        :return:
        """
        for stanza in parse_stanzas(self.read_text()):
            yield {"type": stanza.stanza_type, **stanza.tags}

    def namespace_counts(self) -> Counter:
        """Number of stanzas declared in each namespace."""
        counts = Counter()
        for obj in self.objects():
            for namespace in obj.get("namespace", []):
                counts[namespace] += 1
        return counts
