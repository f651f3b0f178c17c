"""Base class for views over external trait ontology sources."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import ClassVar, Dict, Iterator, Optional, Union

logger = logging.getLogger(__name__)


@dataclass
class BaseWrapper(ABC):
    """
    A view over some file or remote source of trait ontology data.
    """

    source_locator: Optional[Union[str, Path]] = None

    name: ClassVar[str] = "__base__"

    encoding: ClassVar[str] = "utf-8"

    @abstractmethod
    def objects(self, **kwargs) -> Iterator[Dict]:
        """
        Yield all objects in the source.

        :param kwargs:
        :return:
        """
        raise NotImplementedError

    def read_text(self) -> str:
        """
        Read the whole source file as text.

        :return:
        """
        if self.source_locator is None:
            raise ValueError(f"No source given for {self.name}")
        logger.info(f"Reading {self.source_locator}")
        with open(self.source_locator, encoding=self.encoding) as file:
            return file.read()

    def write_text(self, contents: str, path: Union[str, Path] = None) -> None:
        path = path or self.source_locator
        logger.info(f"Writing {path}")
        with open(path, "w", encoding=self.encoding) as file:
            file.write(contents)
