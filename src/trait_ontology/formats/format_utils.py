from datetime import datetime
from typing import List, Optional

ID_LENGTH = 7
"""Width of the numeric part of a Crop Ontology id"""


def generate_id(root_id: str, local_id: Optional[str]) -> Optional[str]:
    """
    Generate a Crop Ontology id from the ontology root and a numeric id.

    >>> generate_id("CO_360", "45")
    'CO_360:0000045'

    Ids longer than the pad width are kept whole.

    :param root_id:
    :param local_id:
    :return:
    """
    if local_id is None:
        return None
    return f"{root_id}:{str(local_id).zfill(ID_LENGTH)}"


def split_list(text: Optional[str], separator: str = ",") -> List[str]:
    """
    Split a separated list, trimming each entry and dropping empty ones.

    :param text:
    :param separator:
    :return:
    """
    if not text:
        return []
    return [part.strip() for part in text.split(separator) if part.strip()]


def obo_timestamp(now: datetime = None) -> str:
    """Timestamp in the OBO header format ``dd:MM:yyyy HH:mm``."""
    if now is None:
        now = datetime.now()
    return now.strftime("%d:%m:%Y %H:%M")
