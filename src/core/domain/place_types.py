"""Tabla de tipos de lugar de iNaturalist.

Dato de referencia (solo lectura): no interviene en la cola ni en el
despacho. Se expone para que las aplicaciones traduzcan `place_type` de las
respuestas de `/places`.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping

PLACE_TYPES: Mapping[int, str] = MappingProxyType(
    {
        0: "Undefined",
        2: "Street Segment",
        5: "Intersection",
        6: "Street",
        7: "Town",
        8: "State",
        9: "County",
        10: "Local Administrative Area",
        12: "Country",
        13: "Island",
        14: "Airport",
        15: "Drainage",
        16: "Land Feature",
        17: "Miscellaneous",
        18: "Nationality",
        19: "Supername",
        20: "Point of Interest",
        21: "Region",
        24: "Colloquial",
        25: "Zone",
        26: "Historical State",
        27: "Historical County",
        29: "Continent",
        33: "Estate",
        35: "Historical Town",
        36: "Aggregate",
        100: "Open Space",
        101: "Territory",
        102: "District",
        103: "Province",
        1000: "Municipality",
        1001: "Parish",
        1002: "Department Segment",
        1003: "City Building",
        1004: "Commune",
        1005: "Governorate",
        1006: "Prefecture",
        1007: "Canton",
        1008: "Republic",
        1009: "Division",
        1010: "Subdivision",
        1011: "Village block",
        1012: "Sum",
        1013: "Unknown",
        1014: "Shire",
        1015: "Prefecture City",
        1016: "Regency",
        1017: "Constituency",
        1018: "Local Authority",
        1019: "Poblacion",
        1020: "Delegation",
    }
)


def place_type_name(code: int) -> str | None:
    return PLACE_TYPES.get(code)
