#Purpose: Highway entrance lookup "adapter/client" (Kakao Local keyword search).
#Sole responsibility: return candidate expressway entrance points near a position.
#Used only by the driving HIGHWAY variant (routing/highway.py picks the best one).


from dotenv import load_dotenv
import logging
import os
from typing import Dict, List, Sequence, Tuple

import requests

from geo import Point
from .models import MALFORMED_PAYLOAD_ERRORS, RoutingError

# Example in .env:
# KAKAO_REST_API_KEY=your-key
load_dotenv()
KAKAO_REST_API_KEY = os.getenv("KAKAO_REST_API_KEY", "")
KAKAO_KEYWORD_URL = "https://dapi.kakao.com/v2/local/search/keyword.json"

logger = logging.getLogger(__name__)

# interchange, tollgate, "toll gate", "toll booth", "airport road", "expressway"
ENTRANCE_KEYWORDS: Tuple[str, ...] = ("IC", "TG", "톨게이트", "요금소", "공항도로", "고속도로")


class PlacesError(RoutingError):
    """Raised when the places service cannot be reached."""
    pass


class KakaoEntranceFinder:
    """
    EntranceFinder backed by the Kakao Local keyword search API.
    One request per keyword; results are de-duplicated by coordinate.
    """

    def __init__(self, api_key: str = None, timeout: float = 5, keywords: Sequence[str] = ENTRANCE_KEYWORDS, page_size: int = 10):
        self.api_key = api_key if api_key is not None else KAKAO_REST_API_KEY
        self.timeout = timeout
        self.keywords = tuple(keywords)
        self.page_size = page_size

    def _search(self, keyword: str, near: Point, radius_m: float) -> List[Dict]:
        try:
            response = requests.get(
                KAKAO_KEYWORD_URL,
                headers={"Authorization": f"KakaoAK {self.api_key}"},
                params={
                    "query": keyword,
                    "x": near.lng,
                    "y": near.lat,
                    "radius": int(min(radius_m, 20000)), # API maximum is 20 km
                    "sort": "distance",
                    "size": self.page_size,
                },
                timeout=self.timeout,
            )
            response.raise_for_status()
            return response.json().get("documents", []) or []
        except requests.RequestException as e:
            raise PlacesError(f"Places search for '{keyword}' failed: {e}") from e
        except MALFORMED_PAYLOAD_ERRORS as e:
            raise PlacesError(f"Places search for '{keyword}' returned an unusable body") from e

    def find_entrances(self, near: Point, radius_m: float) -> List[Point]:
        """
        Unique entrance coordinates within radius_m of `near`, in discovery order.
        """
        if not self.api_key:
            logger.warning("KAKAO_REST_API_KEY is missing; highway entrance search disabled.")
            return []

        seen = set()
        entrances: List[Point] = []
        for keyword in self.keywords:
            for doc in self._search(keyword, near, radius_m):
                try:
                    key = (doc.get("y"), doc.get("x"))
                    if key in seen:
                        continue
                    seen.add(key)
                    entrances.append(Point(lat=float(doc["y"]), lng=float(doc["x"])))
                except MALFORMED_PAYLOAD_ERRORS as e:
                    raise PlacesError(f"Places search for '{keyword}' returned a malformed place: {e!r}") from e
        return entrances
