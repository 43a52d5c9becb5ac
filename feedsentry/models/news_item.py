from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from .threat import ThreatClassification, default_classification


@dataclass(slots=True)
class NewsItem:
    """A normalized feed entry.

    Only ``threat`` (and the derived ``is_alert``) may change after creation;
    remote classification results are applied through
    :func:`feedsentry.processors.ai.dispatcher.apply_ai_result`.
    """

    source: str
    title: str
    link: str
    pub_date: datetime
    threat: ThreatClassification = field(default_factory=default_classification)
    is_alert: bool = False
    lat: Optional[float] = None
    lon: Optional[float] = None
    location_name: Optional[str] = None
    lang: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "source": self.source,
            "title": self.title,
            "link": self.link,
            "pubDate": self.pub_date.isoformat(),
            "isAlert": self.is_alert,
            "threat": self.threat.to_dict(),
        }
        if self.lat is not None and self.lon is not None:
            data["lat"] = self.lat
            data["lon"] = self.lon
            data["locationName"] = self.location_name
        if self.lang is not None:
            data["lang"] = self.lang
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "NewsItem":
        pub_date = datetime.fromisoformat(str(data["pubDate"]))
        if pub_date.tzinfo is None:
            pub_date = pub_date.replace(tzinfo=timezone.utc)
        threat_raw = data.get("threat")
        threat = ThreatClassification.from_dict(threat_raw) if threat_raw else default_classification()
        return cls(
            source=str(data.get("source", "")),
            title=str(data.get("title", "")),
            link=str(data.get("link", "")),
            pub_date=pub_date,
            threat=threat,
            is_alert=bool(data.get("isAlert", threat.is_alert)),
            lat=data.get("lat"),
            lon=data.get("lon"),
            location_name=data.get("locationName"),
            lang=data.get("lang"),
        )
