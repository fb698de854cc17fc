# models.py
from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import List, Dict, Any, Optional

class EventType(Enum):
    START="start"; STOP="stop"

@dataclass(frozen=True)
class Movie:
    id:int; title:str; rank:int; year:Optional[int]=None

    @classmethod
    def from_dict(cls, d: Dict[str,Any]) -> "Movie":
        return cls(id=int(d["id"]), title=str(d.get("title", "")), rank=int(d["rank"]),
                   year=(int(d["year"]) if d.get("year") is not None else None))

    def to_dict(self) -> Dict[str,Any]:
        return asdict(self)

@dataclass
class PlaybackRecord:
    datetime: datetime
    event_type: EventType
    country: str
    movie: Movie
    hour_of_day: int = field(init=False)

    def __post_init__(self):
        self.hour_of_day = self.datetime.hour

    def to_source(self) -> Dict[str,Any]:
        # flat document body for bulk indexing
        return {
            "datetime": self.datetime,
            "hour_of_day": self.hour_of_day,
            "event_type": self.event_type.value,
            "country": self.country,
            "movie": self.movie.to_dict(),
        }

@dataclass
class Post:
    title: str
    description: str
    tags: List[str] = field(default_factory=list)

    def to_source(self) -> Dict[str,Any]:
        return {"title": self.title, "description": self.description, "tags": list(self.tags)}
