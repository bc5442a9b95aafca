from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _image_url(images: List[Dict[str, Any]], index: int = 0) -> Optional[str]:
    if not images:
        return None
    if 0 <= index < len(images):
        return images[index].get('url')
    return images[0].get('url')


@dataclass
class TrackSuggestion:
    """Lightweight track shown in search autocomplete."""
    id: str
    name: str
    artists: List[str] = field(default_factory=list)
    album_name: str = ''
    image_url: Optional[str] = None
    preview_url: Optional[str] = None

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> 'TrackSuggestion':
        album = data.get('album') or {}
        images = album.get('images') or []
        # Smallest image (third size) is enough for a dropdown
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            artists=[a.get('name', '') for a in data.get('artists') or []],
            album_name=album.get('name', ''),
            image_url=_image_url(images, 2),
            preview_url=data.get('preview_url'),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'artists': list(self.artists),
            'album': {'name': self.album_name, 'imageUrl': self.image_url},
            'previewUrl': self.preview_url,
        }


@dataclass
class TrackRecord:
    id: str
    name: str
    artists: List[str] = field(default_factory=list)
    album_name: str = ''
    image_url: Optional[str] = None
    preview_url: Optional[str] = None
    duration_ms: int = 0
    release_date: str = ''

    @classmethod
    def from_spotify(cls, data: Dict[str, Any]) -> 'TrackRecord':
        album = data.get('album') or {}
        return cls(
            id=data.get('id'),
            name=data.get('name', ''),
            artists=[a.get('name', '') for a in data.get('artists') or []],
            album_name=album.get('name', ''),
            image_url=_image_url(album.get('images') or []),
            preview_url=data.get('preview_url'),
            duration_ms=int(data.get('duration_ms') or 0),
            release_date=album.get('release_date', ''),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'artists': list(self.artists),
            'album': {'name': self.album_name, 'imageUrl': self.image_url},
            'previewUrl': self.preview_url,
            'durationMs': self.duration_ms,
            'releaseDate': self.release_date,
        }
