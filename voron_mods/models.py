# voron_mods/models.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from .config import (
    MOD_BASE_URL,
    README_BLOB_BASE_URL,
    README_FILENAME,
    REPO_PATH_PREFIX,
    UNSUPPORTED,
)


@dataclass(frozen=True)
class Compatibility:
    """
    One flag per printer family: "✓" supported, "✗" unsupported, "?" unknown.

    "?" exists so snapshots stay readable by consumers that know about it;
    the normalizer only ever produces "✓" / "✗".
    """
    v0: str = UNSUPPORTED
    v0_1: str = UNSUPPORTED
    v1_8: str = UNSUPPORTED
    v2_4: str = UNSUPPORTED
    trident: str = UNSUPPORTED

    def to_dict(self) -> dict[str, str]:
        return {
            "v0": self.v0,
            "v0_1": self.v0_1,
            "v1_8": self.v1_8,
            "v2_4": self.v2_4,
            "trident": self.trident,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Compatibility":
        return cls(**{k: str(data.get(k, UNSUPPORTED)) for k in cls().to_dict()})


@dataclass
class DraftMod:
    """
    Row model produced by the table parser, before image resolution.

    source_path is the mod folder relative to printer_mods/ and is None for
    rows that link outside the upstream repository.
    """
    creator: str
    title: str
    description: str
    link: str = MOD_BASE_URL
    compatibility: Compatibility = field(default_factory=Compatibility)
    last_changed: Optional[str] = None
    source_path: Optional[str] = None

    @property
    def author_slug(self) -> Optional[str]:
        if not self.source_path:
            return None
        return self.source_path.split("/")[0]


@dataclass(frozen=True)
class Mod:
    """Final, serialized catalog entry."""
    creator: str
    title: str
    description: str
    link: str
    compatibility: Compatibility
    last_changed: Optional[str] = None
    image: Optional[str] = None
    repo_path: Optional[str] = None
    readme_url: Optional[str] = None

    @classmethod
    def from_draft(cls, draft: DraftMod, image: Optional[str] = None) -> "Mod":
        repo_path = None
        readme_url = None
        if draft.source_path:
            repo_path = f"{REPO_PATH_PREFIX}/{draft.source_path}"
            readme_url = f"{README_BLOB_BASE_URL}/{draft.source_path}/{README_FILENAME}"

        return cls(
            creator=draft.creator,
            title=draft.title,
            description=draft.description,
            link=draft.link,
            compatibility=draft.compatibility,
            last_changed=draft.last_changed,
            image=image,
            repo_path=repo_path,
            readme_url=readme_url,
        )

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "creator": self.creator,
            "title": self.title,
            "description": self.description,
            "link": self.link,
            "compatibility": self.compatibility.to_dict(),
        }
        # Optional keys are omitted rather than written as null
        if self.last_changed is not None:
            out["lastChanged"] = self.last_changed
        if self.image is not None:
            out["image"] = self.image
        if self.repo_path is not None:
            out["repoPath"] = self.repo_path
        if self.readme_url is not None:
            out["readmeUrl"] = self.readme_url
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Mod":
        return cls(
            creator=str(data.get("creator", "")),
            title=str(data.get("title", "")),
            description=str(data.get("description", "")),
            link=str(data.get("link", "")),
            compatibility=Compatibility.from_dict(data.get("compatibility") or {}),
            last_changed=data.get("lastChanged"),
            image=data.get("image"),
            repo_path=data.get("repoPath"),
            readme_url=data.get("readmeUrl"),
        )


@dataclass(frozen=True)
class ImageCacheEntry:
    """
    Cached resolution outcome for one source path.

    image=None is the explicit "no image" outcome. last_changed is the
    upstream change token the outcome was computed for.
    """
    image: Optional[str]
    last_changed: Optional[str]


@dataclass(frozen=True)
class ModsSnapshot:
    mods: list[Mod]
    last_updated: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "mods": [m.to_dict() for m in self.mods],
            "lastUpdated": self.last_updated,
        }
